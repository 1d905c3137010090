"""Resolve settings for CLI commands from configuration and flags."""

from __future__ import annotations

import argparse

from .. import config_manager as cfg
from .. import logging_manager as log_mgr


def settings_from_args(args: argparse.Namespace) -> cfg.EcholingoSettings:
    """Load the layered configuration and apply command line overrides."""

    settings = cfg.load_configuration(getattr(args, "config", None))
    updates = {}
    if getattr(args, "storage_backend", None):
        updates["storage_backend"] = args.storage_backend
    if getattr(args, "sqlite_path", None):
        updates["sqlite_path"] = args.sqlite_path
    if getattr(args, "debug", False):
        updates["debug"] = True
    if updates:
        settings = settings.model_copy(update=updates)
    log_mgr.configure_logging_level(debug_enabled=settings.debug)
    return settings


__all__ = ["settings_from_args"]
