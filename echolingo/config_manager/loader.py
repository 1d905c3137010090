"""Configuration loading utilities."""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from echolingo import logging_manager

from .constants import (
    CONFIG_FILE_ENV,
    DEFAULT_CONFIG_PATH,
    DEFAULT_LOCAL_CONFIG_PATH,
    PROJECT_DIR,
    VAULT_FILE_ENV,
)
from .settings import (
    EcholingoSettings,
    apply_settings_updates,
    load_environment_overrides,
    load_vault_secrets,
)

logger = logging_manager.get_logger().getChild("config")

_ACTIVE_SETTINGS: Optional[EcholingoSettings] = None


def _read_config_json(path: Optional[Path], label: str = "configuration") -> Dict[str, Any]:
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = json.load(handle)
    except FileNotFoundError:
        return {}
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning(
            "Error loading %s from %s: %s. Proceeding without it.",
            label,
            path,
            exc,
            extra={"event": "config.file.invalid"},
        )
        return {}
    if not isinstance(data, dict):
        logger.warning(
            "Ignoring %s at %s: expected a JSON object.",
            label,
            path,
            extra={"event": "config.file.invalid"},
        )
        return {}
    logger.debug("Loaded %s from %s", label, path)
    return data


def _resolve_override_path(config_file: Optional[str]) -> Path:
    candidate = config_file or os.environ.get(CONFIG_FILE_ENV)
    if not candidate:
        return DEFAULT_LOCAL_CONFIG_PATH
    override_path = Path(candidate).expanduser()
    if not override_path.is_absolute():
        override_path = (Path.cwd() / override_path).resolve()
    return override_path


def load_configuration(config_file: Optional[str] = None) -> EcholingoSettings:
    """Load the layered configuration: defaults, JSON files, vault, environment."""

    global _ACTIVE_SETTINGS

    payload: Dict[str, Any] = {}
    payload.update(_read_config_json(DEFAULT_CONFIG_PATH, label="default configuration"))
    payload.update(
        _read_config_json(_resolve_override_path(config_file), label="local configuration")
    )

    try:
        settings = EcholingoSettings.model_validate(payload)
    except ValidationError as exc:
        raise RuntimeError("Invalid configuration detected") from exc

    vault_path = os.environ.get(VAULT_FILE_ENV)
    if vault_path:
        vault_updates = load_vault_secrets(Path(vault_path).expanduser())
        if vault_updates:
            logger.info(
                "Loaded secret overrides from vault file at %s",
                vault_path,
                extra={"event": "config.vault.loaded"},
            )
        settings = apply_settings_updates(settings, dict(vault_updates))

    settings = apply_settings_updates(settings, load_environment_overrides())

    _ACTIVE_SETTINGS = settings
    return settings


def get_settings() -> EcholingoSettings:
    """Return the currently loaded :class:`EcholingoSettings`, loading on first use."""

    if _ACTIVE_SETTINGS is None:
        return load_configuration()
    return _ACTIVE_SETTINGS


def reset_settings() -> None:
    """Forget the cached settings so the next access reloads them."""

    global _ACTIVE_SETTINGS
    _ACTIVE_SETTINGS = None


def resolve_sqlite_path(settings: EcholingoSettings) -> Path:
    """Return the absolute path of the SQLite database file."""

    path = Path(settings.sqlite_path).expanduser()
    if not path.is_absolute():
        path = PROJECT_DIR / path
    return path


__all__ = [
    "get_settings",
    "load_configuration",
    "reset_settings",
    "resolve_sqlite_path",
]
