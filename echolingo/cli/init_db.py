"""Create the lexicon tables and apply column upgrades."""

from __future__ import annotations

import argparse
from typing import Optional

from .. import logging_manager as log_mgr
from ..errors import StorageError
from ..services.lexicon_store import LexiconStore
from ..services.store_factory import build_lexicon_store
from .context import settings_from_args

logger = log_mgr.get_logger().getChild("cli.init_db")


def run(args: argparse.Namespace, *, store: Optional[LexiconStore] = None) -> int:
    settings = settings_from_args(args)
    try:
        active_store = store or build_lexicon_store(settings)
    except StorageError as exc:
        logger.error("Unable to open lexicon store: %s", exc)
        return 1
    try:
        active_store.ensure_schema()
    except StorageError as exc:
        logger.error("Schema initialisation failed: %s", exc)
        return 1
    finally:
        if store is None:
            active_store.close()
    logger.info(
        "Tables ready",
        extra={"event": "store.schema.ready", "backend": active_store.backend_name},
    )
    return 0


__all__ = ["run"]
