"""Select and construct the lexicon store configured for this process."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from .. import config_manager as cfg
from .. import logging_manager
from ..database.engine import sqlite_url_for_path
from ..errors import StorageError
from .lexicon_store import Clock, LexiconStore, MemoryLexiconStore
from .sql_lexicon_store import SqlLexiconStore

logger = logging_manager.get_logger().getChild("store_factory")


def _nearest_existing_parent(path: Path) -> Path:
    candidate = path
    while not candidate.exists() and candidate != candidate.parent:
        candidate = candidate.parent
    return candidate


def is_directory_writable(path: Path) -> bool:
    """Return whether ``path`` (or its closest existing ancestor) accepts writes."""

    return os.access(_nearest_existing_parent(path), os.W_OK)


def resolve_backend(settings: cfg.EcholingoSettings) -> str:
    """Return the concrete backend name, resolving ``auto`` once."""

    backend = settings.resolved_storage_backend()
    if backend != "auto":
        return backend
    if settings.production:
        return "memory"
    sqlite_path = cfg.resolve_sqlite_path(settings)
    if not is_directory_writable(sqlite_path.parent):
        return "memory"
    return "sqlite"


def build_lexicon_store(
    settings: Optional[cfg.EcholingoSettings] = None,
    *,
    clock: Optional[Clock] = None,
) -> LexiconStore:
    """Construct the store selected by ``settings.storage_backend``."""

    resolved = settings or cfg.get_settings()
    backend = resolve_backend(resolved)

    if backend == "memory":
        store: LexiconStore = MemoryLexiconStore(clock=clock)
    elif backend == "remote":
        if resolved.database_url is None:
            raise StorageError("The remote storage backend requires DATABASE_URL")
        store = SqlLexiconStore(
            resolved.database_url.get_secret_value(),
            backend_name="remote",
            clock=clock,
        )
    else:
        store = SqlLexiconStore(
            sqlite_url_for_path(cfg.resolve_sqlite_path(resolved)),
            backend_name="sqlite",
            clock=clock,
        )

    logger.info(
        "Using %s lexicon store",
        backend,
        extra={"event": "store.selected", "backend": backend},
    )
    return store


__all__ = ["build_lexicon_store", "is_directory_writable", "resolve_backend"]
