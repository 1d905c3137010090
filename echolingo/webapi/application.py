"""Application factory for the FastAPI backend."""

from __future__ import annotations

import os
import re
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import config_manager as cfg
from .. import load_environment
from .. import logging_manager as log_mgr
from ..llm_client import create_client_from_settings
from ..services.lexicon_store import LexiconStore
from ..services.store_factory import build_lexicon_store
from .dependencies import ClientFactory
from .errors import register_exception_handlers
from .routers.export_anki import router as export_router
from .routers.saved_words import router as saved_words_router
from .routers.vocabulary import router as vocabulary_router

load_environment()

LOGGER = log_mgr.get_logger().getChild("webapi")

CORS_ORIGINS_ENV = "ECHOLINGO_API_CORS_ORIGINS"

# Default origins considered safe for local development convenience.
DEFAULT_LOCAL_ORIGINS = (
    "http://localhost",
    "http://127.0.0.1",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
)


def _parse_cors_origins(raw_value: str | None) -> tuple[list[str], bool]:
    """Return the allowed origins and whether credentials are supported."""

    if raw_value is None:
        return list(DEFAULT_LOCAL_ORIGINS), True
    tokens = [token.strip() for token in re.split(r"[\s,]+", raw_value) if token.strip()]
    if not tokens:
        return [], False
    if "*" in tokens:
        return ["*"], False
    return tokens, True


def _configure_cors(app: FastAPI) -> None:
    allowed_origins, allow_credentials = _parse_cors_origins(os.environ.get(CORS_ORIGINS_ENV))
    if not allowed_origins:
        LOGGER.info("CORS middleware disabled; no allowed origins configured.")
        return
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )


def create_app(
    settings: Optional[cfg.EcholingoSettings] = None,
    store: Optional[LexiconStore] = None,
    client_factory: Optional[ClientFactory] = None,
) -> FastAPI:
    """Instantiate and configure the FastAPI application.

    ``store`` and ``client_factory`` replace the configured backends, which
    keeps tests off the network and off disk.
    """

    resolved_settings = settings or cfg.load_configuration()
    log_mgr.configure_logging_level(debug_enabled=resolved_settings.debug)

    @asynccontextmanager
    async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
        active_store = store or build_lexicon_store(resolved_settings)
        active_store.ensure_schema()
        app.state.lexicon_store = active_store
        LOGGER.info(
            "Lexicon store ready",
            extra={"event": "app.startup", "backend": active_store.backend_name},
        )
        try:
            yield
        finally:
            app.state.lexicon_store = None
            try:
                active_store.close()
            except Exception:  # pragma: no cover
                LOGGER.exception("Failed to close lexicon store")

    app = FastAPI(title="echolingo API", version="0.1.0", lifespan=_lifespan)
    app.state.settings = resolved_settings
    app.state.client_factory = client_factory or create_client_from_settings
    app.state.lexicon_store = None

    register_exception_handlers(app)
    _configure_cors(app)

    @app.get("/_health", tags=["health"])
    def healthcheck() -> dict[str, str]:
        """Simple healthcheck endpoint for smoke-testing the server."""

        return {"status": "ok"}

    app.include_router(vocabulary_router)
    app.include_router(saved_words_router)
    app.include_router(export_router)

    return app


__all__ = ["create_app"]
