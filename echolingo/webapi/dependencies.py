"""Dependency wiring for the FastAPI application."""

from __future__ import annotations

from typing import Callable, Iterator

from fastapi import Depends, Request

from .. import config_manager as cfg
from ..errors import StorageError
from ..llm_client import LLMClient
from ..services.lexicon_store import LexiconStore

ClientFactory = Callable[[cfg.EcholingoSettings], LLMClient]


def get_settings(request: Request) -> cfg.EcholingoSettings:
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        return cfg.get_settings()
    return settings


def get_lexicon_store(request: Request) -> LexiconStore:
    """Return the store opened by the application lifespan."""

    store = getattr(request.app.state, "lexicon_store", None)
    if store is None:
        raise StorageError("Lexicon store is not initialised")
    return store


def get_llm_client(
    request: Request,
    settings: cfg.EcholingoSettings = Depends(get_settings),
) -> Iterator[LLMClient]:
    """Yield a completion client for one request and close it afterwards."""

    factory: ClientFactory = request.app.state.client_factory
    client = factory(settings)
    try:
        yield client
    finally:
        client.close()


__all__ = ["ClientFactory", "get_lexicon_store", "get_llm_client", "get_settings"]
