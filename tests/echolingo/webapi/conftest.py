"""Shared fixtures for echolingo route tests."""

from __future__ import annotations

from typing import List

import pytest
from fastapi.testclient import TestClient

from echolingo.llm_client import LLMResponse
from echolingo.services.lexicon_store import MemoryLexiconStore
from echolingo.webapi.application import create_app
from tests.helpers.lexicon_fakes import FakeClock, FakeLLMClient


@pytest.fixture
def lexicon_store() -> MemoryLexiconStore:
    return MemoryLexiconStore(clock=FakeClock())


@pytest.fixture
def llm_responses() -> List[LLMResponse]:
    """Responses handed, in order, to the fake completion client."""

    return []


@pytest.fixture
def created_clients() -> List[FakeLLMClient]:
    return []


@pytest.fixture
def api_client(settings, lexicon_store, llm_responses, created_clients):
    """Yield a ``TestClient`` wired to an in-memory store and a fake LLM."""

    def _client_factory(_settings):
        client = FakeLLMClient(llm_responses)
        created_clients.append(client)
        return client

    app = create_app(settings=settings, store=lexicon_store, client_factory=_client_factory)
    with TestClient(app) as client:
        yield client
