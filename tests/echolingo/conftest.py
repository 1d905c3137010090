"""Shared fixtures for echolingo tests."""

from __future__ import annotations

import os

# Keep test runs from writing rotating log files into the project tree.
os.environ.setdefault("ECHOLINGO_LOG_DIR", "")

import pytest

from echolingo import logging_manager as log_mgr
from echolingo.config_manager import EcholingoSettings
from echolingo.config_manager import loader as cfg_loader
from tests.helpers.lexicon_fakes import FakeClock, RecordingHandler

_ENV_KEYS = (
    "OPENAI_API_KEY",
    "OPENAI_API_URL",
    "OPENAI_MODEL",
    "ECHOLINGO_OPENAI_API_KEY",
    "ECHOLINGO_LLM_URL",
    "ECHOLINGO_LLM_MODEL",
    "ECHOLINGO_LLM_TIMEOUT",
    "ECHOLINGO_STORAGE_BACKEND",
    "ECHOLINGO_SQLITE_PATH",
    "DATABASE_URL",
    "ECHOLINGO_DATABASE_URL",
    "ECHOLINGO_PRODUCTION",
    "ECHOLINGO_DEBUG",
    "ECHOLINGO_CONFIG_FILE",
    "ECHOLINGO_VAULT_FILE",
)


@pytest.fixture(autouse=True)
def _isolated_configuration(monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(cfg_loader, "_ACTIVE_SETTINGS", None)
    yield


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings(tmp_path) -> EcholingoSettings:
    return EcholingoSettings(
        storage_backend="memory",
        sqlite_path=str(tmp_path / "echolingo.db"),
        llm_backoff_seconds=0.0,
        llm_jitter_seconds=0.0,
    )


@pytest.fixture
def captured_records():
    """Attach a recording handler to the package logger for one test."""

    handler = RecordingHandler()
    logger = log_mgr.get_logger()
    logger.addHandler(handler)
    try:
        yield handler
    finally:
        logger.removeHandler(handler)
