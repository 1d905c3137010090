"""Shared constants for the configuration manager package."""
from __future__ import annotations

from pathlib import Path

MODULE_DIR = Path(__file__).resolve().parent
PROJECT_DIR = MODULE_DIR.parent.parent.resolve()
CONF_DIR = PROJECT_DIR / "conf"
DEFAULT_CONFIG_PATH = CONF_DIR / "config.json"
DEFAULT_LOCAL_CONFIG_PATH = CONF_DIR / "config.local.json"
CONFIG_FILE_ENV = "ECHOLINGO_CONFIG_FILE"
VAULT_FILE_ENV = "ECHOLINGO_VAULT_FILE"

DEFAULT_LLM_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_TEMPERATURE = 0.3
DEFAULT_MAX_TOKENS = 800
DEFAULT_LLM_TIMEOUT_SECONDS = 60

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BACKOFF_SECONDS = 0.6
BATCH_BACKOFF_SECONDS = 0.8
DEFAULT_JITTER_SECONDS = 0.2

DEFAULT_SQLITE_RELATIVE = Path("data") / "echolingo.db"
VALID_STORAGE_BACKENDS = {"auto", "sqlite", "remote", "memory"}
DEFAULT_STORAGE_BACKEND = "auto"
SENSITIVE_CONFIG_KEYS = {"openai_api_key", "database_url"}

__all__ = [
    "MODULE_DIR",
    "PROJECT_DIR",
    "CONF_DIR",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_LOCAL_CONFIG_PATH",
    "CONFIG_FILE_ENV",
    "VAULT_FILE_ENV",
    "DEFAULT_LLM_URL",
    "DEFAULT_MODEL",
    "DEFAULT_TEMPERATURE",
    "DEFAULT_MAX_TOKENS",
    "DEFAULT_LLM_TIMEOUT_SECONDS",
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_BACKOFF_SECONDS",
    "BATCH_BACKOFF_SECONDS",
    "DEFAULT_JITTER_SECONDS",
    "DEFAULT_SQLITE_RELATIVE",
    "VALID_STORAGE_BACKENDS",
    "DEFAULT_STORAGE_BACKEND",
    "SENSITIVE_CONFIG_KEYS",
]
