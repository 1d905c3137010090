"""Configuration management for echolingo."""
from __future__ import annotations

from .constants import (
    BATCH_BACKOFF_SECONDS,
    CONF_DIR,
    DEFAULT_BACKOFF_SECONDS,
    DEFAULT_CONFIG_PATH,
    DEFAULT_JITTER_SECONDS,
    DEFAULT_LLM_TIMEOUT_SECONDS,
    DEFAULT_LLM_URL,
    DEFAULT_LOCAL_CONFIG_PATH,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_TEMPERATURE,
    PROJECT_DIR,
    VALID_STORAGE_BACKENDS,
)
from .loader import get_settings, load_configuration, reset_settings, resolve_sqlite_path
from .settings import (
    EcholingoSettings,
    EnvironmentOverrides,
    normalize_storage_backend,
)

__all__ = [
    "BATCH_BACKOFF_SECONDS",
    "CONF_DIR",
    "DEFAULT_BACKOFF_SECONDS",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_JITTER_SECONDS",
    "DEFAULT_LLM_TIMEOUT_SECONDS",
    "DEFAULT_LLM_URL",
    "DEFAULT_LOCAL_CONFIG_PATH",
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_MAX_TOKENS",
    "DEFAULT_MODEL",
    "DEFAULT_TEMPERATURE",
    "PROJECT_DIR",
    "VALID_STORAGE_BACKENDS",
    "EcholingoSettings",
    "EnvironmentOverrides",
    "get_settings",
    "load_configuration",
    "normalize_storage_backend",
    "reset_settings",
    "resolve_sqlite_path",
]
