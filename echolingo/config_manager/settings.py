"""Pydantic models and helper utilities for configuration values."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    ValidationError,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from echolingo import logging_manager

from .constants import (
    DEFAULT_BACKOFF_SECONDS,
    DEFAULT_JITTER_SECONDS,
    DEFAULT_LLM_TIMEOUT_SECONDS,
    DEFAULT_LLM_URL,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_SQLITE_RELATIVE,
    DEFAULT_STORAGE_BACKEND,
    DEFAULT_TEMPERATURE,
    SENSITIVE_CONFIG_KEYS,
    VALID_STORAGE_BACKENDS,
)

logger = logging_manager.get_logger().getChild("config")


class EcholingoSettings(BaseModel):
    """Typed representation of the application configuration."""

    model_config = ConfigDict(extra="ignore")

    llm_api_url: str = DEFAULT_LLM_URL
    llm_model: str = DEFAULT_MODEL
    llm_temperature: float = DEFAULT_TEMPERATURE
    llm_max_tokens: int = DEFAULT_MAX_TOKENS
    llm_timeout_seconds: int = DEFAULT_LLM_TIMEOUT_SECONDS
    llm_max_attempts: int = DEFAULT_MAX_ATTEMPTS
    llm_backoff_seconds: float = DEFAULT_BACKOFF_SECONDS
    llm_jitter_seconds: float = DEFAULT_JITTER_SECONDS
    openai_api_key: Optional[SecretStr] = None
    storage_backend: str = DEFAULT_STORAGE_BACKEND
    sqlite_path: str = str(DEFAULT_SQLITE_RELATIVE)
    database_url: Optional[SecretStr] = None
    production: bool = False
    debug: bool = False

    def resolved_storage_backend(self) -> str:
        """Return the normalised storage backend identifier."""

        return normalize_storage_backend(self.storage_backend)


class EnvironmentOverrides(BaseSettings):
    """Configuration overrides sourced from environment variables."""

    model_config = SettingsConfigDict(env_prefix="", extra="ignore")

    llm_api_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("ECHOLINGO_LLM_URL", "OPENAI_API_URL"),
    )
    llm_model: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("ECHOLINGO_LLM_MODEL", "OPENAI_MODEL"),
    )
    llm_timeout_seconds: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("ECHOLINGO_LLM_TIMEOUT")
    )
    openai_api_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("OPENAI_API_KEY", "ECHOLINGO_OPENAI_API_KEY"),
    )
    storage_backend: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("ECHOLINGO_STORAGE_BACKEND")
    )
    sqlite_path: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("ECHOLINGO_SQLITE_PATH")
    )
    database_url: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("DATABASE_URL", "ECHOLINGO_DATABASE_URL"),
    )
    production: Optional[bool] = Field(
        default=None, validation_alias=AliasChoices("ECHOLINGO_PRODUCTION")
    )
    debug: Optional[bool] = Field(
        default=None, validation_alias=AliasChoices("ECHOLINGO_DEBUG")
    )


def normalize_storage_backend(candidate: Any, *, default: str = DEFAULT_STORAGE_BACKEND) -> str:
    """Return a normalised storage backend identifier."""

    if isinstance(candidate, str):
        normalized = candidate.strip().lower()
        if normalized in VALID_STORAGE_BACKENDS:
            return normalized
        logger.warning(
            "Unknown storage backend %r; using %s.",
            candidate,
            default,
            extra={"event": "config.storage_backend.invalid"},
        )
    return default


def load_environment_overrides() -> Dict[str, Any]:
    """Return configuration overrides sourced from environment variables."""

    try:
        overrides = EnvironmentOverrides()
    except ValidationError as exc:
        logger.warning(
            "Invalid environment configuration detected; using defaults.",
            extra={"event": "config.env.validation_error", "error": str(exc)},
        )
        return {}
    return overrides.model_dump(exclude_none=True)


def load_vault_secrets(path: Path) -> Dict[str, SecretStr]:
    """Attempt to read secret values from a vault-style JSON document."""

    try:
        with open(path, "r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except FileNotFoundError:
        logger.debug(
            "Vault secret file not found at %s; skipping.",
            path,
            extra={"event": "config.vault.missing"},
        )
        return {}
    except json.JSONDecodeError as exc:
        logger.warning(
            "Failed to parse vault secret file at %s: %s",
            path,
            exc,
            extra={"event": "config.vault.invalid"},
        )
        return {}

    if not isinstance(payload, dict):
        return {}
    secrets: Dict[str, SecretStr] = {}
    for key in sorted(SENSITIVE_CONFIG_KEYS):
        value = payload.get(key)
        if value:
            secrets[key] = SecretStr(str(value))
    return secrets


def apply_settings_updates(
    settings: EcholingoSettings, updates: Dict[str, Any]
) -> EcholingoSettings:
    """Return a copy of ``settings`` updated with ``updates`` if any values exist."""

    if not updates:
        return settings
    return settings.model_copy(update=updates)


__all__ = [
    "EcholingoSettings",
    "EnvironmentOverrides",
    "apply_settings_updates",
    "load_environment_overrides",
    "load_vault_secrets",
    "normalize_storage_backend",
]
