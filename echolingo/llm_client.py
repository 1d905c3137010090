"""Utility classes for interacting with OpenAI-compatible chat completion endpoints."""

from __future__ import annotations

import json
import random
import time
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Optional

import requests

from echolingo import config_manager as cfg
from echolingo import logging_manager as log_mgr

logger = log_mgr.get_logger().getChild("llm_client")

TokenUsage = Dict[str, int]
Validator = Callable[[str], bool]


@dataclass(frozen=True)
class ClientSettings:
    """Immutable collection of configuration parameters for an :class:`LLMClient`."""

    model: str = cfg.DEFAULT_MODEL
    api_url: str = cfg.DEFAULT_LLM_URL
    api_key: Optional[str] = None
    timeout: int = cfg.DEFAULT_LLM_TIMEOUT_SECONDS
    debug: bool = False

    def with_updates(self, **updates: Any) -> "ClientSettings":
        """Return a copy of the settings with provided keyword overrides applied."""

        return replace(self, **updates)


@dataclass
class LLMResponse:
    """Container for responses returned by :meth:`LLMClient.send_chat_request`."""

    text: str
    status_code: int
    token_usage: TokenUsage
    raw: Optional[Any] = None
    error: Optional[str] = None
    attempts: int = 1


def compute_backoff_delay(
    attempt: int,
    *,
    backoff_seconds: float,
    jitter_seconds: float,
) -> float:
    """Return the delay before retrying after ``attempt`` (1-based) failed.

    The base delay doubles on every attempt and a uniform jitter in
    ``[0, jitter_seconds)`` is added on top.
    """

    base = backoff_seconds * (2 ** (attempt - 1))
    jitter = random.uniform(0.0, jitter_seconds) if jitter_seconds > 0 else 0.0
    return base + jitter


class LLMClient:
    """Stateless helper for issuing chat completion requests."""

    def __init__(
        self,
        settings: Optional[ClientSettings] = None,
        *,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._settings = settings or ClientSettings()
        self._session = session or requests.Session()

    @property
    def settings(self) -> ClientSettings:
        return self._settings

    @property
    def model(self) -> str:
        return self._settings.model

    @property
    def api_url(self) -> str:
        return self._settings.api_url

    @property
    def debug_enabled(self) -> bool:
        return bool(self._settings.debug)

    # ------------------------------------------------------------------
    # Logging helpers
    # ------------------------------------------------------------------
    def _log_debug(self, message: str, *args: Any) -> None:
        if self.debug_enabled:
            logger.debug(message, *args)

    # ------------------------------------------------------------------
    # Response parsing
    # ------------------------------------------------------------------
    @staticmethod
    def _extract_token_usage(data: Dict[str, Any]) -> TokenUsage:
        usage: TokenUsage = {}
        raw_usage = data.get("usage")
        if not isinstance(raw_usage, dict):
            return usage
        for key in ("prompt_tokens", "completion_tokens", "total_tokens"):
            value = raw_usage.get(key)
            if isinstance(value, int):
                usage[key] = value
        return usage

    def _parse_json_response(self, response: requests.Response) -> LLMResponse:
        try:
            data = response.json()
        except ValueError as exc:
            return LLMResponse(
                text="",
                status_code=response.status_code,
                token_usage={},
                raw=response.text,
                error=f"Invalid JSON response: {exc}",
            )

        if not isinstance(data, dict):
            return LLMResponse(
                text="",
                status_code=response.status_code,
                token_usage={},
                raw=data,
                error="Unexpected response payload",
            )

        text = ""
        choices = data.get("choices")
        if isinstance(choices, list) and choices:
            message = choices[0].get("message") or {}
            content = message.get("content")
            if isinstance(content, str):
                text = content

        usage = self._extract_token_usage(data)
        if usage:
            self._log_debug(
                "Token usage - prompt: %s, completion: %s",
                usage.get("prompt_tokens", 0),
                usage.get("completion_tokens", 0),
            )
        return LLMResponse(
            text=text,
            status_code=response.status_code,
            token_usage=usage,
            raw=data,
        )

    # ------------------------------------------------------------------
    # Request execution
    # ------------------------------------------------------------------
    def _execute_request(
        self, payload: Dict[str, Any], *, timeout: Optional[int] = None
    ) -> LLMResponse:
        timeout = timeout or self._settings.timeout
        self._log_debug("Dispatching LLM request to %s", self.api_url)
        self._log_debug("Payload: %s", json.dumps(payload, indent=2, ensure_ascii=False))

        headers: Dict[str, str] = {}
        if self._settings.api_key:
            headers["Authorization"] = f"Bearer {self._settings.api_key}"

        response = self._session.post(
            self.api_url,
            json=payload,
            headers=headers or None,
            timeout=timeout,
        )

        if response.status_code != 200:
            body_preview = response.text[:300]
            error_message = f"HTTP {response.status_code}"
            if body_preview:
                error_message = f"{error_message}: {body_preview}"
            return LLMResponse(
                text="",
                status_code=response.status_code,
                token_usage={},
                raw=response.text,
                error=error_message,
            )

        return self._parse_json_response(response)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def send_chat_request(
        self,
        payload: Dict[str, Any],
        *,
        max_attempts: int = cfg.DEFAULT_MAX_ATTEMPTS,
        timeout: Optional[int] = None,
        validator: Optional[Validator] = None,
        backoff_seconds: float = cfg.DEFAULT_BACKOFF_SECONDS,
        jitter_seconds: float = cfg.DEFAULT_JITTER_SECONDS,
        label: Optional[str] = None,
    ) -> LLMResponse:
        """Send a chat request with exponential backoff and optional validation.

        Never raises for transport failures: when every attempt fails the
        returned :class:`LLMResponse` carries the last error message.
        """

        working_payload = dict(payload)
        working_payload.setdefault("model", self.model)
        last_error: Optional[str] = None
        last_status = 0
        tag = label or working_payload.get("model")

        for attempt in range(1, max_attempts + 1):
            try:
                result = self._execute_request(working_payload, timeout=timeout)
            except requests.exceptions.RequestException as exc:
                last_error = str(exc) or exc.__class__.__name__
            else:
                last_status = result.status_code
                if result.error:
                    last_error = result.error
                else:
                    text = result.text.strip()
                    if not text:
                        last_error = "Empty response"
                    elif validator and not validator(text):
                        last_error = "Validation failed"
                    else:
                        result.attempts = attempt
                        return result

            if attempt >= max_attempts:
                break
            delay = compute_backoff_delay(
                attempt, backoff_seconds=backoff_seconds, jitter_seconds=jitter_seconds
            )
            logger.warning(
                "LLM request %s failed (attempt %s/%s): %s. Retrying in %.0fms.",
                tag,
                attempt,
                max_attempts,
                last_error,
                delay * 1000,
                extra={"event": "llm.retry", "attempt": attempt},
            )
            time.sleep(delay)

        return LLMResponse(
            text="",
            status_code=last_status,
            token_usage={},
            raw=None,
            error=last_error or "Unknown error",
            attempts=max_attempts,
        )

    def close(self) -> None:
        """Release any network resources associated with this client."""

        self._session.close()

    def __enter__(self) -> "LLMClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # pragma: no cover - trivial
        self.close()


def create_client(
    *,
    model: Optional[str] = None,
    api_url: Optional[str] = None,
    api_key: Optional[str] = None,
    timeout: Optional[int] = None,
    debug: bool = False,
    session: Optional[requests.Session] = None,
) -> LLMClient:
    """Return a new :class:`LLMClient` with the provided configuration."""

    settings = ClientSettings(
        model=model or cfg.DEFAULT_MODEL,
        api_url=api_url or cfg.DEFAULT_LLM_URL,
        api_key=api_key,
        timeout=timeout or cfg.DEFAULT_LLM_TIMEOUT_SECONDS,
        debug=debug,
    )
    return LLMClient(settings=settings, session=session)


def create_client_from_settings(
    settings: cfg.EcholingoSettings,
    *,
    session: Optional[requests.Session] = None,
) -> LLMClient:
    """Return an :class:`LLMClient` configured from application settings."""

    api_key = settings.openai_api_key.get_secret_value() if settings.openai_api_key else None
    return create_client(
        model=settings.llm_model,
        api_url=settings.llm_api_url,
        api_key=api_key,
        timeout=settings.llm_timeout_seconds,
        debug=settings.debug,
        session=session,
    )


__all__ = [
    "ClientSettings",
    "LLMClient",
    "LLMResponse",
    "compute_backoff_delay",
    "create_client",
    "create_client_from_settings",
]
