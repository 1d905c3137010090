"""Exception hierarchy for lookups, storage and exports."""

from __future__ import annotations


class EcholingoError(RuntimeError):
    """Base exception raised by echolingo services."""


class ValidationError(EcholingoError):
    """Raised when user input is missing or malformed."""


class ProviderError(EcholingoError):
    """Raised when the completion endpoint fails after all retries."""

    def __init__(self, message: str, *, attempts: int | None = None) -> None:
        self.attempts = attempts
        super().__init__(message)


class MalformedResponseError(EcholingoError):
    """Raised when the provider text cannot be parsed as a JSON object."""

    def __init__(self, message: str, *, raw_text: str | None = None) -> None:
        self.raw_text = raw_text
        super().__init__(message)


class SchemaError(EcholingoError):
    """Raised when a parsed payload lacks required fields."""


class StorageError(EcholingoError):
    """Raised when the backing store is unreachable or rejects a write."""


__all__ = [
    "EcholingoError",
    "ValidationError",
    "ProviderError",
    "MalformedResponseError",
    "SchemaError",
    "StorageError",
]
