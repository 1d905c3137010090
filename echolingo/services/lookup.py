"""Dictionary lookups backed by a chat completion endpoint.

The flow is: build a mode-specific prompt, call the endpoint with bounded
retry, repair the returned text into a JSON object, validate the fields the
UI relies on and, for multi-part-of-speech words, merge per-entry lists into
``[pos] text`` aggregates.
"""

from __future__ import annotations

import json
import re
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from echolingo import config_manager as cfg
from echolingo import logging_manager as log_mgr
from echolingo import prompt_templates
from echolingo.errors import (
    MalformedResponseError,
    ProviderError,
    SchemaError,
    ValidationError,
)
from echolingo.llm_client import LLMClient, LLMResponse, create_client_from_settings

logger = log_mgr.get_logger().getChild("services.lookup")

_FENCE_START = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_END = re.compile(r"```\s*$")
_OBJECT_SPAN = re.compile(r"\{[\s\S]*\}")


def strip_code_fence(text: str) -> str:
    """Remove a surrounding Markdown code fence from ``text`` if present."""

    stripped = (text or "").strip()
    if stripped.startswith("```"):
        stripped = _FENCE_START.sub("", stripped)
        stripped = _FENCE_END.sub("", stripped).strip()
    return stripped


def parse_json_payload(text: str) -> Dict[str, Any]:
    """Parse the provider text into a JSON object, repairing common wrappers."""

    candidate = strip_code_fence(text)
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError:
        match = _OBJECT_SPAN.search(candidate)
        if not match:
            raise MalformedResponseError(
                "Failed to parse JSON from completion response", raw_text=text
            ) from None
        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError as exc:
            raise MalformedResponseError(
                "Failed to parse JSON from completion response", raw_text=text
            ) from exc

    if not isinstance(parsed, dict):
        raise MalformedResponseError(
            "Completion response is not a JSON object", raw_text=text
        )
    return parsed


def _is_filled(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, (str, list, dict)):
        return len(value) > 0
    return True


def validate_idiom_payload(payload: Dict[str, Any]) -> None:
    missing = [
        field
        for field in ("idiom", "meaning", "persianTranslations")
        if not _is_filled(payload.get(field))
    ]
    if missing:
        raise SchemaError(f"Invalid idiom response: missing {', '.join(missing)}")


def validate_vocabulary_payload(payload: Dict[str, Any]) -> bool:
    """Validate a vocabulary payload and return whether it carries entries."""

    if not _is_filled(payload.get("word")):
        raise SchemaError("Invalid vocabulary response: missing word")

    entries = payload.get("entries")
    has_entries = isinstance(entries, list) and len(entries) > 0
    has_top_level = isinstance(payload.get("definitions"), list) and isinstance(
        payload.get("persianTranslations"), list
    )
    if not has_entries and not has_top_level:
        raise SchemaError("Invalid vocabulary response: missing entries and top-level arrays")

    if has_entries:
        for entry in entries:
            if (
                not isinstance(entry, dict)
                or not _is_filled(entry.get("partOfSpeech"))
                or not isinstance(entry.get("definitions"), list)
                or not isinstance(entry.get("persianTranslations"), list)
            ):
                raise SchemaError("Invalid vocabulary response: malformed entry")
    return has_entries


def _tagged(pos: str, items: Any) -> List[str]:
    if not isinstance(items, list):
        return []
    return [f"[{pos}] {item}" for item in items]


def aggregate_entries(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Fill absent top-level lists with deduplicated ``[pos] text`` aggregates.

    Lists the provider already returned are left untouched.
    """

    result = dict(payload)
    entries = result.get("entries")
    if not isinstance(entries, list) or not entries:
        return result

    merged: Dict[str, Dict[str, None]] = {
        "definitions": {},
        "examples": {},
        "persianTranslations": {},
    }
    for entry in entries:
        pos = str(entry.get("partOfSpeech")).strip().lower()
        for field, bucket in merged.items():
            for item in _tagged(pos, entry.get(field)):
                bucket.setdefault(item, None)

    for field, bucket in merged.items():
        if not isinstance(result.get(field), list):
            result[field] = list(bucket)
    return result


def derive_pos(payload: Dict[str, Any]) -> str:
    """Return the distinct entry parts of speech joined as ``"noun | verb"``."""

    entries = payload.get("entries")
    if not isinstance(entries, list):
        return ""
    seen: Dict[str, None] = {}
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        pos = str(entry.get("partOfSpeech") or "").strip().lower()
        if pos:
            seen.setdefault(pos, None)
    return " | ".join(seen)


def normalize_lookup_text(text: Any) -> str:
    if not isinstance(text, str) or not text.strip():
        raise ValidationError("Word is required")
    return text.strip()


def normalize_mode(mode: Any) -> str:
    resolved = (mode or prompt_templates.VOCABULARY_MODE)
    if not isinstance(resolved, str) or resolved not in prompt_templates.VALID_MODES:
        raise ValidationError('Invalid mode. Must be "vocabulary" or "idiom"')
    return resolved


@contextmanager
def _client_scope(
    client: Optional[LLMClient], settings: cfg.EcholingoSettings
) -> Iterator[LLMClient]:
    if client is not None:
        yield client
        return
    created = create_client_from_settings(settings)
    try:
        yield created
    finally:
        created.close()


def lookup_entry(
    text: Any,
    mode: Any = prompt_templates.VOCABULARY_MODE,
    *,
    client: Optional[LLMClient] = None,
    settings: Optional[cfg.EcholingoSettings] = None,
    backoff_seconds: Optional[float] = None,
) -> Dict[str, Any]:
    """Look up ``text`` and return the validated, aggregated payload.

    Raises :class:`ValidationError` before any network call for blank input.
    """

    query = normalize_lookup_text(text)
    resolved_mode = normalize_mode(mode)
    resolved_settings = settings or cfg.get_settings()

    with _client_scope(client, resolved_settings) as active_client:
        payload = prompt_templates.make_lookup_payload(
            query,
            resolved_mode,
            model=active_client.model,
            temperature=resolved_settings.llm_temperature,
            max_tokens=resolved_settings.llm_max_tokens,
        )
        response: LLMResponse = active_client.send_chat_request(
            payload,
            max_attempts=resolved_settings.llm_max_attempts,
            backoff_seconds=(
                backoff_seconds
                if backoff_seconds is not None
                else resolved_settings.llm_backoff_seconds
            ),
            jitter_seconds=resolved_settings.llm_jitter_seconds,
            label=f"{resolved_mode}:{query}",
        )

    if response.error:
        raise ProviderError(
            f"Completion request failed: {response.error}",
            attempts=response.attempts,
        )

    parsed = parse_json_payload(response.text)
    if resolved_mode == prompt_templates.IDIOM_MODE:
        validate_idiom_payload(parsed)
        return parsed

    if validate_vocabulary_payload(parsed):
        parsed = aggregate_entries(parsed)
    logger.debug(
        "Lookup for %r produced %s definition(s)",
        query,
        len(parsed.get("definitions") or []),
        extra={"event": "lookup.completed", "mode": resolved_mode},
    )
    return parsed


__all__ = [
    "aggregate_entries",
    "derive_pos",
    "lookup_entry",
    "normalize_lookup_text",
    "normalize_mode",
    "parse_json_payload",
    "strip_code_fence",
    "validate_idiom_payload",
    "validate_vocabulary_payload",
]
