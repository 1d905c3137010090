"""Tests for the lookup normalizer."""

from __future__ import annotations

import json

import pytest

from echolingo.errors import (
    MalformedResponseError,
    ProviderError,
    SchemaError,
    ValidationError,
)
from echolingo.services import lookup
from tests.helpers.lexicon_fakes import (
    IDIOM_PAYLOAD,
    RUN_PAYLOAD,
    FakeLLMClient,
    failed_response,
    ok_response,
)


@pytest.mark.parametrize("text", ["", "   ", "\n\t", None])
def test_blank_input_is_rejected_without_calling_provider(text, settings) -> None:
    client = FakeLLMClient()

    with pytest.raises(ValidationError, match="Word is required"):
        lookup.lookup_entry(text, "vocabulary", client=client, settings=settings)

    assert client.calls == []


def test_unknown_mode_is_rejected(settings) -> None:
    client = FakeLLMClient()

    with pytest.raises(ValidationError, match="Invalid mode"):
        lookup.lookup_entry("run", "phrasebook", client=client, settings=settings)

    assert client.calls == []


def test_missing_mode_defaults_to_vocabulary(settings) -> None:
    client = FakeLLMClient([ok_response(RUN_PAYLOAD)])

    result = lookup.lookup_entry("run", None, client=client, settings=settings)

    assert result["word"] == "run"
    messages = client.calls[0]["payload"]["messages"]
    assert "dictionary" in messages[0]["content"]
    assert '"run"' in messages[1]["content"]


def test_fenced_response_parses_like_plain_json() -> None:
    plain = json.dumps(IDIOM_PAYLOAD)
    fenced = f"```json\n{plain}\n```"

    assert lookup.parse_json_payload(fenced) == lookup.parse_json_payload(plain)
    assert lookup.parse_json_payload(f"```\n{plain}\n```") == IDIOM_PAYLOAD


def test_object_is_extracted_from_surrounding_prose() -> None:
    text = 'Here you go: {"idiom": "x", "meaning": ["y"]} Hope that helps!'

    assert lookup.parse_json_payload(text) == {"idiom": "x", "meaning": ["y"]}


@pytest.mark.parametrize("text", ["no json here", "{not valid}", "[1, 2, 3]"])
def test_unparseable_text_raises_malformed(text) -> None:
    with pytest.raises(MalformedResponseError) as excinfo:
        lookup.parse_json_payload(text)

    assert excinfo.value.raw_text == text


def test_idiom_lookup_returns_payload(settings) -> None:
    client = FakeLLMClient([ok_response(IDIOM_PAYLOAD)])

    result = lookup.lookup_entry("break the ice", "idiom", client=client, settings=settings)

    assert result == IDIOM_PAYLOAD
    assert "idiom" in client.calls[0]["payload"]["messages"][0]["content"]
    assert client.calls[0]["payload"]["response_format"] == {"type": "json_object"}


def test_idiom_missing_translations_is_a_schema_error(settings) -> None:
    payload = dict(IDIOM_PAYLOAD, persianTranslations=[])
    client = FakeLLMClient([ok_response(payload)])

    with pytest.raises(SchemaError, match="persianTranslations"):
        lookup.lookup_entry("break the ice", "idiom", client=client, settings=settings)


@pytest.mark.parametrize(
    "payload",
    [
        {"pronunciation": "/x/", "definitions": [], "persianTranslations": []},
        {"word": "run"},
        {"word": "run", "entries": [{"partOfSpeech": "verb", "definitions": ["d"]}]},
    ],
)
def test_vocabulary_schema_errors(payload) -> None:
    with pytest.raises(SchemaError):
        lookup.validate_vocabulary_payload(payload)


def test_vocabulary_with_top_level_lists_only_is_valid() -> None:
    payload = {"word": "cat", "definitions": ["a small feline"], "persianTranslations": ["گربه"]}

    assert lookup.validate_vocabulary_payload(payload) is False


def test_aggregation_tags_and_deduplicates_entries(settings) -> None:
    client = FakeLLMClient([ok_response(RUN_PAYLOAD)])

    result = lookup.lookup_entry("run", "vocabulary", client=client, settings=settings)

    assert result["definitions"] == [
        "[verb] to move quickly on foot",
        "[verb] to operate",
        "[noun] an act of running",
        "[noun] to operate",
    ]
    assert result["examples"] == [
        "[verb] She runs every morning.",
        "[noun] I went for a run.",
    ]
    assert result["persianTranslations"] == ["[verb] دویدن", "[noun] دو"]


def test_aggregation_drops_exact_duplicates() -> None:
    payload = {
        "word": "set",
        "entries": [
            {"partOfSpeech": "noun", "definitions": ["a group"], "persianTranslations": ["x"]},
            {"partOfSpeech": "NOUN", "definitions": ["a group"], "persianTranslations": ["x"]},
        ],
    }

    result = lookup.aggregate_entries(payload)

    assert result["definitions"] == ["[noun] a group"]
    assert result["persianTranslations"] == ["[noun] x"]
    assert result["examples"] == []


def test_aggregation_never_overwrites_provider_lists() -> None:
    payload = dict(RUN_PAYLOAD, definitions=["provider supplied"])

    result = lookup.aggregate_entries(payload)

    assert result["definitions"] == ["provider supplied"]
    assert result["examples"][0].startswith("[verb]")
    assert "definitions" not in RUN_PAYLOAD


def test_derive_pos_joins_distinct_parts_of_speech() -> None:
    assert lookup.derive_pos(RUN_PAYLOAD) == "verb | noun"
    assert lookup.derive_pos({"word": "cat"}) == ""


def test_provider_failure_raises_provider_error(settings) -> None:
    client = FakeLLMClient([failed_response("HTTP 503: unavailable", attempts=3)])

    with pytest.raises(ProviderError) as excinfo:
        lookup.lookup_entry("run", "vocabulary", client=client, settings=settings)

    assert "HTTP 503" in str(excinfo.value)
    assert excinfo.value.attempts == 3


def test_lookup_passes_retry_policy_to_client(settings) -> None:
    client = FakeLLMClient([ok_response(RUN_PAYLOAD)])

    lookup.lookup_entry("run", "vocabulary", client=client, settings=settings, backoff_seconds=0.8)

    call = client.calls[0]
    assert call["max_attempts"] == 3
    assert call["backoff_seconds"] == 0.8
    assert call["jitter_seconds"] == settings.llm_jitter_seconds


def test_lookup_creates_and_closes_client_when_none_given(monkeypatch, settings) -> None:
    created = []

    def _factory(resolved_settings):
        client = FakeLLMClient([ok_response(IDIOM_PAYLOAD)])
        created.append(client)
        return client

    monkeypatch.setattr(lookup, "create_client_from_settings", _factory)

    lookup.lookup_entry("break the ice", "idiom", settings=settings)

    assert len(created) == 1
    assert created[0].closed is True
