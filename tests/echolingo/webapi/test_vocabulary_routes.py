from __future__ import annotations

import json

import pytest

from tests.helpers.lexicon_fakes import (
    IDIOM_PAYLOAD,
    RUN_PAYLOAD,
    failed_response,
    ok_response,
)

pytestmark = pytest.mark.webapi


def test_healthcheck(api_client) -> None:
    response = api_client.get("/_health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_vocabulary_lookup_returns_aggregated_payload(api_client, llm_responses, created_clients) -> None:
    llm_responses.append(ok_response(f"```json\n{json.dumps(RUN_PAYLOAD)}\n```"))

    response = api_client.post("/api/vocabulary", json={"word": "run", "mode": "vocabulary"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["word"] == "run"
    assert payload["definitions"][0] == "[verb] to move quickly on foot"
    assert len(payload["entries"]) == 2
    assert created_clients[0].closed is True


def test_idiom_lookup(api_client, llm_responses) -> None:
    llm_responses.append(ok_response(IDIOM_PAYLOAD))

    response = api_client.post("/api/vocabulary", json={"word": "break the ice", "mode": "idiom"})

    assert response.status_code == 200
    assert response.json()["meaning"] == IDIOM_PAYLOAD["meaning"]


def test_blank_word_returns_400_without_provider_call(api_client, created_clients) -> None:
    response = api_client.post("/api/vocabulary", json={"word": "   ", "mode": "vocabulary"})

    assert response.status_code == 400
    assert response.json() == {"error": "Word is required"}
    assert all(client.calls == [] for client in created_clients)


def test_invalid_mode_returns_400(api_client) -> None:
    response = api_client.post("/api/vocabulary", json={"word": "run", "mode": "slang"})

    assert response.status_code == 400
    assert "Invalid mode" in response.json()["error"]


def test_non_json_body_returns_400(api_client) -> None:
    response = api_client.post(
        "/api/vocabulary", content="not json", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert "error" in response.json()


@pytest.mark.parametrize(
    "llm_response",
    [
        failed_response("HTTP 429: slow down"),
        ok_response("I cannot help with that."),
        ok_response({"word": "run"}),
    ],
)
def test_provider_and_parse_failures_return_stable_500(api_client, llm_responses, llm_response) -> None:
    llm_responses.append(llm_response)

    response = api_client.post("/api/vocabulary", json={"word": "run", "mode": "vocabulary"})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to generate vocabulary or idiom information"}


def test_lookup_failure_is_logged_with_request_context(api_client, llm_responses, captured_records) -> None:
    llm_responses.append(failed_response("HTTP 503"))

    api_client.post("/api/vocabulary", json={"word": "run", "mode": "idiom"})

    [record] = captured_records.events("lookup.failed")
    assert (record.word, record.mode, record.stage) == ("run", "idiom", "api.lookup")
    assert record.status == 500
