from __future__ import annotations

from typing import Any, Dict, List

import pytest
import requests

from echolingo import llm_client
from echolingo.llm_client import ClientSettings, LLMClient, compute_backoff_delay


class _FakeResponse:
    def __init__(self, status_code: int, payload: Any = None, text: str = "") -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class _FakeSession:
    def __init__(self, outcomes: List[Any]) -> None:
        self.outcomes = list(outcomes)
        self.requests: List[Dict[str, Any]] = []
        self.closed = False

    def post(self, url, *, json=None, headers=None, timeout=None):
        self.requests.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def close(self) -> None:
        self.closed = True


def _completion(content: str) -> _FakeResponse:
    return _FakeResponse(
        200,
        {
            "choices": [{"message": {"role": "assistant", "content": content}}],
            "usage": {"prompt_tokens": 12, "completion_tokens": 34, "total_tokens": 46},
        },
    )


@pytest.fixture
def sleeps(monkeypatch) -> List[float]:
    recorded: List[float] = []
    monkeypatch.setattr(llm_client.time, "sleep", recorded.append)
    return recorded


def test_successful_request_extracts_content_and_usage(sleeps) -> None:
    session = _FakeSession([_completion('{"word": "run"}')])
    client = LLMClient(ClientSettings(api_key="sk-test"), session=session)

    response = client.send_chat_request({"messages": []})

    assert response.error is None
    assert response.text == '{"word": "run"}'
    assert response.token_usage == {"prompt_tokens": 12, "completion_tokens": 34, "total_tokens": 46}
    assert response.attempts == 1
    assert session.requests[0]["headers"] == {"Authorization": "Bearer sk-test"}
    assert session.requests[0]["json"]["model"] == "gpt-4o-mini"
    assert sleeps == []


def test_retries_transport_errors_then_succeeds(sleeps) -> None:
    session = _FakeSession(
        [
            requests.exceptions.ConnectionError("boom"),
            _FakeResponse(500, text="server error"),
            _completion("{}"),
        ]
    )
    client = LLMClient(session=session)

    response = client.send_chat_request(
        {"messages": []}, backoff_seconds=0.6, jitter_seconds=0.0
    )

    assert response.error is None
    assert response.attempts == 3
    assert sleeps == [pytest.approx(0.6), pytest.approx(1.2)]


def test_exhausted_retries_return_last_error_without_final_sleep(sleeps) -> None:
    session = _FakeSession([_FakeResponse(503, text="busy")] * 3)
    client = LLMClient(session=session)

    response = client.send_chat_request(
        {"messages": []}, max_attempts=3, backoff_seconds=0.8, jitter_seconds=0.0
    )

    assert response.error == "HTTP 503: busy"
    assert response.status_code == 503
    assert response.attempts == 3
    assert sleeps == [pytest.approx(0.8), pytest.approx(1.6)]


def test_empty_content_and_validator_failures_are_retried(sleeps) -> None:
    session = _FakeSession([_completion("   "), _completion("nope"), _completion("yes")])
    client = LLMClient(session=session)

    response = client.send_chat_request(
        {"messages": []},
        validator=lambda text: text == "yes",
        backoff_seconds=0.0,
        jitter_seconds=0.0,
    )

    assert response.text == "yes"
    assert len(session.requests) == 3


def test_invalid_json_body_is_reported(sleeps) -> None:
    session = _FakeSession([_FakeResponse(200, ValueError("bad json"), text="<html>")])
    client = LLMClient(session=session)

    response = client.send_chat_request({"messages": []}, max_attempts=1)

    assert response.error is not None
    assert "Invalid JSON response" in response.error


def test_backoff_delay_doubles_and_adds_bounded_jitter() -> None:
    assert compute_backoff_delay(1, backoff_seconds=0.6, jitter_seconds=0.0) == pytest.approx(0.6)
    assert compute_backoff_delay(3, backoff_seconds=0.6, jitter_seconds=0.0) == pytest.approx(2.4)
    for _ in range(20):
        delay = compute_backoff_delay(2, backoff_seconds=0.6, jitter_seconds=0.2)
        assert 1.2 <= delay <= 1.4


def test_client_context_manager_closes_session() -> None:
    session = _FakeSession([])

    with llm_client.create_client(model="custom", session=session) as client:
        assert client.model == "custom"

    assert session.closed is True
