"""Tests for the chat-completion runner."""

from __future__ import annotations

import json

import pytest

from portfolio_updater.errors import UpstreamModelError
from portfolio_updater.http import TransportError
from portfolio_updater.llm.runner import LLMRunner, UPSTREAM_TIMEOUT_MESSAGE
from tests._fixtures.content import completion
from tests._fixtures.remote import ScriptedTransport, timeout_error


def test_injected_runner_receives_chat_request() -> None:
    seen = []
    runner = LLMRunner(
        model="custom-model",
        base_url="https://llm.example/v1/chat/completions/",
        api_key="secret",
        temperature=0.15,
        max_tokens=256,
        request_timeout=42.0,
        runner=lambda request: seen.append(request) or "response",
    )

    assert runner.run("Hello world", system="system message") == "response"

    request = seen[0]
    assert request.endpoint == "https://llm.example/v1/chat/completions"
    assert request.api_key == "secret"
    assert request.timeout == 42.0
    assert request.body() == {
        "model": "custom-model",
        "messages": [
            {"role": "system", "content": "system message"},
            {"role": "user", "content": "Hello world"},
        ],
        "temperature": 0.15,
        "max_tokens": 256,
    }


def test_system_message_is_optional() -> None:
    seen = []
    runner = LLMRunner(api_key="key", temperature=None, runner=lambda r: seen.append(r) or "ok")

    runner.run("Only user")

    assert seen[0].body() == {
        "model": "gpt-4.1-mini",
        "messages": [{"role": "user", "content": "Only user"}],
    }


def test_llm_runner_http_posts_payload() -> None:
    transport = ScriptedTransport((200, completion("  {\"contentJson\": {}}  ")))
    runner = LLMRunner(
        model="gpt-4.1-mini",
        base_url="https://llm.example/v1/chat/completions",
        api_key="llm-key",
        temperature=0.2,
        request_timeout=25.0,
        transport=transport,
    )

    result = runner.run("Update hero section", system="Return strict JSON.")

    assert result == '{"contentJson": {}}'
    request = transport.requests[0]
    assert request.method == "POST"
    assert request.url == "https://llm.example/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer llm-key"
    assert request.headers["Content-Type"] == "application/json"
    assert request.timeout == 25.0
    payload = json.loads(request.body.decode("utf-8"))
    assert payload["model"] == "gpt-4.1-mini"
    assert payload["temperature"] == 0.2
    assert "max_tokens" not in payload
    assert payload["messages"] == [
        {"role": "system", "content": "Return strict JSON."},
        {"role": "user", "content": "Update hero section"},
    ]


def test_provider_error_message_is_surfaced() -> None:
    transport = ScriptedTransport((401, {"error": {"message": "Incorrect API key provided"}}))
    runner = LLMRunner(api_key="bad", transport=transport)

    with pytest.raises(UpstreamModelError, match="Incorrect API key provided") as excinfo:
        runner.run("prompt")
    assert excinfo.value.status_code == 502


def test_non_json_error_body_falls_back_to_status() -> None:
    transport = ScriptedTransport((503, b"<html>unavailable</html>"))
    runner = LLMRunner(api_key="key", transport=transport)

    with pytest.raises(UpstreamModelError, match=r"LLM request failed \(503\)\."):
        runner.run("prompt")


@pytest.mark.parametrize(
    "body",
    [
        completion("   "),
        {"choices": []},
        {"choices": [{"message": {"content": None}}]},
        {},
    ],
)
def test_empty_completion_is_rejected(body) -> None:
    runner = LLMRunner(api_key="key", transport=ScriptedTransport((200, body)))
    with pytest.raises(UpstreamModelError, match="LLM returned an empty response."):
        runner.run("prompt")


def test_timeout_failures_are_normalized() -> None:
    runner = LLMRunner(api_key="key", transport=ScriptedTransport(timeout_error()))

    with pytest.raises(UpstreamModelError) as excinfo:
        runner.run("prompt")
    assert excinfo.value.message == UPSTREAM_TIMEOUT_MESSAGE
    assert excinfo.value.status_code == 504
    assert excinfo.value.retryable is True


def test_other_transport_failures_pass_message_through() -> None:
    failure = TransportError("[Errno -2] Name or service not known")
    runner = LLMRunner(api_key="key", transport=ScriptedTransport(failure))

    with pytest.raises(UpstreamModelError, match="Name or service not known") as excinfo:
        runner.run("prompt")
    assert excinfo.value.status_code == 502
    assert excinfo.value.retryable is False
