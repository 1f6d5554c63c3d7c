"""Adapter around a hosted chat-completion endpoint."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from ..errors import UpstreamModelError
from ..http import (
    RemoteRequest,
    Transport,
    TransportError,
    decode_json,
    encode_json,
    is_timeout_message,
    urllib_transport,
)
from ..logging import get_logger

UPSTREAM_TIMEOUT_MESSAGE = "Upstream request timed out. Please retry."


@dataclass
class LLMRequest:
    """One chat exchange as sent to the provider."""

    endpoint: str
    model: str
    messages: List[Dict[str, str]]
    options: Dict[str, Any] = field(default_factory=dict)
    api_key: Optional[str] = None
    timeout: float = 60.0

    def body(self) -> Dict[str, Any]:
        return {"model": self.model, "messages": self.messages, **self.options}


class LLMRunner:
    """Sends one system + user exchange to the configured model provider."""

    DEFAULT_MODEL = "gpt-4.1-mini"
    DEFAULT_ENDPOINT = "https://api.openai.com/v1/chat/completions"

    def __init__(
        self,
        model: str | None = None,
        *,
        base_url: str | None = None,
        api_key: str | None = None,
        temperature: Optional[float] = 0.2,
        max_tokens: Optional[int] = None,
        request_timeout: Optional[float] = 60.0,
        runner: Callable[[LLMRequest], str] | None = None,
        transport: Transport | None = None,
    ) -> None:
        self.model = model or self.DEFAULT_MODEL
        self.base_url = (base_url or self.DEFAULT_ENDPOINT).rstrip("/")
        self.api_key = api_key
        self.options = {
            name: value
            for name, value in (("temperature", temperature), ("max_tokens", max_tokens))
            if value is not None
        }
        self.timeout = request_timeout or 60.0
        self._transport = transport or urllib_transport
        self._send = runner or self._post
        self.logger = get_logger("llm.runner")

    def run(self, prompt: str, *, system: str | None = None) -> str:
        """Send the prompt and return the completion text."""
        messages = [{"role": "user", "content": prompt}]
        if system:
            messages.insert(0, {"role": "system", "content": system})
        request = LLMRequest(
            endpoint=self.base_url,
            model=self.model,
            messages=messages,
            options=dict(self.options),
            api_key=self.api_key,
            timeout=self.timeout,
        )
        self.logger.debug("Requesting completion from %s (%s)", request.endpoint, request.model)
        return self._send(request)

    def _post(self, request: LLMRequest) -> str:
        headers = {"Content-Type": "application/json"}
        if request.api_key:
            headers["Authorization"] = f"Bearer {request.api_key}"
        try:
            response = self._transport(
                RemoteRequest(
                    method="POST",
                    url=request.endpoint,
                    headers=headers,
                    body=encode_json(request.body()),
                    timeout=request.timeout,
                )
            )
        except TransportError as exc:
            raise _transport_failure(exc) from exc

        decoded = decode_json(response.body)
        if not response.ok:
            raise UpstreamModelError(
                _provider_error(decoded) or f"LLM request failed ({response.status})."
            )

        text = _completion_text(decoded).strip()
        if not text:
            raise UpstreamModelError("LLM returned an empty response.")
        return text


def _transport_failure(exc: BaseException) -> UpstreamModelError:
    message = str(exc) or "LLM request failed."
    if is_timeout_message(message):
        return UpstreamModelError(UPSTREAM_TIMEOUT_MESSAGE, status_code=504)
    return UpstreamModelError(message)


def _provider_error(payload: Any) -> str:
    error = payload.get("error") if isinstance(payload, dict) else None
    message = error.get("message") if isinstance(error, dict) else None
    return message.strip() if isinstance(message, str) else ""


def _completion_text(payload: Any) -> str:
    """Pull ``choices[0].message.content`` out of a completion body, or ''."""
    try:
        content = payload["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return ""
    return content if isinstance(content, str) else ""


__all__ = ["LLMRequest", "LLMRunner", "UPSTREAM_TIMEOUT_MESSAGE"]
