"""Transport primitives shared by the model and Git hosting clients."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

_TIMEOUT_MARKERS = ("timeout", "timed out", "hang")


@dataclass
class RemoteRequest:
    """Outbound HTTP request handed to a transport."""

    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None
    timeout: Optional[float] = None


@dataclass
class RemoteResponse:
    """Status and raw body of a completed HTTP exchange."""

    status: int
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class TransportError(RuntimeError):
    """Raised when no HTTP response was received at all."""


Transport = Callable[[RemoteRequest], RemoteResponse]


def urllib_transport(request: RemoteRequest) -> RemoteResponse:
    """Send ``request`` with urllib; error statuses come back as responses."""
    http_request = Request(
        request.url,
        data=request.body,
        headers=request.headers,
        method=request.method,
    )
    try:
        with urlopen(http_request, timeout=request.timeout) as response:  # type: ignore[arg-type]
            return RemoteResponse(status=response.status, body=response.read())
    except HTTPError as exc:
        body = exc.read() if hasattr(exc, "read") else b""
        return RemoteResponse(status=exc.code, body=body or b"")
    except URLError as exc:
        raise TransportError(str(exc.reason)) from exc
    except TimeoutError as exc:
        raise TransportError(f"Request timed out: {exc}") from exc
    except OSError as exc:  # pragma: no cover - depends on network stack
        raise TransportError(str(exc)) from exc


def encode_json(payload: Any) -> bytes:
    return json.dumps(payload).encode("utf-8")


def decode_json(body: bytes) -> Any:
    """Best-effort JSON decoding; undecodable bodies yield an empty mapping."""
    if not body:
        return {}
    try:
        return json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return {}


def is_timeout_message(message: str) -> bool:
    lowered = (message or "").lower()
    return any(marker in lowered for marker in _TIMEOUT_MARKERS)


__all__ = [
    "RemoteRequest",
    "RemoteResponse",
    "Transport",
    "TransportError",
    "decode_json",
    "encode_json",
    "is_timeout_message",
    "urllib_transport",
]
