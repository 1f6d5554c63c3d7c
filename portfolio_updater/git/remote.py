"""Authenticated JSON requests against the GitHub REST API."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ..errors import (
    GitAuthError,
    GitConflictError,
    GitHubError,
    GitRateLimitError,
    GitTimeoutError,
    GitUpstreamError,
)
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

RATE_LIMIT_MESSAGE = "GitHub API rate limit reached. Please retry shortly."
TIMEOUT_MESSAGE = "GitHub request timed out. Please retry."


def map_github_error(status: int, payload: Any) -> GitHubError:
    """Translate a failed GitHub response into the matching error type."""
    raw = ""
    if isinstance(payload, Mapping):
        raw = str(payload.get("message") or "")
    lowered = raw.lower()

    if status in (401, 403):
        if "rate limit" in lowered:
            return GitRateLimitError(RATE_LIMIT_MESSAGE)
        return GitAuthError("GitHub authorization failed. Check your PAT permissions.")
    if status == 409:
        return GitConflictError("GitHub conflict on branch update. Please retry.")
    if status in (408, 504):
        return GitTimeoutError(TIMEOUT_MESSAGE)
    if status == 429:
        return GitRateLimitError(RATE_LIMIT_MESSAGE)
    return GitUpstreamError(raw or f"GitHub API error ({status}).", upstream_status=status)


def map_transport_failure(exc: BaseException) -> GitHubError:
    message = str(exc) or "GitHub request failed."
    if is_timeout_message(message):
        return GitTimeoutError(TIMEOUT_MESSAGE)
    return GitUpstreamError(message)


class GitHubClient:
    """Thin wrapper adding auth, JSON encoding and status mapping to each call."""

    def __init__(
        self,
        token: str,
        *,
        api_url: str = "https://api.github.com",
        api_version: str = "2022-11-28",
        timeout: Optional[float] = 30.0,
        transport: Transport | None = None,
    ) -> None:
        self._token = token
        self.api_url = api_url.rstrip("/")
        self.api_version = api_version
        self.timeout = timeout
        self._transport = transport or urllib_transport
        self.logger = get_logger("git.remote")

    def request(
        self,
        method: str,
        path: str,
        payload: Any = None,
        *,
        allow_404: bool = False,
    ) -> Any:
        """Issue one API call and return the decoded body.

        With ``allow_404`` a 404 response returns None instead of raising.
        """
        request = RemoteRequest(
            method=method,
            url=f"{self.api_url}{path}",
            headers=self._headers(),
            body=encode_json(payload) if payload is not None else None,
            timeout=self.timeout,
        )
        self.logger.debug("%s %s", method, path)
        try:
            response = self._transport(request)
        except TransportError as exc:
            raise map_transport_failure(exc) from exc

        decoded = decode_json(response.body)
        if allow_404 and response.status == 404:
            return None
        if not response.ok:
            error = map_github_error(response.status, decoded)
            self.logger.warning(
                "%s %s failed with status %d (%s)",
                method,
                path,
                response.status,
                type(error).__name__,
            )
            raise error
        return decoded

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self._token}",
            "X-GitHub-Api-Version": self.api_version,
            "Content-Type": "application/json",
            "User-Agent": "portfolio-updater",
        }


__all__ = ["GitHubClient", "map_github_error", "map_transport_failure"]
