"""Error taxonomy shared by the update and setup flows."""

from __future__ import annotations

from typing import Optional


class ServiceError(RuntimeError):
    """Base class for failures that map onto a single JSON error response."""

    status_code = 500
    retryable = False

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InputError(ServiceError):
    """Malformed, missing or oversized request input."""

    status_code = 400


class SetupAuthError(ServiceError):
    """The caller did not present the configured setup key."""

    status_code = 401


class ConfigurationError(ServiceError):
    """A required setting or secret is missing or malformed."""

    status_code = 500


class ContentContractError(ServiceError):
    """Generated content violated the strict JSON or schema contract."""

    status_code = 422


class UpstreamModelError(ServiceError):
    """The language model provider failed or returned nothing usable."""

    status_code = 502

    @property
    def retryable(self) -> bool:  # type: ignore[override]
        return self.status_code == 504


class GitHubError(ServiceError):
    """Base class for failures reported by the Git hosting API."""

    status_code = 502


class GitAuthError(GitHubError):
    status_code = 401


class GitConflictError(GitHubError):
    """The branch moved while a commit was being prepared."""

    status_code = 409
    retryable = True


class GitRateLimitError(GitHubError):
    status_code = 429
    retryable = True


class GitTimeoutError(GitHubError):
    status_code = 504
    retryable = True


class GitUpstreamError(GitHubError):
    """Any other host failure; keeps the host status for diagnostics."""

    def __init__(self, message: str, *, upstream_status: Optional[int] = None) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status


__all__ = [
    "ConfigurationError",
    "ContentContractError",
    "GitAuthError",
    "GitConflictError",
    "GitHubError",
    "GitRateLimitError",
    "GitTimeoutError",
    "GitUpstreamError",
    "InputError",
    "ServiceError",
    "SetupAuthError",
    "UpstreamModelError",
]
