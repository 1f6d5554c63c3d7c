"""GitHub data API helpers."""

from .publisher import CommitResult, Publisher
from .remote import GitHubClient

__all__ = ["CommitResult", "GitHubClient", "Publisher"]
