"""Git publishing through the GitHub data API (refs, commits, trees, blobs)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping
from urllib.parse import quote

from ..errors import GitUpstreamError
from ..logging import get_logger
from .remote import GitHubClient


@dataclass(frozen=True)
class CommitResult:
    """Identifiers of a commit that the branch now points at."""

    sha: str
    url: str


class Publisher:
    """Commits file snapshots on top of a branch head without a local clone."""

    def __init__(self, client: GitHubClient, *, owner: str, repo: str, branch: str = "main") -> None:
        self.client = client
        self.owner = owner
        self.repo = repo
        self.branch = branch
        self.logger = get_logger("git.publisher")

    @property
    def repository(self) -> str:
        return f"{self.owner}/{self.repo}"

    def commit(self, files: Mapping[str, str], *, message: str) -> CommitResult:
        """Create one commit containing ``files`` and move the branch to it.

        Each step waits for the previous response. A failure at any step
        leaves the branch untouched; objects created before it stay
        unreferenced on the host.
        """
        if not files:
            raise ValueError("At least one file is required to create a commit")

        base = self._repo_path()

        ref = self.client.request("GET", f"{base}/git/ref/heads/{self.branch}")
        head_sha = _sha(ref, "reading the branch ref", "object", "sha")
        self.logger.debug("Branch %s is at %s", self.branch, head_sha)

        head_commit = self.client.request("GET", f"{base}/git/commits/{head_sha}")
        base_tree_sha = _sha(head_commit, "reading the head commit", "tree", "sha")

        tree_entries = []
        for path, content in files.items():
            blob = self.client.request(
                "POST",
                f"{base}/git/blobs",
                {"content": content, "encoding": "utf-8"},
            )
            blob_sha = _sha(blob, "creating a blob", "sha")
            tree_entries.append(
                {"path": path, "mode": "100644", "type": "blob", "sha": blob_sha}
            )

        tree = self.client.request(
            "POST",
            f"{base}/git/trees",
            {"base_tree": base_tree_sha, "tree": tree_entries},
        )

        new_commit = self.client.request(
            "POST",
            f"{base}/git/commits",
            {
                "message": message,
                "tree": _sha(tree, "creating the tree", "sha"),
                "parents": [head_sha],
            },
        )
        commit_sha = _sha(new_commit, "creating the commit", "sha")

        # force=False: the host rejects the update if the branch moved since the first GET.
        self.client.request(
            "PATCH",
            f"{base}/git/refs/heads/{self.branch}",
            {"sha": commit_sha, "force": False},
        )
        self.logger.info(
            "Committed %d file(s) to %s@%s as %s",
            len(tree_entries),
            self.repository,
            self.branch,
            commit_sha,
        )

        url = new_commit.get("html_url") or (
            f"https://github.com/{self.repository}/commit/{commit_sha}"
        )
        return CommitResult(sha=commit_sha, url=url)

    def path_exists(self, path: str) -> bool:
        """Return True when ``path`` exists on the configured branch."""
        found = self.client.request(
            "GET",
            f"{self._repo_path()}/contents/{quote(path)}?ref={quote(self.branch)}",
            allow_404=True,
        )
        return found is not None

    # ------------------------------------------------------------------
    # Helpers

    def _repo_path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}"


def _sha(payload: Any, step: str, *keys: str) -> str:
    """Follow ``keys`` into a GitHub response body and return the SHA string there."""
    value = payload
    for key in keys:
        value = value.get(key) if isinstance(value, Mapping) else None
    if not isinstance(value, str) or not value:
        raise GitUpstreamError(f"Unexpected GitHub response while {step}.")
    return value


__all__ = ["CommitResult", "Publisher"]
