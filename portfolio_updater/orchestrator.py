"""Pipeline orchestration for the content update and repository setup flows."""

from __future__ import annotations

import hmac
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Callable, List, Optional

from .bootstrap import CONTENT_PATH, SETUP_MARKER_PATH, build_initial_files, build_setup_marker
from .config import ServiceConfig, require
from .content.payload import GeneratedPayload, parse_generated_payload
from .errors import InputError, ServiceError, SetupAuthError
from .git.publisher import CommitResult, Publisher
from .git.remote import GitHubClient
from .llm.runner import LLMRunner
from .logging import get_logger
from .prompting.constants import SYSTEM_PROMPT

SETUP_COMMIT_MESSAGE = "chore: bootstrap portfolio content"


@dataclass
class UpdateOutcome:
    """Result of a successful content update."""

    repository: str
    branch: str
    commit: CommitResult
    files: List[str] = field(default_factory=lambda: [CONTENT_PATH])


@dataclass
class SetupOutcome:
    """Result of a setup request; ``commit`` is None when setup already ran."""

    repository: str
    branch: str
    commit: Optional[CommitResult] = None
    files: List[str] = field(default_factory=list)

    @property
    def already_completed(self) -> bool:
        return self.commit is None


def sanitize_prompt(value: object, max_chars: int) -> str:
    """Return the trimmed prompt or raise InputError when it is blank or too long."""
    trimmed = value.strip() if isinstance(value, str) else ""
    if not trimmed:
        raise InputError("Missing prompt.")
    if len(trimmed) > max_chars:
        raise InputError(f"Prompt too long (max {max_chars}).")
    return trimmed


def _utc_now() -> datetime:
    return datetime.now(UTC)


class ContentOrchestrator:
    """Composes model -> parser -> publisher for one request at a time.

    Holds no per-request state; collaborators are built lazily from the
    configuration so endpoints that need no secrets keep working without them.
    """

    def __init__(
        self,
        config: ServiceConfig,
        *,
        llm_runner: LLMRunner | None = None,
        publisher: Publisher | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.config = config
        self._llm_runner = llm_runner
        self._publisher = publisher
        self._clock = clock
        self.logger = get_logger("orchestrator")

    # ------------------------------------------------------------------
    # Flows

    def run_update(self, prompt: object) -> UpdateOutcome:
        """Generate, validate and commit a new content document."""
        cleaned = sanitize_prompt(prompt, self.config.max_prompt_chars)
        self.logger.info("Update requested (%d chars)", len(cleaned))

        completion = self.llm_runner.run(cleaned, system=SYSTEM_PROMPT)
        self.logger.debug("Model responded with %d chars", len(completion))

        # Parsing must finish before any Git call so rejected output never reaches the repo.
        generated = self._parse(completion)
        message = generated.commit_message or self._default_commit_message()

        publisher = self.publisher
        commit = publisher.commit({CONTENT_PATH: generated.content_json}, message=message)
        return UpdateOutcome(
            repository=publisher.repository,
            branch=publisher.branch,
            commit=commit,
        )

    def run_setup(self, provided_key: Optional[str]) -> SetupOutcome:
        """Seed the repository once; repeated calls are no-ops."""
        expected = require(self.config.setup_key, "SETUP_KEY")
        if not provided_key or not hmac.compare_digest(
            provided_key.encode("utf-8"), expected.encode("utf-8")
        ):
            raise SetupAuthError("Setup authorization failed.")

        publisher = self.publisher
        if publisher.path_exists(SETUP_MARKER_PATH):
            self.logger.info("Setup marker present on %s; nothing to do", publisher.repository)
            return SetupOutcome(repository=publisher.repository, branch=publisher.branch)

        files = build_initial_files()
        files[SETUP_MARKER_PATH] = build_setup_marker(
            publisher.repository, publisher.branch, self._clock()
        )
        commit = publisher.commit(files, message=SETUP_COMMIT_MESSAGE)
        return SetupOutcome(
            repository=publisher.repository,
            branch=publisher.branch,
            commit=commit,
            files=list(files),
        )

    # ------------------------------------------------------------------
    # Collaborators

    @property
    def llm_runner(self) -> LLMRunner:
        if self._llm_runner is None:
            llm = self.config.llm
            self._llm_runner = LLMRunner(
                llm.model,
                base_url=llm.api_url,
                api_key=require(llm.api_key, "LLM_API_KEY"),
                temperature=llm.temperature,
                max_tokens=llm.max_tokens,
                request_timeout=llm.request_timeout,
            )
        return self._llm_runner

    @property
    def publisher(self) -> Publisher:
        if self._publisher is None:
            github = self.config.github
            client = GitHubClient(
                require(github.token, "GITHUB_PAT"),
                api_url=github.api_url,
                api_version=github.api_version,
                timeout=github.request_timeout,
            )
            self._publisher = Publisher(
                client,
                owner=require(github.owner, "GITHUB_OWNER"),
                repo=require(github.repo, "GITHUB_REPO"),
                branch=github.branch,
            )
        return self._publisher

    # ------------------------------------------------------------------
    # Helpers

    def _parse(self, completion: str) -> GeneratedPayload:
        try:
            return parse_generated_payload(completion)
        except ServiceError as exc:
            self.logger.warning("Rejected model output: %s", exc.message)
            self.logger.debug("Rejected output excerpt: %.200s", completion)
            raise

    def _default_commit_message(self) -> str:
        return f"chore: AI content update {self._clock().isoformat()}"


__all__ = [
    "ContentOrchestrator",
    "SETUP_COMMIT_MESSAGE",
    "SetupOutcome",
    "UpdateOutcome",
    "sanitize_prompt",
]
