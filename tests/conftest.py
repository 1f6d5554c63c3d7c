from __future__ import annotations

from typing import Any, Dict

import pytest

from portfolio_updater.config import GitHubConfig, LLMConfig, ServiceConfig
from tests._fixtures.content import valid_document
from tests._fixtures.remote import ScriptedTransport


@pytest.fixture
def document() -> Dict[str, Any]:
    """Provide a fresh schema-conformant content document."""
    return valid_document()


@pytest.fixture
def service_config() -> ServiceConfig:
    """Provide a fully populated configuration with fake secrets."""
    return ServiceConfig(
        github=GitHubConfig(owner="owner", repo="repo", branch="main", token="gh-token"),
        llm=LLMConfig(api_url="https://llm.example/v1/chat/completions", api_key="llm-key"),
        service_name="portfolio-updater",
        setup_key="setup-secret",
    )


@pytest.fixture
def github_transport() -> ScriptedTransport:
    return ScriptedTransport()
