"""Configuration loading for the portfolio updater (.portfolio.yml + environment)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .errors import ConfigurationError

DEFAULT_CONFIG_NAME = ".portfolio.yml"
DEFAULT_MAX_PROMPT_CHARS = 4000


@dataclass(frozen=True)
class GitHubConfig:
    """Target repository and credentials for the Git data API."""

    owner: Optional[str] = None
    repo: Optional[str] = None
    branch: str = "main"
    token: Optional[str] = None
    api_url: str = "https://api.github.com"
    api_version: str = "2022-11-28"
    request_timeout: float = 30.0


@dataclass(frozen=True)
class LLMConfig:
    """Chat-completion provider settings."""

    api_url: str = "https://api.openai.com/v1/chat/completions"
    model: str = "gpt-4.1-mini"
    api_key: Optional[str] = None
    temperature: Optional[float] = 0.2
    max_tokens: Optional[int] = None
    request_timeout: float = 60.0


@dataclass(frozen=True)
class ServiceConfig:
    """Process-wide settings, built once at start-up and passed explicitly."""

    github: GitHubConfig = field(default_factory=GitHubConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    service_name: str = "portfolio-updater"
    max_prompt_chars: int = DEFAULT_MAX_PROMPT_CHARS
    cors_origin: str = "*"
    setup_key: Optional[str] = None


def require(value: Optional[str], key: str) -> str:
    """Return ``value`` or fail naming the missing setting (never its value)."""
    if value is None or not str(value).strip():
        raise ConfigurationError(f"Missing required secret: {key}")
    return value


def load_config(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> ServiceConfig:
    """Load settings from an optional YAML file, overridden by environment variables."""
    env = os.environ if environ is None else environ
    data = _read_config(config_path) if config_path is not None else _read_default_config()

    github_data = _as_dict(data.get("github"))
    llm_data = _as_dict(data.get("llm"))
    service_data = _as_dict(data.get("service"))

    github = GitHubConfig(
        owner=_pick(env, "GITHUB_OWNER", github_data.get("owner")),
        repo=_pick(env, "GITHUB_REPO", github_data.get("repo")),
        branch=_pick(env, "GITHUB_BRANCH", github_data.get("branch")) or "main",
        token=_pick(env, "GITHUB_PAT", github_data.get("token")),
        api_url=(
            _pick(env, "GITHUB_API_URL", github_data.get("api_url"))
            or GitHubConfig.api_url
        ).rstrip("/"),
        api_version=_pick(env, "GITHUB_API_VERSION", github_data.get("api_version"))
        or GitHubConfig.api_version,
        request_timeout=_as_float(
            _pick(env, "GITHUB_REQUEST_TIMEOUT", github_data.get("request_timeout")),
            "GITHUB_REQUEST_TIMEOUT",
        )
        or GitHubConfig.request_timeout,
    )

    temperature = _as_float(
        _pick(env, "LLM_TEMPERATURE", llm_data.get("temperature")), "LLM_TEMPERATURE"
    )
    llm = LLMConfig(
        api_url=_pick(env, "LLM_API_URL", llm_data.get("api_url")) or LLMConfig.api_url,
        model=_pick(env, "LLM_MODEL", llm_data.get("model")) or LLMConfig.model,
        api_key=_pick(env, "LLM_API_KEY", llm_data.get("api_key")),
        temperature=temperature if temperature is not None else LLMConfig.temperature,
        max_tokens=_as_int(
            _pick(env, "LLM_MAX_TOKENS", llm_data.get("max_tokens")), "LLM_MAX_TOKENS"
        ),
        request_timeout=_as_float(
            _pick(env, "LLM_REQUEST_TIMEOUT", llm_data.get("request_timeout")),
            "LLM_REQUEST_TIMEOUT",
        )
        or LLMConfig.request_timeout,
    )

    max_prompt_chars = _as_int(
        _pick(env, "MAX_PROMPT_CHARS", service_data.get("max_prompt_chars")),
        "MAX_PROMPT_CHARS",
    )
    if max_prompt_chars is not None and max_prompt_chars <= 0:
        raise ConfigurationError("MAX_PROMPT_CHARS must be a positive integer")

    return ServiceConfig(
        github=github,
        llm=llm,
        service_name=_pick(env, "SERVICE_NAME", service_data.get("name"))
        or ServiceConfig.service_name,
        max_prompt_chars=max_prompt_chars or DEFAULT_MAX_PROMPT_CHARS,
        cors_origin=_pick(env, "CORS_ORIGIN", service_data.get("cors_origin")) or "*",
        setup_key=_pick(env, "SETUP_KEY", service_data.get("setup_key")),
    )


def _read_default_config() -> Dict[str, Any]:
    candidate = Path.cwd() / DEFAULT_CONFIG_NAME
    if not candidate.exists():
        return {}
    return _read_config(candidate)


def _read_config(path: Path) -> Dict[str, Any]:
    config_file = path.expanduser()
    if config_file.is_dir():
        config_file = config_file / DEFAULT_CONFIG_NAME
    if not config_file.exists():
        raise ConfigurationError(f"Config file not found: {config_file}")

    text = config_file.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse {config_file.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigurationError(f"{config_file.name} must contain a mapping at the root")
    return loaded


def _pick(env: Mapping[str, str], key: str, fallback: Any) -> Optional[str]:
    value = env.get(key)
    if value is not None and value.strip():
        return value.strip()
    return _as_str(fallback)


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_float(value: Optional[str], key: str) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be a number") from exc


def _as_int(value: Optional[str], key: str) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be an integer") from exc


__all__ = [
    "DEFAULT_MAX_PROMPT_CHARS",
    "GitHubConfig",
    "LLMConfig",
    "ServiceConfig",
    "load_config",
    "require",
]
