"""Seed file set committed by the one-time setup flow."""

from __future__ import annotations

import json
from datetime import datetime
from importlib import resources
from typing import Dict

from .content.sanitizer import canonical_json, normalize_content

SETUP_MARKER_PATH = ".ai-setup-complete.json"
CONTENT_PATH = "content.json"
SETUP_MODE = "minimal-modern"

_STATIC_ASSETS: tuple[str, ...] = ("index.html", "styles.css", "script.js")


def read_asset(name: str) -> str:
    asset = resources.files("portfolio_updater").joinpath("assets").joinpath(name)
    return asset.read_text(encoding="utf-8")


def seed_content() -> str:
    """Return the seed content document, normalized like any generated update."""
    return normalize_content(json.loads(read_asset(CONTENT_PATH)))


def build_initial_files() -> Dict[str, str]:
    files = {name: read_asset(name) for name in _STATIC_ASSETS}
    files[CONTENT_PATH] = seed_content()
    return files


def build_setup_marker(repository: str, branch: str, now: datetime) -> str:
    return canonical_json(
        {
            "setup_complete": True,
            "repository": repository,
            "branch": branch,
            "initialized_at": now.isoformat(),
            "mode": SETUP_MODE,
        }
    )


__all__ = [
    "CONTENT_PATH",
    "SETUP_MARKER_PATH",
    "build_initial_files",
    "build_setup_marker",
    "read_asset",
    "seed_content",
]
