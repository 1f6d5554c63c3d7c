"""Forbidden-key rejection, key whitelisting and canonical serialisation."""

from __future__ import annotations

import json
from typing import Any, Dict, Sequence

from ..errors import ContentContractError
from .schema import (
    CONNECT_LINK_KEYS,
    PERSONAL_BRAND_KEYS,
    PORTFOLIO_DEMO_KEYS,
    REVIEW_KEYS,
    SERVICE_KEYS,
    validate_content,
)

FORBIDDEN_KEY_FRAGMENTS: tuple[str, ...] = ("price", "pricing", "tier", "style")
FORBIDDEN_KEY_MESSAGE = "Pricing or style/tier data is not allowed in this schema."


def is_forbidden_key(key: str) -> bool:
    lowered = key.lower()
    return any(fragment in lowered for fragment in FORBIDDEN_KEY_FRAGMENTS)


def reject_forbidden_keys(value: Any, path: str = "") -> None:
    """Walk every key in the tree and fail on the first forbidden name.

    Runs over the raw candidate before whitelisting, so a forbidden key inside
    a section that would later be dropped still aborts the operation.
    """
    if isinstance(value, list):
        for index, item in enumerate(value):
            reject_forbidden_keys(item, f"{path}[{index}]")
        return
    if not isinstance(value, dict):
        return
    for key, nested in value.items():
        key_path = f"{path}.{key}" if path else str(key)
        if is_forbidden_key(str(key)):
            raise ContentContractError(f"{FORBIDDEN_KEY_MESSAGE} (found {key_path})")
        reject_forbidden_keys(nested, key_path)


def whitelist_content(document: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``document`` holding only whitelisted keys, in schema order.

    Sections absent from the input stay absent, and values of the wrong shape
    pass through untouched; the validator reports both afterwards.
    """
    sanitized: Dict[str, Any] = {}
    if "personal_brand" in document:
        sanitized["personal_brand"] = _pick_keys(document["personal_brand"], PERSONAL_BRAND_KEYS)
    if "services" in document:
        sanitized["services"] = _pick_each(document["services"], SERVICE_KEYS)
    if "portfolio_demos" in document:
        sanitized["portfolio_demos"] = _pick_each(document["portfolio_demos"], PORTFOLIO_DEMO_KEYS)
    if "social_proof" in document:
        sanitized["social_proof"] = _sanitize_social_proof(document["social_proof"])
    if "connect_links" in document:
        sanitized["connect_links"] = _pick_keys(document["connect_links"], CONNECT_LINK_KEYS)
    return sanitized


def canonical_json(document: Dict[str, Any]) -> str:
    return json.dumps(document, indent=2, ensure_ascii=False)


def normalize_content(document: Any) -> str:
    """Scan, whitelist and validate ``document``; return its canonical JSON text."""
    if not isinstance(document, dict):
        raise ContentContractError("contentJson must be a valid JSON object.")
    try:
        reject_forbidden_keys(document)
    except RecursionError as exc:
        raise ContentContractError("contentJson is nested too deeply.") from exc
    sanitized = whitelist_content(document)
    validate_content(sanitized)
    return canonical_json(sanitized)


def _sanitize_social_proof(value: Any) -> Any:
    if not isinstance(value, dict):
        return value
    sanitized: Dict[str, Any] = {}
    if "google_reviews" in value:
        sanitized["google_reviews"] = _pick_each(value["google_reviews"], REVIEW_KEYS)
    return sanitized


def _pick_each(value: Any, allowed: Sequence[str]) -> Any:
    if not isinstance(value, list):
        return value
    return [_pick_keys(item, allowed) for item in value]


def _pick_keys(value: Any, allowed: Sequence[str]) -> Any:
    if not isinstance(value, dict):
        return value
    return {key: value[key] for key in allowed if key in value}


__all__ = [
    "FORBIDDEN_KEY_FRAGMENTS",
    "canonical_json",
    "is_forbidden_key",
    "normalize_content",
    "reject_forbidden_keys",
    "whitelist_content",
]
