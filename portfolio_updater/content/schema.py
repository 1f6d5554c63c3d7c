"""Schema checks for the portfolio content document."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Optional, Sequence

from ..errors import ContentContractError

TOP_LEVEL_KEYS: tuple[str, ...] = (
    "personal_brand",
    "services",
    "portfolio_demos",
    "social_proof",
    "connect_links",
)

PERSONAL_BRAND_KEYS: tuple[str, ...] = (
    "hero_statement",
    "about_me",
    "core_values",
    "work_philosophy",
)
SERVICE_KEYS: tuple[str, ...] = ("service_name", "description", "client_value_add")
PORTFOLIO_DEMO_KEYS: tuple[str, ...] = (
    "project_title",
    "problem_solved",
    "demo_url",
    "repo_url",
)
SOCIAL_PROOF_KEYS: tuple[str, ...] = ("google_reviews",)
REVIEW_KEYS: tuple[str, ...] = ("quote", "stars")
CONNECT_LINK_KEYS: tuple[str, ...] = (
    "linkedin",
    "github",
    "facebook",
    "instagram",
    "scheduling_url",
)


@dataclass(frozen=True)
class SchemaViolation:
    """First schema failure found in a candidate document."""

    path: str
    message: str


class _Violation(Exception):
    def __init__(self, path: str, message: str) -> None:
        super().__init__(message)
        self.violation = SchemaViolation(path=path, message=message)


def looks_like_content(value: Any) -> bool:
    """Return True when ``value`` is a mapping holding every top-level section."""
    return isinstance(value, dict) and all(key in value for key in TOP_LEVEL_KEYS)


def find_violation(value: Any) -> Optional[SchemaViolation]:
    """Return the first violation in document order, or None when ``value`` is valid."""
    try:
        _check_document(value)
    except _Violation as exc:
        return exc.violation
    return None


def validate_content(value: Any) -> dict:
    """Raise ContentContractError on the first violation; return ``value`` otherwise."""
    violation = find_violation(value)
    if violation is not None:
        raise ContentContractError(violation.message)
    return value


# ----------------------------------------------------------------------
# Checks, run top-down and left-to-right in document attribute order.


def _check_document(document: Any) -> None:
    _require_object(document, "contentJson")
    _require_keys(document, TOP_LEVEL_KEYS, "")

    brand = _require_object(document["personal_brand"], "personal_brand")
    _require_keys(brand, PERSONAL_BRAND_KEYS, "personal_brand")
    _require_string(brand["hero_statement"], "personal_brand.hero_statement")
    _require_string(brand["about_me"], "personal_brand.about_me")
    _require_string_array(brand["core_values"], "personal_brand.core_values")
    _require_string(brand["work_philosophy"], "personal_brand.work_philosophy")

    for path, service in _iter_objects(document["services"], "services"):
        _check_strings(service, SERVICE_KEYS, path)

    for path, demo in _iter_objects(document["portfolio_demos"], "portfolio_demos"):
        _check_strings(demo, PORTFOLIO_DEMO_KEYS, path)

    social_proof = _require_object(document["social_proof"], "social_proof")
    _require_keys(social_proof, SOCIAL_PROOF_KEYS, "social_proof")
    reviews = social_proof["google_reviews"]
    for path, review in _iter_objects(reviews, "social_proof.google_reviews"):
        _require_keys(review, REVIEW_KEYS, path)
        _require_string(review["quote"], f"{path}.quote")
        _require_stars(review["stars"], f"{path}.stars")

    links = _require_object(document["connect_links"], "connect_links")
    _check_strings(links, CONNECT_LINK_KEYS, "connect_links")


def _iter_objects(value: Any, path: str) -> Iterator[tuple[str, dict]]:
    items = _require_array(value, path)
    for index, item in enumerate(items):
        item_path = f"{path}[{index}]"
        yield item_path, _require_object(item, item_path)


def _check_strings(value: dict, keys: Sequence[str], path: str) -> None:
    _require_keys(value, keys, path)
    for key in keys:
        _require_string(value[key], f"{path}.{key}")


def _require_keys(value: dict, keys: Sequence[str], path: str) -> None:
    for key in keys:
        if key not in value:
            qualified = f"{path}.{key}" if path else key
            raise _Violation(qualified, f"Missing required key: {qualified}")


def _require_object(value: Any, path: str) -> dict:
    if not isinstance(value, dict):
        raise _Violation(path, f"{path} must be an object.")
    return value


def _require_array(value: Any, path: str) -> list:
    if not isinstance(value, list):
        raise _Violation(path, f"{path} must be an array.")
    return value


def _is_filled_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _require_string(value: Any, path: str) -> None:
    if not _is_filled_string(value):
        raise _Violation(path, f"{path} must be a non-empty string.")


def _require_string_array(value: Any, path: str) -> None:
    if not isinstance(value, list) or not value or not all(map(_is_filled_string, value)):
        raise _Violation(path, f"{path} must be an array of non-empty strings.")


def _require_stars(value: Any, path: str) -> None:
    # bool is an int subclass; JSON true must not pass as a star rating.
    is_int = isinstance(value, int) and not isinstance(value, bool)
    if not is_int or not 1 <= value <= 5:
        raise _Violation(path, f"{path} must be an integer between 1 and 5.")


__all__ = [
    "CONNECT_LINK_KEYS",
    "PERSONAL_BRAND_KEYS",
    "PORTFOLIO_DEMO_KEYS",
    "REVIEW_KEYS",
    "SERVICE_KEYS",
    "SOCIAL_PROOF_KEYS",
    "SchemaViolation",
    "TOP_LEVEL_KEYS",
    "find_violation",
    "looks_like_content",
    "validate_content",
]
