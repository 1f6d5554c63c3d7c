"""Validation and normalization of generated portfolio content."""

from .payload import GeneratedPayload, parse_generated_payload
from .sanitizer import canonical_json, normalize_content, reject_forbidden_keys, whitelist_content
from .schema import SchemaViolation, find_violation, looks_like_content, validate_content

__all__ = [
    "GeneratedPayload",
    "SchemaViolation",
    "canonical_json",
    "find_violation",
    "looks_like_content",
    "normalize_content",
    "parse_generated_payload",
    "reject_forbidden_keys",
    "validate_content",
    "whitelist_content",
]
