"""Parse raw model output into a canonical content document and commit message."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Callable, Optional

from ..errors import ContentContractError
from ..logging import get_logger
from .sanitizer import normalize_content
from .schema import looks_like_content

_FENCE_PATTERN = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.IGNORECASE | re.DOTALL)
_MISSING = object()
_DECODER = json.JSONDecoder()
STRICT_JSON_MESSAGE = "LLM output must be strict JSON without conversational text."

DISALLOWED_TOP_LEVEL_KEYS: tuple[str, ...] = ("html", "css", "js")

logger = get_logger("content.payload")


@dataclass(frozen=True)
class GeneratedPayload:
    """Validated model output ready to be committed."""

    content_json: str
    commit_message: Optional[str] = None


def unwrap_envelope(text: str) -> str:
    """Return the JSON text of a response, rejecting any conversational wrapper.

    A single code fence is accepted only when it spans the whole trimmed
    response; otherwise the response itself must open with ``{``. Text after
    the JSON value is caught by :func:`decode_envelope`.
    """
    normalized = (text or "").strip()
    if not normalized:
        raise ContentContractError("LLM output must be strict JSON.")

    fenced = _FENCE_PATTERN.fullmatch(normalized)
    if fenced and fenced.group(1):
        return fenced.group(1).strip()

    if normalized.startswith("{"):
        return normalized

    raise ContentContractError(STRICT_JSON_MESSAGE)


def decode_envelope(raw_json: str) -> Any:
    """Decode exactly one JSON value; anything after it counts as prose."""
    try:
        parsed, end = _DECODER.raw_decode(raw_json)
    except (json.JSONDecodeError, RecursionError) as exc:
        raise ContentContractError("Invalid LLM JSON output.") from exc
    if raw_json[end:].strip():
        raise ContentContractError(STRICT_JSON_MESSAGE)
    return parsed


def _key(name: str) -> Callable[[dict], Any]:
    def extract(parsed: dict) -> Any:
        return parsed.get(name, _MISSING)

    extract.__name__ = f"key_{name}"
    return extract


def _content_under(name: str) -> Callable[[dict], Any]:
    def extract(parsed: dict) -> Any:
        value = parsed.get(name)
        return value if looks_like_content(value) else _MISSING

    extract.__name__ = f"content_under_{name}"
    return extract


def _first_content_value(parsed: dict) -> Any:
    for value in parsed.values():
        if looks_like_content(value):
            return value
    return _MISSING


def _whole_document(parsed: dict) -> Any:
    return parsed if looks_like_content(parsed) else _MISSING


# Order matters: explicit envelope keys win over shape-based guesses, and the
# parsed value itself is the last resort.
CANDIDATE_EXTRACTORS: tuple[Callable[[dict], Any], ...] = (
    _key("contentJson"),
    _key("content_json"),
    _content_under("result"),
    _content_under("data"),
    _first_content_value,
    _whole_document,
)


def resolve_candidate(parsed: Any) -> Any:
    """Locate the content document inside a parsed envelope."""
    if isinstance(parsed, dict):
        for extractor in CANDIDATE_EXTRACTORS:
            candidate = extractor(parsed)
            if candidate is not _MISSING:
                logger.debug("Content candidate resolved via %s", extractor.__name__)
                return candidate
    raise ContentContractError("LLM response missing contentJson field.")


def coerce_candidate(candidate: Any) -> dict:
    """Return ``candidate`` as an object, re-parsing JSON-encoded strings."""
    if isinstance(candidate, str):
        try:
            candidate = json.loads(candidate)
        except (json.JSONDecodeError, RecursionError) as exc:
            raise ContentContractError("contentJson must be a valid JSON object.") from exc
    if not isinstance(candidate, dict):
        raise ContentContractError("contentJson must be a valid JSON object.")
    return candidate


def parse_generated_payload(text: str) -> GeneratedPayload:
    """Run the full envelope -> candidate -> normalized document pipeline."""
    parsed = decode_envelope(unwrap_envelope(text))

    if isinstance(parsed, dict) and any(key in parsed for key in DISALLOWED_TOP_LEVEL_KEYS):
        raise ContentContractError("LLM output must not contain html/css/js fields.")

    candidate = coerce_candidate(resolve_candidate(parsed))
    content_json = normalize_content(candidate)
    return GeneratedPayload(
        content_json=content_json,
        commit_message=_commit_message(parsed),
    )


def _commit_message(parsed: dict) -> Optional[str]:
    message = parsed.get("commitMessage")
    if isinstance(message, str) and message.strip():
        return message.strip()
    return None


__all__ = [
    "CANDIDATE_EXTRACTORS",
    "DISALLOWED_TOP_LEVEL_KEYS",
    "GeneratedPayload",
    "STRICT_JSON_MESSAGE",
    "coerce_candidate",
    "decode_envelope",
    "parse_generated_payload",
    "resolve_candidate",
    "unwrap_envelope",
]
