"""Tests for forbidden-key rejection, whitelisting and canonical output."""

from __future__ import annotations

import json

import pytest

from portfolio_updater.content import sanitizer
from portfolio_updater.content.sanitizer import (
    canonical_json,
    normalize_content,
    reject_forbidden_keys,
    whitelist_content,
)
from portfolio_updater.errors import ContentContractError


def test_normalize_is_idempotent(document) -> None:
    once = normalize_content(document)
    twice = normalize_content(json.loads(once))
    assert once == twice


def test_canonical_output_uses_two_space_indent_and_schema_order(document) -> None:
    shuffled = {key: document[key] for key in reversed(list(document))}
    shuffled["personal_brand"] = dict(reversed(list(document["personal_brand"].items())))

    text = normalize_content(shuffled)

    assert text.startswith('{\n  "personal_brand": {\n    "hero_statement"')
    assert list(json.loads(text)) == [
        "personal_brand",
        "services",
        "portfolio_demos",
        "social_proof",
        "connect_links",
    ]


def test_round_trip_matches_whitelisted_input(document) -> None:
    document["services"][0]["internal_note"] = "drop me"
    document["connect_links"]["website"] = "https://example.com"
    document["bonus_section"] = {"anything": True}

    text = normalize_content(document)

    assert json.loads(text) == whitelist_content(document)
    reparsed = json.loads(text)
    assert "bonus_section" not in reparsed
    assert "internal_note" not in reparsed["services"][0]
    assert "website" not in reparsed["connect_links"]


def test_non_ascii_text_is_kept_verbatim(document) -> None:
    document["personal_brand"]["hero_statement"] = "Automatisé — toujours ★"
    assert "Automatisé — toujours ★" in normalize_content(document)


@pytest.mark.parametrize("key", ["Price", "PRICING", "Tier", "Style", "unitPrice", "frontier"])
def test_forbidden_key_fragments_are_case_insensitive(document, key) -> None:
    document["services"][0][key] = "x"
    with pytest.raises(ContentContractError, match="Pricing or style/tier data is not allowed"):
        normalize_content(document)


def test_forbidden_key_names_its_path(document) -> None:
    document["social_proof"]["google_reviews"][0]["tier"] = "gold"
    with pytest.raises(ContentContractError, match=r"social_proof\.google_reviews\[0\]\.tier"):
        reject_forbidden_keys(document)


def test_forbidden_key_in_dropped_section_still_fails(document) -> None:
    document["bonus_section"] = [{"nested": {"pricing_table": []}}]
    with pytest.raises(ContentContractError):
        normalize_content(document)


def test_forbidden_scan_runs_before_whitelisting(document, monkeypatch) -> None:
    document["services"][0]["tier"] = "gold"
    calls = []
    monkeypatch.setattr(
        sanitizer,
        "whitelist_content",
        lambda value: calls.append(value) or value,
    )

    with pytest.raises(ContentContractError):
        normalize_content(document)
    assert calls == []


def test_forbidden_values_are_not_keys(document) -> None:
    document["services"][0]["description"] = "No pricing tiers, just outcomes."
    normalize_content(document)


def test_whitelist_passes_through_wrong_shapes_for_validator(document) -> None:
    document["services"] = "not a list"

    sanitized = whitelist_content(document)

    assert sanitized["services"] == "not a list"
    with pytest.raises(ContentContractError, match="services must be an array."):
        normalize_content(document)


def test_whitelist_keeps_missing_sections_missing(document) -> None:
    del document["connect_links"]

    assert "connect_links" not in whitelist_content(document)
    with pytest.raises(ContentContractError, match="Missing required key: connect_links"):
        normalize_content(document)


def test_missing_nested_object_reported_after_whitelist(document) -> None:
    del document["social_proof"]["google_reviews"]
    with pytest.raises(
        ContentContractError, match="Missing required key: social_proof.google_reviews"
    ):
        normalize_content(document)


def test_non_object_document_is_rejected() -> None:
    with pytest.raises(ContentContractError, match="must be a valid JSON object"):
        normalize_content(["personal_brand"])


def test_canonical_json_format() -> None:
    assert canonical_json({"a": [1]}) == '{\n  "a": [\n    1\n  ]\n}'


def test_deeply_nested_document_is_a_contract_error(document) -> None:
    nested: list = []
    for _ in range(20_000):
        nested = [nested]
    document["bonus_section"] = nested
    with pytest.raises(ContentContractError, match="nested too deeply"):
        normalize_content(document)
