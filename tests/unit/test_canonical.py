"""Tests for pricing/canonical.py — stable stringify and ruleset hashing."""
from __future__ import annotations

import copy
from typing import Any

import pytest

from countwerk_sdk.pricing.canonical import (
    canonical_ruleset,
    format_number,
    normalize_attributes,
    ruleset_hash,
    stable_stringify,
)
from countwerk_sdk.pricing.models import PricingRuleV1, PricingRuleV2


def _v1(*rules: dict[str, Any]) -> list[PricingRuleV1]:
    return [PricingRuleV1.model_validate(r) for r in rules]


def _v2(*rules: dict[str, Any]) -> list[PricingRuleV2]:
    return [PricingRuleV2.model_validate(r) for r in rules]


# ---------------------------------------------------------------------------
# format_number: ECMAScript Number#toString
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (2, "2"),
        (2.0, "2"),
        (-0.0, "0"),
        (0.01, "0.01"),
        (-0.5, "-0.5"),
        (123.456, "123.456"),
        (100.0, "100"),
        (0.000001, "0.000001"),
        (1e-7, "1e-7"),
        (1e21, "1e+21"),
        (1.5e21, "1.5e+21"),
        (1e20, "100000000000000000000"),
        (float("nan"), "null"),
    ],
)
def test_format_number_matches_js(value: float, expected: str) -> None:
    assert format_number(value) == expected


# ---------------------------------------------------------------------------
# stable_stringify
# ---------------------------------------------------------------------------


def test_stable_stringify_sorts_keys_and_keeps_array_order() -> None:
    value = {"b": [3, 1, "x\n"], "a": None, "c": True}
    assert stable_stringify(value) == '{"a":null,"b":[3,1,"x\\n"],"c":true}'


def test_stable_stringify_nested_and_unicode() -> None:
    value = {"z": {"y": 1.5, "x": "é"}, "a": []}
    assert stable_stringify(value) == '{"a":[],"z":{"x":"é","y":1.5}}'


def test_stable_stringify_independent_of_insertion_order() -> None:
    assert stable_stringify({"a": 1, "b": 2}) == stable_stringify({"b": 2, "a": 1})


def test_stable_stringify_rejects_unknown_types() -> None:
    with pytest.raises(TypeError):
        stable_stringify({"a": {1, 2}})


def test_normalize_attributes_sorts_keys_and_sets() -> None:
    normalized = normalize_attributes({"tier": ["platinum", "gold"], "region": "eu"})
    assert list(normalized) == ["region", "tier"]
    assert normalized["tier"] == ["gold", "platinum"]
    assert normalize_attributes(None) == {}


# ---------------------------------------------------------------------------
# ruleset_hash: golden values shared with other implementations
# ---------------------------------------------------------------------------


def test_canonical_form_of_single_v1_rule() -> None:
    rules = _v1({"id": "r1", "dimensionKey": "tokens", "rate": 2})
    assert canonical_ruleset(rules) == (
        '[{"attributesMatch":{},"dimensionKey":"tokens","id":"r1","priority":0,'
        '"rate":2,"rateType":"cu_per_unit","status":"active"}]'
    )


def test_golden_hash_single_v1_rule() -> None:
    rules = _v1({"id": "r1", "dimensionKey": "tokens", "rate": 2})
    assert ruleset_hash(rules) == (
        "d98ff6e507e325957eb30ab3a1eb7130461404ccb47a977b25115977eaee2f40"
    )


def test_golden_hash_v2_rule_with_absent_eur_cost() -> None:
    rules = _v2({"id": "r1", "dimensionKey": "tokens", "creditsPerUnit": 0.01})
    assert '"costPerUnitEur":null' in canonical_ruleset(rules)
    assert ruleset_hash(rules) == (
        "f8b7ac3b4410d25231fa8f89215834da97115bcd385d1b4e906c3497541d7910"
    )


def test_golden_hash_sorted_rules_and_attributes() -> None:
    rules = _v1(
        {"id": "a", "dimensionKey": "tokens", "rate": 1e-7, "attributesMatch": {}},
        {
            "id": "b",
            "dimensionKey": "images",
            "rate": 0.5,
            "priority": 5,
            "attributesMatch": {"tier": ["platinum", "gold"], "region": "eu"},
        },
    )
    assert ruleset_hash(rules) == (
        "4be7339e581eed32b15f1b9d826d6f509948d4bcdbaa3dfff713cc509245537d"
    )


@pytest.mark.parametrize(
    ("audio_rate", "expected"),
    [
        (1, "43e84d01e98b8703c5ac2d51048bbd8ae1a5d3b0512b2eb4c7e1e204ae75a313"),
        (2, "a3f694267cb81025d65f407179e6de5a994b78ebd8e6c24d72514b585883f59c"),
    ],
)
def test_golden_hash_mixed_case_dimension_keys(audio_rate: int, expected: str) -> None:
    rules = _v1(
        {"id": "r1", "dimensionKey": "Tokens", "rate": 1},
        {"id": "r2", "dimensionKey": "audio", "rate": audio_rate},
    )
    canonical = canonical_ruleset(rules)
    assert canonical.index('"audio"') < canonical.index('"Tokens"')
    assert ruleset_hash(rules) == expected


def test_golden_hash_mixed_case_ids_follow_collation_order() -> None:
    rules = _v1(
        {"id": "rule-2", "dimensionKey": "tokens", "rate": 3},
        {"id": "B", "dimensionKey": "tokens", "rate": 1},
        {"id": "Rule10", "dimensionKey": "tokens", "rate": 5},
        {"id": "a", "dimensionKey": "tokens", "rate": 2},
        {"id": "rule_1", "dimensionKey": "tokens", "rate": 4},
    )
    assert ruleset_hash(rules) == (
        "36d106b5ff8bd2a21b92743560d9b942fe55a19d3917d4b32c878105997c3a6e"
    )


def test_golden_hash_attribute_keys_keep_code_point_order() -> None:
    rules = _v1(
        {
            "id": "r1",
            "dimensionKey": "tokens",
            "rate": 1,
            "attributesMatch": {"tier": ["gold", "Pro"], "Region": "eu"},
        }
    )
    assert '{"Region":"eu","tier":["Pro","gold"]}' in canonical_ruleset(rules)
    assert ruleset_hash(rules) == (
        "358212f1b1c7a9afe8ffe618f1d4c8c8679b03e2f80b8a58f2e55e4cc22962ae"
    )


# ---------------------------------------------------------------------------
# ruleset_hash: properties
# ---------------------------------------------------------------------------


_RULES: list[dict[str, Any]] = [
    {"id": "r2", "dimensionKey": "tokens", "rate": 1, "priority": 1},
    {"id": "r1", "dimensionKey": "tokens", "rate": 3},
    {"id": "r3", "dimensionKey": "images", "rate": 7, "attributesMatch": {"tier": "gold"}},
]


def test_hash_is_permutation_invariant() -> None:
    forward = ruleset_hash(_v1(*_RULES))
    backward = ruleset_hash(_v1(*reversed(_RULES)))
    assert forward == backward
    assert len(forward) == 64
    assert forward == forward.lower()


def test_hash_ignores_disabled_rules() -> None:
    disabled = {"id": "r9", "dimensionKey": "tokens", "rate": 99, "status": "disabled"}
    tweaked = dict(disabled, rate=12345)
    baseline = ruleset_hash(_v1(*_RULES))
    assert ruleset_hash(_v1(*_RULES, disabled)) == baseline
    assert ruleset_hash(_v1(*_RULES, tweaked)) == baseline


def test_hash_changes_when_active_rate_changes() -> None:
    mutated = copy.deepcopy(_RULES)
    mutated[0]["rate"] = 1.5
    assert ruleset_hash(_v1(*mutated)) != ruleset_hash(_v1(*_RULES))


def test_hash_v2_distinguishes_absent_and_present_eur_cost() -> None:
    without = _v2({"id": "r1", "dimensionKey": "tokens", "creditsPerUnit": 0.01})
    with_cost = _v2(
        {"id": "r1", "dimensionKey": "tokens", "creditsPerUnit": 0.01, "costPerUnitEur": 0.0}
    )
    assert ruleset_hash(without) != ruleset_hash(with_cost)


def test_hash_ignores_created_at() -> None:
    stamped = [dict(r, createdAt="2025-01-01T00:00:00Z") for r in _RULES]
    assert ruleset_hash(_v1(*stamped)) == ruleset_hash(_v1(*_RULES))
