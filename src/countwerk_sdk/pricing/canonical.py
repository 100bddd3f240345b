"""Canonical ruleset hashing.

The hash is an integrity signature shared with other implementations of the
engine, so the serialisation below mirrors ``JSON.stringify`` byte for byte:
object keys sorted, arrays in order, no whitespace, and numbers in
ECMAScript ``Number#toString`` form (``2`` not ``2.0``, ``1e-7`` not
``1e-07``).  :func:`json.dumps` is only trusted for string escaping.
"""

from __future__ import annotations

import hashlib
import json
import math
from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any

from countwerk_sdk.pricing.collation import collation_key
from countwerk_sdk.pricing.models import (
    AttributeMatch,
    PricingRule,
    PricingRuleV1,
    PricingRuleV2,
)

# Integers at or beyond this magnitude switch to exponent notation in JS.
_JS_EXPONENT_THRESHOLD = 21


def format_number(value: int | float) -> str:
    """Format *value* exactly as ECMAScript's ``Number#toString`` would."""
    if isinstance(value, int) and abs(value) < 10 ** _JS_EXPONENT_THRESHOLD:
        return str(value)
    value = float(value)
    if not math.isfinite(value):
        # JSON.stringify(NaN) === "null"
        return "null"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    _, digit_tuple, exponent = Decimal(repr(abs(value))).normalize().as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    k = len(digits)
    n = k + int(exponent)

    if k <= n <= _JS_EXPONENT_THRESHOLD:
        body = digits + "0" * (n - k)
    elif 0 < n <= _JS_EXPONENT_THRESHOLD:
        body = f"{digits[:n]}.{digits[n:]}"
    elif -6 < n <= 0:
        body = "0." + "0" * -n + digits
    else:
        e = n - 1
        mantissa = digits if k == 1 else f"{digits[0]}.{digits[1:]}"
        body = f"{mantissa}e{'+' if e >= 0 else '-'}{abs(e)}"
    return sign + body


def stable_stringify(value: Any) -> str:
    """Serialise *value* deterministically, independent of key insertion order."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, Mapping):
        items = (
            f"{json.dumps(str(key), ensure_ascii=False)}:{stable_stringify(value[key])}"
            for key in sorted(value)
        )
        return "{" + ",".join(items) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(stable_stringify(item) for item in value) + "]"
    raise TypeError(f"Cannot canonicalise value of type {type(value).__name__}")


def normalize_attributes(attributes: AttributeMatch | None) -> dict[str, Any]:
    """Sort attribute keys and the members of any value set."""
    if not attributes:
        return {}
    normalized: dict[str, Any] = {}
    for key in sorted(attributes):
        expected = attributes[key]
        normalized[key] = sorted(expected) if isinstance(expected, list) else expected
    return normalized


def normalized_rule_for_hash(rule: PricingRule) -> dict[str, Any]:
    """Project a rule onto the fields that take part in the ruleset hash."""
    projection: dict[str, Any] = {
        "attributesMatch": normalize_attributes(rule.attributes_match),
        "dimensionKey": rule.dimension_key,
        "id": rule.id,
        "priority": rule.priority,
        "status": rule.status,
    }
    if isinstance(rule, PricingRuleV1):
        projection["rate"] = rule.rate
        projection["rateType"] = rule.rate_type
    elif isinstance(rule, PricingRuleV2):
        projection["creditsPerUnit"] = rule.credits_per_unit
        # An absent EUR cost hashes as null, so adding one later changes the hash.
        projection["costPerUnitEur"] = rule.cost_per_unit_eur
    else:
        raise TypeError(f"Unsupported rule type {type(rule).__name__}")
    return projection


def canonical_ruleset(rules: Iterable[PricingRule]) -> str:
    """Return the canonical string the ruleset hash is computed over."""
    normalized = sorted(
        (normalized_rule_for_hash(rule) for rule in rules if not rule.is_disabled),
        key=lambda r: (collation_key(r["dimensionKey"]), collation_key(r["id"])),
    )
    return stable_stringify(normalized)


def ruleset_hash(rules: Iterable[PricingRule]) -> str:
    """SHA-256 (lowercase hex) over the canonical form of the active rules."""
    return hashlib.sha256(canonical_ruleset(rules).encode("utf-8")).hexdigest()
