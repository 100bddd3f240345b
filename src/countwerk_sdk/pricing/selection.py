"""Rule selection: attribute matching and the deterministic winner order."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import TypeVar

from countwerk_sdk.pricing.collation import collation_key
from countwerk_sdk.pricing.models import AttributeMatch, PricingRule

_R = TypeVar("_R", bound=PricingRule)


def attributes_match(
    rule_attributes: AttributeMatch | None,
    input_attributes: Mapping[str, str] | None,
    *,
    empty_is_wildcard: bool = False,
) -> bool:
    """Return whether every attribute a rule lists is satisfied by the input.

    A rule without ``attributesMatch`` always matches.  An empty mapping only
    matches unconditionally with ``empty_is_wildcard`` (generation 2); in
    generation 1 it still requires the caller to send attributes at all.
    """
    if rule_attributes is None:
        return True
    if not rule_attributes and empty_is_wildcard:
        return True
    if input_attributes is None:
        return False

    for key, expected in rule_attributes.items():
        actual = input_attributes.get(key)
        if actual is None:
            return False
        if isinstance(expected, list):
            if actual not in expected:
                return False
        elif expected != actual:
            return False
    return True


def rule_created_at_ms(rule: PricingRule) -> float:
    """Epoch milliseconds of ``createdAt``; missing or unparsable sorts earliest.

    Timestamps without an offset, date-only or date-time, are read as UTC
    and never as the host's local time.
    """
    raw = rule.created_at
    if not raw:
        return 0.0
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return 0.0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp() * 1000.0


def _precedence(rule: PricingRule) -> tuple[int, float, tuple[int, ...]]:
    # Highest priority, then newest, then first id in collation order.
    return (-rule.priority, -rule_created_at_ms(rule), collation_key(rule.id))


def pick_matching_rule(
    rules: Iterable[_R],
    dimension: str,
    attributes: Mapping[str, str] | None,
    *,
    empty_is_wildcard: bool = False,
) -> _R | None:
    """Pick the single winning rule for *dimension*, or ``None`` if none applies."""
    candidates = [
        rule
        for rule in rules
        if not rule.is_disabled
        and rule.dimension_key == dimension
        and attributes_match(
            rule.attributes_match, attributes, empty_is_wildcard=empty_is_wildcard
        )
    ]
    if not candidates:
        return None
    return min(candidates, key=_precedence)
