"""Pricing evaluator for both engine generations.

``price`` branches on the profile's ``engineVersion`` tag:

* ``runtime-v1`` accrues cost units, converts them to whole credits and
  always rejects unmatched usage.
* ``runtime-v2`` accrues credits directly, verifies the recorded ruleset
  hash, and in ``RUNTIME`` mode quarantines a charge instead of failing.

Evaluation is synchronous and never mutates the profile.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any

import structlog

from countwerk_sdk.core.constants import (
    EngineGeneration,
    PricingMode,
    QuarantineReason,
    RoundingMode,
)
from countwerk_sdk.core.exceptions import (
    RulesetHashMismatchError,
    UnmatchedDimensionError,
)
from countwerk_sdk.pricing.canonical import ruleset_hash
from countwerk_sdk.pricing.models import (
    BreakdownRowV1,
    BreakdownRowV2,
    PriceResult,
    PriceResultV1,
    PriceResultV2,
    PricingInput,
    ProfileVersion,
    ProfileVersionV1,
    ProfileVersionV2,
)
from countwerk_sdk.pricing.rounding import round_credits
from countwerk_sdk.pricing.selection import pick_matching_rule

logger = structlog.get_logger(__name__)


def _quantity(raw: Any) -> float | None:
    """Coerce a dimension value to a positive finite quantity, else ``None``."""
    if isinstance(raw, bool) or raw is None:
        return None
    try:
        qty = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(qty) or qty <= 0:
        return None
    return qty


def _as_input(pricing_input: PricingInput | dict[str, Any]) -> PricingInput:
    if isinstance(pricing_input, PricingInput):
        return pricing_input
    return PricingInput.model_validate(pricing_input)


def calculate_credits(
    cu_total: float,
    cu_per_credit: float,
    min_charge_credits: float | None = None,
    rounding_mode: RoundingMode | str = RoundingMode.CEIL,
) -> float:
    """Convert cost units to whole credits, raised to the minimum charge.

    A zero cost-unit total charges nothing, whatever the minimum.
    """
    if cu_total <= 0:
        return 0
    credits = round_credits(cu_total / cu_per_credit, rounding_mode)
    if min_charge_credits is not None and credits < min_charge_credits:
        return min_charge_credits
    return credits


# ---------------------------------------------------------------------------
# Generation 1
# ---------------------------------------------------------------------------


def price_v1(
    profile: ProfileVersionV1,
    pricing_input: PricingInput,
    precomputed_hash: str | None = None,
) -> PriceResultV1:
    ruleset = profile.ruleset
    attributes = pricing_input.attributes
    breakdown: list[BreakdownRowV1] = []
    rule_ids_used: list[str] = []
    unmatched: list[str] = []
    cu_total = 0.0

    for dimension, raw in pricing_input.dimensions.items():
        qty = _quantity(raw)
        if qty is None:
            continue

        rule = pick_matching_rule(ruleset.rate_rules, dimension, attributes)
        if rule is None:
            unmatched.append(dimension)
            continue

        row_cost = qty * rule.rate
        cu_total += row_cost
        breakdown.append(
            BreakdownRowV1(
                dimension_key=dimension,
                qty=qty,
                rate=rule.rate,
                cu_cost=row_cost,
                rule_id=rule.id,
            )
        )
        if rule.id not in rule_ids_used:
            rule_ids_used.append(rule.id)

    if unmatched:
        raise UnmatchedDimensionError(unmatched, attributes or {})

    return PriceResultV1(
        cu_total=cu_total,
        credits=calculate_credits(
            cu_total, ruleset.cu_per_credit, ruleset.min_charge_credits
        ),
        breakdown=breakdown,
        rule_ids_used=rule_ids_used,
        ruleset_hash=precomputed_hash or ruleset_hash(ruleset.rate_rules),
        profile_version_id=profile.id,
        engine_version=EngineGeneration.V1,
    )


# ---------------------------------------------------------------------------
# Generation 2
# ---------------------------------------------------------------------------


def price_v2(
    profile: ProfileVersionV2,
    pricing_input: PricingInput,
    mode: PricingMode | str | None = None,
    *,
    precomputed_hash: str | None = None,
    round_deduction: bool = False,
    rounding_mode: RoundingMode | str = RoundingMode.CEIL,
) -> PriceResultV2:
    """Price *pricing_input* in credits.

    Args:
        mode: Overrides ``pricing_input.mode``; ``STRICT`` when neither is set.
        precomputed_hash: Skip recomputing the ruleset hash and compare the
            recorded hash against this one instead.
        round_deduction: Also report ``credits_to_deduct``, the total rounded
            with *rounding_mode*.

    Raises:
        RulesetHashMismatchError: ``STRICT`` mode and the recorded hash differs.
        UnmatchedDimensionError: ``STRICT`` mode and a dimension had no rule.
    """
    effective_mode = PricingMode(mode or pricing_input.mode or PricingMode.STRICT)
    ruleset = profile.ruleset
    attributes = pricing_input.attributes
    quarantine_reason: QuarantineReason | None = None

    actual_hash = precomputed_hash or ruleset_hash(ruleset.rate_rules)
    recorded_hash = ruleset.ruleset_hash
    if recorded_hash and recorded_hash != actual_hash:
        if effective_mode is PricingMode.STRICT:
            raise RulesetHashMismatchError(recorded_hash, actual_hash)
        quarantine_reason = QuarantineReason.RULESET_HASH_MISMATCH
        logger.warning(
            "pricing_ruleset_hash_mismatch",
            profile_version_id=profile.id,
            expected_hash=recorded_hash,
            actual_hash=actual_hash,
        )

    breakdown: list[BreakdownRowV2] = []
    rule_ids_used: list[str] = []
    unmatched: list[str] = []
    total_credits = 0.0

    for dimension, raw in pricing_input.dimensions.items():
        qty = _quantity(raw)
        if qty is None:
            continue

        rule = pick_matching_rule(
            ruleset.rate_rules, dimension, attributes, empty_is_wildcard=True
        )
        if rule is None:
            unmatched.append(dimension)
            continue

        row_credits = qty * rule.credits_per_unit
        total_credits += row_credits
        breakdown.append(
            BreakdownRowV2(
                dimension_key=dimension,
                qty=qty,
                credits_per_unit=rule.credits_per_unit,
                credits=row_credits,
                cost_per_unit_eur=rule.cost_per_unit_eur,
                cost_eur=(
                    qty * rule.cost_per_unit_eur
                    if rule.cost_per_unit_eur is not None
                    else None
                ),
                rule_id=rule.id,
            )
        )
        if rule.id not in rule_ids_used:
            rule_ids_used.append(rule.id)

    if unmatched:
        if effective_mode is PricingMode.STRICT:
            raise UnmatchedDimensionError(unmatched, attributes or {})
        if quarantine_reason is None:
            quarantine_reason = QuarantineReason.UNMATCHED_DIMENSION
        logger.warning(
            "pricing_unmatched_dimension",
            profile_version_id=profile.id,
            unmatched_dimensions=unmatched,
        )

    if quarantine_reason is not None:
        logger.info(
            "pricing_quarantined",
            profile_version_id=profile.id,
            reason=quarantine_reason,
            total_credits=total_credits,
        )

    return PriceResultV2(
        total_credits=total_credits,
        credits_to_deduct=(
            round_credits(total_credits, rounding_mode) if round_deduction else None
        ),
        breakdown=breakdown,
        rule_ids_used=rule_ids_used,
        ruleset_hash=actual_hash,
        profile_version_id=profile.id,
        profile_version=profile.version,
        engine_version=EngineGeneration.V2,
        mode=effective_mode,
        unmatched_dimensions=unmatched or None,
        quarantine_reason=quarantine_reason,
    )


# ---------------------------------------------------------------------------
# Dispatch and handle
# ---------------------------------------------------------------------------


def price(
    profile: ProfileVersion,
    pricing_input: PricingInput | dict[str, Any],
    mode: PricingMode | str | None = None,
    *,
    precomputed_hash: str | None = None,
    round_deduction: bool = False,
    rounding_mode: RoundingMode | str = RoundingMode.CEIL,
) -> PriceResult:
    """Price usage against *profile* using the algorithm its generation declares.

    *mode*, *round_deduction* and *rounding_mode* only affect generation 2;
    generation 1 always rejects unmatched usage and always rounds up.
    """
    pricing_input = _as_input(pricing_input)
    if isinstance(profile, ProfileVersionV2):
        return price_v2(
            profile,
            pricing_input,
            mode,
            precomputed_hash=precomputed_hash,
            round_deduction=round_deduction,
            rounding_mode=rounding_mode,
        )
    if isinstance(profile, ProfileVersionV1):
        return price_v1(profile, pricing_input, precomputed_hash)
    raise TypeError(f"Unsupported profile type {type(profile).__name__}")


class PricingEngine:
    """A loaded, validated profile version with its ruleset hash cached.

    Built by :func:`~countwerk_sdk.pricing.loader.load_profile_version`.
    The handle holds no mutable state and may be shared between threads.

    Example::

        engine = load_profile_version(document)
        result = engine.price({"dimensions": {"tokens": 500}})
        record = engine.build_audit_payload({"dimensions": {"tokens": 500}}, result)
    """

    __slots__ = ("_profile", "_ruleset_hash")

    def __init__(self, profile: ProfileVersion) -> None:
        self._profile = profile
        self._ruleset_hash = ruleset_hash(profile.ruleset.rate_rules)

    @property
    def profile_version(self) -> ProfileVersion:
        return self._profile

    @property
    def ruleset_hash(self) -> str:
        """Hash of the active rules, computed once at load."""
        return self._ruleset_hash

    @property
    def engine_version(self) -> EngineGeneration:
        return EngineGeneration(self._profile.engine_version)

    def price(
        self,
        pricing_input: PricingInput | dict[str, Any],
        mode: PricingMode | str | None = None,
        *,
        recompute_hash: bool = True,
        round_deduction: bool = False,
        rounding_mode: RoundingMode | str = RoundingMode.CEIL,
    ) -> PriceResult:
        """Price usage against this profile.

        Generation 1 always charges against the cached hash.  Generation 2
        recomputes the hash for the mismatch check unless *recompute_hash*
        is ``False``.
        """
        use_cached = (
            self._profile.engine_version == EngineGeneration.V1 or not recompute_hash
        )
        return price(
            self._profile,
            pricing_input,
            mode,
            precomputed_hash=self._ruleset_hash if use_cached else None,
            round_deduction=round_deduction,
            rounding_mode=rounding_mode,
        )

    def build_audit_payload(
        self,
        pricing_input: PricingInput | dict[str, Any],
        result: PriceResult,
        *,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        from countwerk_sdk.audit.builder import build_audit_payload  # noqa: PLC0415

        return build_audit_payload(
            self._profile, _as_input(pricing_input), result, now=now
        )

    def __repr__(self) -> str:
        return (
            f"PricingEngine(profile_version_id={self._profile.id!r}, "
            f"engine_version={self._profile.engine_version!r}, "
            f"ruleset_hash={self._ruleset_hash[:12]!r})"
        )
