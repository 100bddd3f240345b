"""Audit payloads: a flat, JSON-ready record of one pricing call."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from countwerk_sdk.pricing.models import (
    PriceResult,
    PriceResultV2,
    PricingInput,
    ProfileVersion,
)


def format_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a ``Z`` suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    iso = moment.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return iso.replace("+00:00", "Z")


def build_audit_payload(
    profile: ProfileVersion,
    pricing_input: PricingInput,
    result: PriceResult,
    *,
    ruleset_hash: str | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Project a pricing call into a reviewable record.

    ``timestamp`` is the only field that depends on the clock; pass *now* to
    pin it.  *ruleset_hash* overrides the hash reported by *result*.
    Consumers must tolerate keys they do not know.
    """
    payload: dict[str, Any] = {
        "timestamp": format_timestamp(now or datetime.now(timezone.utc)),
        "engineVersion": result.engine_version,
        "profileVersionId": profile.id,
        "rulesetHash": ruleset_hash or result.ruleset_hash,
        "ruleIdsUsed": list(result.rule_ids_used),
        "dimensions": dict(pricing_input.dimensions),
        "attributes": dict(pricing_input.attributes or {}),
    }

    if not isinstance(result, PriceResultV2):
        payload["cuTotal"] = result.cu_total
        payload["creditsDeducted"] = result.credits
        return payload

    payload["profileVersion"] = result.profile_version
    payload["mode"] = result.mode.value
    payload["totalCredits"] = result.total_credits
    payload["costEur"] = result.total_cost_eur
    if result.credits_to_deduct is not None:
        payload["creditsToDeduct"] = result.credits_to_deduct
    if result.unmatched_dimensions:
        payload["unmatchedDimensions"] = list(result.unmatched_dimensions)
    if result.quarantine_reason is not None:
        payload["quarantineReason"] = result.quarantine_reason.value
    return payload
