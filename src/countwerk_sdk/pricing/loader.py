"""Profile version loading and structural validation."""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import BaseModel, ValidationError

from countwerk_sdk.core.constants import EngineGeneration, RateType, RuleStatus
from countwerk_sdk.core.exceptions import ProfileValidationError
from countwerk_sdk.pricing.engine import PricingEngine
from countwerk_sdk.pricing.models import (
    ProfileVersion,
    ProfileVersionV1,
    ProfileVersionV2,
)

logger = structlog.get_logger(__name__)

ProfileDocument = str | bytes | Mapping[str, Any] | ProfileVersion

_CONVERSION_FACTOR = {
    EngineGeneration.V1: "cuPerCredit",
    EngineGeneration.V2: "eurPerCredit",
}


def _is_finite_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def _decode(document: ProfileDocument) -> Any:
    if isinstance(document, BaseModel):
        return document.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(document, (str, bytes)):
        try:
            return json.loads(document)
        except json.JSONDecodeError as exc:
            raise ProfileValidationError(
                f"ProfileVersion is not valid JSON: {exc.msg}.", field="$"
            ) from exc
    return document


def _generation(data: Mapping[str, Any]) -> EngineGeneration:
    raw = data.get("engineVersion")
    if raw is None:
        return EngineGeneration.V1
    try:
        return EngineGeneration(raw)
    except ValueError:
        allowed = ", ".join(g.value for g in EngineGeneration)
        raise ProfileValidationError(
            f"ProfileVersion.engineVersion must be one of {allowed}.",
            field="engineVersion",
        ) from None


def _normalize_rule(
    rule: Any, index: int, generation: EngineGeneration
) -> dict[str, Any]:
    """Apply rule defaults and check the fields pricing depends on."""
    if not isinstance(rule, Mapping):
        raise ProfileValidationError(
            f"Ruleset.rateRules[{index}] must be an object.",
            field=f"ruleset.rateRules[{index}]",
        )
    normalized = {key: value for key, value in rule.items() if value is not None}
    normalized.setdefault("status", RuleStatus.ACTIVE.value)

    rule_id = normalized.get("id")
    if not rule_id:
        raise ProfileValidationError(
            "Rule.id is required.", field=f"ruleset.rateRules[{index}].id"
        )
    if not normalized.get("dimensionKey"):
        raise ProfileValidationError(
            f"Rule.dimensionKey is required (rule {rule_id}).",
            field=f"ruleset.rateRules[{index}].dimensionKey",
            rule_id=str(rule_id),
        )

    if generation is EngineGeneration.V1:
        normalized.setdefault("rateType", RateType.CU_PER_UNIT.value)
        if not _is_finite_number(normalized.get("rate")):
            raise ProfileValidationError(
                f"Rule.rate must be a number (rule {rule_id}).",
                field=f"ruleset.rateRules[{index}].rate",
                rule_id=str(rule_id),
            )
        if normalized["rateType"] != RateType.CU_PER_UNIT:
            raise ProfileValidationError(
                f"Rule.rateType must be '{RateType.CU_PER_UNIT}' (rule {rule_id}).",
                field=f"ruleset.rateRules[{index}].rateType",
                rule_id=str(rule_id),
            )
    else:
        if not _is_finite_number(normalized.get("creditsPerUnit")):
            raise ProfileValidationError(
                f"Rule.creditsPerUnit must be a number (rule {rule_id}).",
                field=f"ruleset.rateRules[{index}].creditsPerUnit",
                rule_id=str(rule_id),
            )
        if "costPerUnitEur" in normalized and not _is_finite_number(
            normalized["costPerUnitEur"]
        ):
            raise ProfileValidationError(
                f"Rule.costPerUnitEur must be a number (rule {rule_id}).",
                field=f"ruleset.rateRules[{index}].costPerUnitEur",
                rule_id=str(rule_id),
            )
    return normalized


def parse_profile_version(document: ProfileDocument) -> ProfileVersion:
    """Validate a profile version document and return the frozen model.

    Accepts a JSON string, an already-parsed mapping, or a model instance
    (which is re-validated).  The input is never mutated.

    Raises:
        ProfileValidationError: naming the first offending field.
    """
    data = _decode(document)
    if not isinstance(data, Mapping):
        raise ProfileValidationError("ProfileVersion must be an object.", field="$")

    generation = _generation(data)
    if not data.get("id"):
        raise ProfileValidationError("ProfileVersion.id is required.", field="id")
    if generation is EngineGeneration.V2 and data.get("version") in (None, ""):
        raise ProfileValidationError(
            "ProfileVersion.version is required.", field="version"
        )

    ruleset = data.get("ruleset")
    if not isinstance(ruleset, Mapping):
        raise ProfileValidationError(
            "ProfileVersion.ruleset is required.", field="ruleset"
        )

    factor_key = _CONVERSION_FACTOR[generation]
    factor = ruleset.get(factor_key)
    if not _is_finite_number(factor) or factor <= 0:
        raise ProfileValidationError(
            f"Ruleset.{factor_key} must be a positive number.",
            field=f"ruleset.{factor_key}",
        )

    min_charge = ruleset.get("minChargeCredits")
    if generation is EngineGeneration.V1 and min_charge is not None:
        if not _is_finite_number(min_charge) or min_charge < 0:
            raise ProfileValidationError(
                "Ruleset.minChargeCredits must be a non-negative number.",
                field="ruleset.minChargeCredits",
            )

    rules = ruleset.get("rateRules")
    if not isinstance(rules, list):
        raise ProfileValidationError(
            "Ruleset.rateRules must be an array.", field="ruleset.rateRules"
        )
    if generation is EngineGeneration.V2 and not rules:
        raise ProfileValidationError(
            "Ruleset.rateRules must not be empty.", field="ruleset.rateRules"
        )

    normalized_rules = [
        _normalize_rule(rule, index, generation) for index, rule in enumerate(rules)
    ]
    seen: set[str] = set()
    for index, rule in enumerate(normalized_rules):
        rule_key = str(rule["id"])
        if rule_key in seen:
            raise ProfileValidationError(
                f"Rule.id must be unique (rule {rule['id']}).",
                field=f"ruleset.rateRules[{index}].id",
                rule_id=str(rule["id"]),
            )
        seen.add(rule_key)

    payload = {
        **data,
        "engineVersion": generation.value,
        "ruleset": {**ruleset, "rateRules": normalized_rules},
    }
    model = ProfileVersionV1 if generation is EngineGeneration.V1 else ProfileVersionV2
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "$"
        raise ProfileValidationError(
            f"ProfileVersion.{field}: {first['msg']}.", field=field
        ) from exc


def load_profile_version(document: ProfileDocument) -> PricingEngine:
    """Validate *document*, hash its active rules once and return the engine handle."""
    profile = parse_profile_version(document)
    engine = PricingEngine(profile)
    logger.info(
        "pricing_profile_loaded",
        profile_version_id=profile.id,
        engine_version=profile.engine_version,
        rules=len(profile.ruleset.rate_rules),
        ruleset_hash=engine.ruleset_hash,
    )
    return engine
