"""Pricing data models: profile versions, rules, inputs and results.

Wire names are camelCase (``dimensionKey``, ``rateRules``); Python attributes
are snake_case.  Every model populates by either name and dumps with
``by_alias=True`` for JSON.  Loaded models are frozen and rule arrays are
tuples, so a loaded profile can be shared by concurrent callers.
"""

from __future__ import annotations

from typing import Any, Literal, Union

from pydantic import BaseModel, Field

from countwerk_sdk.core.constants import (
    EngineGeneration,
    PricingMode,
    QuarantineReason,
    RateType,
    RuleStatus,
)

AttributeMatch = dict[str, Union[str, list[str]]]

_FROZEN = {"populate_by_name": True, "frozen": True}


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


class _RuleBase(BaseModel):
    id: str
    dimension_key: str = Field(alias="dimensionKey")
    attributes_match: AttributeMatch | None = Field(default=None, alias="attributesMatch")
    priority: int = 0
    status: str = RuleStatus.ACTIVE
    created_at: str | None = Field(default=None, alias="createdAt")

    model_config = _FROZEN

    @property
    def is_disabled(self) -> bool:
        return self.status == RuleStatus.DISABLED


class PricingRuleV1(_RuleBase):
    """Prices a dimension in cost units per unit of usage."""

    rate: float
    rate_type: RateType = Field(default=RateType.CU_PER_UNIT, alias="rateType")


class PricingRuleV2(_RuleBase):
    """Prices a dimension directly in credits, with an optional EUR cost."""

    credits_per_unit: float = Field(alias="creditsPerUnit")
    cost_per_unit_eur: float | None = Field(default=None, alias="costPerUnitEur")


# ---------------------------------------------------------------------------
# Rulesets and profile versions
# ---------------------------------------------------------------------------


class RulesetV1(BaseModel):
    id: str | None = None
    cu_per_credit: float = Field(alias="cuPerCredit")
    min_charge_credits: float | None = Field(default=None, alias="minChargeCredits")
    rate_rules: tuple[PricingRuleV1, ...] = Field(alias="rateRules")

    model_config = _FROZEN


class RulesetV2(BaseModel):
    id: str | None = None
    eur_per_credit: float = Field(alias="eurPerCredit")
    ruleset_hash: str | None = Field(default=None, alias="rulesetHash")
    """Hash recorded when the profile was published; verified on every call."""
    rate_rules: tuple[PricingRuleV2, ...] = Field(alias="rateRules")

    model_config = _FROZEN


class ProfileVersionV1(BaseModel):
    id: str
    engine_version: Literal["runtime-v1"] = Field(
        default=EngineGeneration.V1, alias="engineVersion"
    )
    ruleset: RulesetV1
    created_at: str | None = None
    metadata: dict[str, Any] | None = None

    model_config = _FROZEN


class ProfileVersionV2(BaseModel):
    id: str
    version: str | int
    engine_version: Literal["runtime-v2"] = Field(
        default=EngineGeneration.V2, alias="engineVersion"
    )
    ruleset: RulesetV2
    created_at: str | None = None
    metadata: dict[str, Any] | None = None

    model_config = _FROZEN


ProfileVersion = Union[ProfileVersionV1, ProfileVersionV2]
PricingRule = Union[PricingRuleV1, PricingRuleV2]


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


class PricingInput(BaseModel):
    """Observed usage for one pricing call.

    ``dimensions`` values are taken as given; anything that does not convert
    to a finite positive number is skipped at price time.
    """

    dimensions: dict[str, Any]
    attributes: dict[str, str] | None = None
    mode: PricingMode | None = None

    model_config = _FROZEN


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class BreakdownRowV1(BaseModel):
    dimension_key: str = Field(alias="dimensionKey")
    qty: float
    rate: float
    cu_cost: float = Field(alias="cuCost")
    rule_id: str = Field(alias="ruleId")

    model_config = _FROZEN


class BreakdownRowV2(BaseModel):
    dimension_key: str = Field(alias="dimensionKey")
    qty: float
    credits_per_unit: float = Field(alias="creditsPerUnit")
    credits: float
    cost_per_unit_eur: float | None = Field(default=None, alias="costPerUnitEur")
    cost_eur: float | None = Field(default=None, alias="costEur")
    rule_id: str = Field(alias="ruleId")

    model_config = _FROZEN


class PriceResultV1(BaseModel):
    cu_total: float = Field(alias="cuTotal")
    credits: float
    breakdown: list[BreakdownRowV1] = Field(default_factory=list)
    rule_ids_used: list[str] = Field(default_factory=list, alias="ruleIdsUsed")
    ruleset_hash: str = Field(alias="rulesetHash")
    profile_version_id: str = Field(alias="profileVersionId")
    engine_version: str = Field(default=EngineGeneration.V1, alias="engineVersion")

    model_config = _FROZEN


class PriceResultV2(BaseModel):
    total_credits: float = Field(alias="totalCredits")
    credits_to_deduct: int | None = Field(default=None, alias="creditsToDeduct")
    """Rounded-up deduction; only set when the caller asked for one."""
    breakdown: list[BreakdownRowV2] = Field(default_factory=list)
    rule_ids_used: list[str] = Field(default_factory=list, alias="ruleIdsUsed")
    ruleset_hash: str = Field(alias="rulesetHash")
    profile_version_id: str = Field(alias="profileVersionId")
    profile_version: str | int = Field(alias="profileVersion")
    engine_version: str = Field(default=EngineGeneration.V2, alias="engineVersion")
    mode: PricingMode = PricingMode.STRICT
    unmatched_dimensions: list[str] | None = Field(default=None, alias="unmatchedDimensions")
    quarantine_reason: QuarantineReason | None = Field(default=None, alias="quarantineReason")

    model_config = _FROZEN

    @property
    def total_cost_eur(self) -> float:
        """EUR cost summed over rows whose rule carries ``costPerUnitEur``."""
        return sum(row.cost_eur for row in self.breakdown if row.cost_eur is not None)

    @property
    def is_quarantined(self) -> bool:
        return self.quarantine_reason is not None


PriceResult = Union[PriceResultV1, PriceResultV2]
