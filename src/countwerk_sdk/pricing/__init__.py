from countwerk_sdk.pricing.canonical import ruleset_hash, stable_stringify
from countwerk_sdk.pricing.engine import (
    PricingEngine,
    calculate_credits,
    price,
    price_v1,
    price_v2,
)
from countwerk_sdk.pricing.loader import load_profile_version, parse_profile_version
from countwerk_sdk.pricing.models import (
    BreakdownRowV1,
    BreakdownRowV2,
    PriceResult,
    PriceResultV1,
    PriceResultV2,
    PricingInput,
    PricingRule,
    PricingRuleV1,
    PricingRuleV2,
    ProfileVersion,
    ProfileVersionV1,
    ProfileVersionV2,
    RulesetV1,
    RulesetV2,
)
from countwerk_sdk.pricing.rounding import round_credits

__all__ = [
    "BreakdownRowV1",
    "BreakdownRowV2",
    "PriceResult",
    "PriceResultV1",
    "PriceResultV2",
    "PricingEngine",
    "PricingInput",
    "PricingRule",
    "PricingRuleV1",
    "PricingRuleV2",
    "ProfileVersion",
    "ProfileVersionV1",
    "ProfileVersionV2",
    "RulesetV1",
    "RulesetV2",
    "calculate_credits",
    "load_profile_version",
    "parse_profile_version",
    "price",
    "price_v1",
    "price_v2",
    "round_credits",
    "ruleset_hash",
    "stable_stringify",
]
