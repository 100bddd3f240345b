from __future__ import annotations

from enum import StrEnum


class EngineGeneration(StrEnum):
    V1 = "runtime-v1"  # cost units converted to credits
    V2 = "runtime-v2"  # credits priced directly


class PricingMode(StrEnum):
    STRICT = "STRICT"
    RUNTIME = "RUNTIME"


class RuleStatus(StrEnum):
    ACTIVE = "active"
    DISABLED = "disabled"


class RateType(StrEnum):
    CU_PER_UNIT = "cu_per_unit"


class RoundingMode(StrEnum):
    CEIL = "ceil"


class ErrorCode(StrEnum):
    INVALID_PROFILE = "INVALID_PROFILE"
    UNMATCHED_DIMENSION = "UNMATCHED_DIMENSION"
    RULESET_HASH_MISMATCH = "RULESET_HASH_MISMATCH"
    HTTP_ERROR = "HTTP_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    TIMEOUT = "ETIMEDOUT"
    CONNECTION_RESET = "ECONNRESET"
    DNS_RETRY = "EAI_AGAIN"
    CONNECTION_FAILED = "ECONNREFUSED"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"


class QuarantineReason(StrEnum):
    UNMATCHED_DIMENSION = "UNMATCHED_DIMENSION"
    RULESET_HASH_MISMATCH = "RULESET_HASH_MISMATCH"
