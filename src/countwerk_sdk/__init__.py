"""Countwerk SDK: deterministic credit pricing and the credits API client."""

from countwerk_sdk.__version__ import __version__

from countwerk_sdk.audit.builder import build_audit_payload
from countwerk_sdk.audit.sinks import (
    AuditSink,
    FileAuditSink,
    InMemoryAuditSink,
    StructlogAuditSink,
)
from countwerk_sdk.client.client import CountwerkClient
from countwerk_sdk.core.config import ClientConfig
from countwerk_sdk.core.constants import (
    EngineGeneration,
    PricingMode,
    QuarantineReason,
    RoundingMode,
    RuleStatus,
)
from countwerk_sdk.core.exceptions import (
    APIConnectionError,
    ApiError,
    APITimeoutError,
    ConfigurationError,
    CountwerkError,
    InvalidRequestError,
    PricingError,
    ProfileValidationError,
    RateLimitError,
    RulesetHashMismatchError,
    ServerError,
    UnmatchedDimensionError,
)
from countwerk_sdk.pricing.engine import PricingEngine, price
from countwerk_sdk.pricing.loader import load_profile_version, parse_profile_version
from countwerk_sdk.pricing.models import (
    PriceResultV1,
    PriceResultV2,
    PricingInput,
    ProfileVersionV1,
    ProfileVersionV2,
)
from countwerk_sdk.resilience.retry import RetryPolicy
from countwerk_sdk.utils.logging import configure_logging, get_logger

__all__ = [
    "__version__",
    "APIConnectionError",
    "APITimeoutError",
    "ApiError",
    "AuditSink",
    "ClientConfig",
    "ConfigurationError",
    "CountwerkClient",
    "CountwerkError",
    "EngineGeneration",
    "FileAuditSink",
    "InMemoryAuditSink",
    "InvalidRequestError",
    "PriceResultV1",
    "PriceResultV2",
    "PricingEngine",
    "PricingError",
    "PricingInput",
    "PricingMode",
    "ProfileValidationError",
    "ProfileVersionV1",
    "ProfileVersionV2",
    "QuarantineReason",
    "RateLimitError",
    "RetryPolicy",
    "RoundingMode",
    "RuleStatus",
    "RulesetHashMismatchError",
    "ServerError",
    "StructlogAuditSink",
    "UnmatchedDimensionError",
    "build_audit_payload",
    "configure_logging",
    "get_logger",
    "load_profile_version",
    "parse_profile_version",
    "price",
]
