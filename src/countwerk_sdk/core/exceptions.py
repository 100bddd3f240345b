from __future__ import annotations

from typing import Any

from countwerk_sdk.core.constants import ErrorCode


class CountwerkError(Exception):
    """Base exception for all Countwerk SDK errors.

    Attributes:
        code: Optional machine-readable error code (e.g. ``"UNMATCHED_DIMENSION"``).
        details: Arbitrary key/value context about the error.
        status_code: HTTP status code when the error originates from the
            billing API (``None`` when not applicable).
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: Any = None,
        *,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details if details is not None else {}
        self.status_code = status_code

    @property
    def is_retryable(self) -> bool:
        """Whether the operation that raised this error can be retried."""
        return False


class ConfigurationError(CountwerkError): ...


# ---------------------------------------------------------------------------
# Profile loading
# ---------------------------------------------------------------------------


class ProfileValidationError(CountwerkError):
    """A profile version document failed structural validation.

    ``details["field"]`` names the first offending field and
    ``details["ruleId"]`` the rule it belongs to, when there is one.
    Never retryable: the document itself must be fixed.
    """

    def __init__(
        self,
        message: str,
        field: str,
        *,
        rule_id: str | None = None,
    ) -> None:
        details: dict[str, Any] = {"field": field}
        if rule_id is not None:
            details["ruleId"] = rule_id
        super().__init__(message, code=ErrorCode.INVALID_PROFILE, details=details)
        self.field = field
        self.rule_id = rule_id


# ---------------------------------------------------------------------------
# Pricing
# ---------------------------------------------------------------------------


class PricingError(CountwerkError): ...


class UnmatchedDimensionError(PricingError):
    """One or more usage dimensions had no applicable rule."""

    def __init__(
        self,
        unmatched_dimensions: list[str],
        attributes: dict[str, str],
        message: str = "Unmatched dimension(s) in pricing input.",
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.UNMATCHED_DIMENSION,
            details={
                "unmatchedDimensions": list(unmatched_dimensions),
                "attributes": dict(attributes),
            },
        )
        self.unmatched_dimensions = list(unmatched_dimensions)
        self.attributes = dict(attributes)


class RulesetHashMismatchError(PricingError):
    """The recorded ruleset hash disagrees with the recomputed one."""

    def __init__(self, expected_hash: str, actual_hash: str) -> None:
        super().__init__(
            f"Ruleset hash mismatch: recorded {expected_hash}, computed {actual_hash}.",
            code=ErrorCode.RULESET_HASH_MISMATCH,
            details={"expectedHash": expected_hash, "actualHash": actual_hash},
        )
        self.expected_hash = expected_hash
        self.actual_hash = actual_hash


# ---------------------------------------------------------------------------
# Billing API
# ---------------------------------------------------------------------------


class ApiError(CountwerkError):
    """The billing API answered with a non-2xx status or ``success: false``."""


class InvalidRequestError(ApiError):
    """Rejected client-side before any request was sent."""

    def __init__(self, message: str, code: str = ErrorCode.INVALID_INPUT) -> None:
        super().__init__(message, code=code, status_code=400)


class RateLimitError(ApiError):
    """HTTP 429.  Always retryable."""

    @property
    def is_retryable(self) -> bool:  # noqa: D102
        return True


class ServerError(ApiError):
    """HTTP 5xx.  Always retryable."""

    @property
    def is_retryable(self) -> bool:  # noqa: D102
        return True


class APITimeoutError(ApiError):
    """The billing API did not respond within the deadline.

    Always retryable.
    """

    @property
    def is_retryable(self) -> bool:  # noqa: D102
        return True


class APIConnectionError(ApiError):
    """A transport-level failure (connection reset, DNS lookup).

    Always retryable.
    """

    @property
    def is_retryable(self) -> bool:  # noqa: D102
        return True
