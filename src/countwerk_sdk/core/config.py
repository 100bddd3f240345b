from __future__ import annotations

import os
from typing import Any, Literal

from pydantic import BaseModel, Field

from countwerk_sdk.resilience.retry import RetryPolicy

DEFAULT_BASE_URL = "https://api.countwerk.com/"


class ClientConfig(BaseModel):
    base_url: str = DEFAULT_BASE_URL
    api_key: str = ""
    timeout: float = Field(default=10.0, gt=0, le=600)
    max_retries: int = Field(default=3, ge=0, le=10)
    """Total attempts per call, the first one included."""
    retry_policy: RetryPolicy | None = None
    """Overrides the policy derived from ``max_retries``."""
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    def effective_retry_policy(self) -> RetryPolicy:
        """Return ``retry_policy`` or the default backoff with ``max_retries``."""
        if self.retry_policy is not None:
            return self.retry_policy
        return RetryPolicy(max_retries=self.max_retries)

    @classmethod
    def from_env(cls) -> ClientConfig:
        """Create a :class:`ClientConfig` from ``COUNTWERK_*`` environment variables.

        Reads the following env vars (all optional):

        * ``COUNTWERK_BASE_URL`` → ``base_url``
        * ``COUNTWERK_API_KEY`` → ``api_key``
        * ``COUNTWERK_TIMEOUT`` → ``timeout`` (seconds, may be fractional)
        * ``COUNTWERK_MAX_RETRIES`` → ``max_retries`` (total attempts, 0–10)
        * ``COUNTWERK_LOG_LEVEL`` → ``log_level`` (``DEBUG``, ``INFO``, ``WARNING``, ``ERROR``)

        Any variable that is not set or is empty is left at its default value.
        """
        kwargs: dict[str, Any] = {}

        base_url = os.environ.get("COUNTWERK_BASE_URL")
        if base_url:
            kwargs["base_url"] = base_url

        api_key = os.environ.get("COUNTWERK_API_KEY")
        if api_key:
            kwargs["api_key"] = api_key

        timeout_str = os.environ.get("COUNTWERK_TIMEOUT")
        if timeout_str:
            kwargs["timeout"] = float(timeout_str)

        retries_str = os.environ.get("COUNTWERK_MAX_RETRIES")
        if retries_str:
            kwargs["max_retries"] = int(retries_str)

        log_level = os.environ.get("COUNTWERK_LOG_LEVEL")
        if log_level:
            kwargs["log_level"] = log_level.upper()

        return cls(**kwargs)
