"""Retry policy with exponential backoff for billing API calls."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable, TypeVar

from pydantic import BaseModel, Field

from countwerk_sdk.core.exceptions import CountwerkError

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


class RetryPolicy(BaseModel):
    """Retry retryable failures with exponential backoff.

    The first retry waits ``backoff_base`` seconds (200 ms by default) and
    every further retry doubles the wait, capped at ``backoff_max``.

    Attributes:
        max_retries: Total attempts, the first one included.  ``0`` and ``1``
            both mean a single attempt with no retry.
        backoff_base: Delay in seconds before the first retry.
        backoff_max: Upper bound on any single delay.
        jitter: Draw each delay uniformly from ``[0, delay]`` when ``True``.
        retryable_exceptions: Extra non-SDK exception types worth retrying.
    """

    max_retries: int = Field(default=3, ge=0, le=50)
    backoff_base: float = Field(default=0.2, ge=0.0)
    backoff_max: float = Field(default=30.0, ge=0.0)
    jitter: bool = False
    retryable_exceptions: tuple[type[Exception], ...] = ()

    model_config = {"arbitrary_types_allowed": True}

    def is_retryable(self, exc: Exception) -> bool:
        """SDK errors decide for themselves; anything else must be listed."""
        if isinstance(exc, CountwerkError):
            return exc.is_retryable
        return isinstance(exc, self.retryable_exceptions)

    def compute_delay(self, attempt: int) -> float:
        """Backoff before retry number ``attempt + 1`` (``attempt`` is 0-indexed)."""
        delay: float = min(self.backoff_base * (2 ** attempt), self.backoff_max)
        if self.jitter:
            delay = random.uniform(0, delay)  # noqa: S311
        return delay

    async def execute(
        self,
        fn: Callable[..., Awaitable[_T]],
        *args: Any,
        **kwargs: Any,
    ) -> _T:
        """Await ``fn(*args, **kwargs)``, retrying retryable failures.

        Raises:
            Exception: Immediately when the failure is not retryable, or the
                last failure once ``max_retries`` attempts are used up.
        """
        attempt = 0
        while True:
            attempt += 1
            try:
                return await fn(*args, **kwargs)
            except Exception as exc:
                if not self.is_retryable(exc):
                    raise
                if attempt >= self.max_retries:
                    logger.warning(
                        "Retry budget exhausted after %d attempt(s): %s",
                        attempt,
                        exc,
                    )
                    raise

                delay = self.compute_delay(attempt - 1)
                logger.info(
                    "Attempt %d/%d failed, retrying in %.2fs: %s",
                    attempt,
                    self.max_retries,
                    delay,
                    exc,
                )
                await asyncio.sleep(delay)
