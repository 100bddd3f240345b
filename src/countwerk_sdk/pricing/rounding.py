from __future__ import annotations

import math

from countwerk_sdk.core.constants import RoundingMode


def round_credits(value: float, mode: RoundingMode | str = RoundingMode.CEIL) -> int:
    """Round a fractional credit amount to a whole deduction.

    Only :attr:`RoundingMode.CEIL` exists; any other mode raises ``ValueError``.
    """
    try:
        rounding = RoundingMode(mode)
    except ValueError:
        raise ValueError(f"Unsupported rounding mode: {mode!r}") from None
    if rounding is RoundingMode.CEIL:
        return math.ceil(value)
    raise ValueError(f"Unsupported rounding mode: {mode!r}")
