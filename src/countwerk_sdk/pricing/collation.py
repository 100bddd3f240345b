"""Locale-aware string ordering shared by ruleset hashing and rule selection.

Ids and dimension keys are ordered with the Unicode Collation Algorithm
(default table, non-ignorable punctuation) rather than by code point, so
``"a" < "B" < "b"`` and ``"rule_1" < "rule-2" < "Rule10"``.
"""

from __future__ import annotations

from functools import lru_cache

from pyuca import Collator


@lru_cache(maxsize=1)
def _collator() -> Collator:
    # Parsing the collation table is slow; build it once per process.
    return Collator()


def collation_key(text: str) -> tuple[int, ...]:
    """Sort key placing *text* in Unicode collation order."""
    return _collator().sort_key(text)
