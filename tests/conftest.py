"""Shared test fixtures."""
from __future__ import annotations

from typing import Any

import pytest
import structlog


@pytest.fixture
def v1_document() -> dict[str, Any]:
    return {
        "id": "pv_1",
        "ruleset": {
            "id": "rs_1",
            "cuPerCredit": 100,
            "rateRules": [
                {"id": "tokens-base", "dimensionKey": "tokens", "rate": 2},
                {
                    "id": "images-gold",
                    "dimensionKey": "images",
                    "rate": 50,
                    "attributesMatch": {"tier": ["gold", "platinum"]},
                },
            ],
        },
    }


@pytest.fixture
def v2_document() -> dict[str, Any]:
    return {
        "id": "pv_2",
        "version": 1,
        "engineVersion": "runtime-v2",
        "ruleset": {
            "eurPerCredit": 0.01,
            "rateRules": [
                {
                    "id": "tokens-std",
                    "dimensionKey": "tokens",
                    "creditsPerUnit": 0.01,
                    "costPerUnitEur": 0.0001,
                },
            ],
        },
    }


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()
