# RUN: python examples/01_price_usage.py
"""Price usage — load a runtime-v2 profile, price in STRICT and RUNTIME modes.

Demonstrates: load_profile_version(), PricingEngine.price(), recorded ruleset
hashes, quarantine in RUNTIME mode, and build_audit_payload().
"""

import asyncio
import json

from countwerk_sdk import (
    InMemoryAuditSink,
    UnmatchedDimensionError,
    configure_logging,
    load_profile_version,
)

PROFILE = {
    "id": "pv_chat_2025_03",
    "version": 4,
    "engineVersion": "runtime-v2",
    "ruleset": {
        "eurPerCredit": 0.01,
        "rateRules": [
            {
                "id": "tokens-std",
                "dimensionKey": "tokens",
                "creditsPerUnit": 0.002,
                "costPerUnitEur": 0.00001,
            },
            {
                "id": "tokens-pro",
                "dimensionKey": "tokens",
                "creditsPerUnit": 0.0015,
                "attributesMatch": {"tier": ["pro", "team"]},
                "priority": 10,
            },
            {"id": "images", "dimensionKey": "images", "creditsPerUnit": 4},
        ],
    },
}


async def main() -> None:
    configure_logging("WARNING", json=False)

    # 1. Load once; the ruleset hash is computed here and cached
    engine = load_profile_version(PROFILE)
    print(f"Loaded {engine!r}")

    # 2. Record the hash the way a publisher would, then reload
    PROFILE["ruleset"]["rulesetHash"] = engine.ruleset_hash
    engine = load_profile_version(PROFILE)

    # 3. STRICT pricing with attributes picks the higher-priority rule
    usage = {"dimensions": {"tokens": 1200, "images": 2}, "attributes": {"tier": "pro"}}
    result = engine.price(usage, round_deduction=True)
    print(f"Credits: {result.total_credits} -> deduct {result.credits_to_deduct}")
    print(f"Rules used: {result.rule_ids_used}")

    # 4. An unknown dimension fails in STRICT ...
    usage = {"dimensions": {"tokens": 500, "audio_seconds": 30}}
    try:
        engine.price(usage)
    except UnmatchedDimensionError as exc:
        print(f"STRICT rejected: {exc.code} {exc.unmatched_dimensions}")

    # 5. ... and is quarantined in RUNTIME
    result = engine.price(usage, mode="RUNTIME")
    print(f"RUNTIME quarantined: {result.quarantine_reason}, credits={result.total_credits}")

    # 6. Attach the audit record to a sink
    sink = InMemoryAuditSink()
    await sink.write(engine.build_audit_payload(usage, result))
    flagged = await sink.query(quarantined_only=True)
    print(json.dumps(flagged[0], indent=2))


if __name__ == "__main__":
    asyncio.run(main())
