"""Pluggable destinations for pricing audit payloads: memory, JSONL file, structlog."""

from __future__ import annotations

import asyncio
import json
from abc import ABC, abstractmethod
from collections import deque
from pathlib import Path
from typing import Any

import structlog

AuditPayload = dict[str, Any]


def _matches(
    payload: AuditPayload,
    profile_version_id: str | None,
    quarantined_only: bool,
) -> bool:
    if profile_version_id is not None and payload.get("profileVersionId") != profile_version_id:
        return False
    if quarantined_only and not payload.get("quarantineReason"):
        return False
    return True


class AuditSink(ABC):
    """Abstract base for audit payload sinks.

    Sinks store payloads as given: unknown keys are kept, nothing is
    recomputed.  Subclass this to attach payloads to a ledger.
    """

    @abstractmethod
    async def write(self, payload: AuditPayload) -> None:
        """Persist a single audit payload."""

    async def query(
        self,
        profile_version_id: str | None = None,
        *,
        quarantined_only: bool = False,
        limit: int = 100,
    ) -> list[AuditPayload]:
        """Return matching payloads, newest first.  The default stores nothing."""
        return []

    async def close(self) -> None:
        """Release resources held by the sink."""


class InMemoryAuditSink(AuditSink):
    """Bounded buffer keeping the last ``max_entries`` payloads."""

    def __init__(self, max_entries: int = 10000) -> None:
        self._records: deque[AuditPayload] = deque(maxlen=max_entries)

    async def write(self, payload: AuditPayload) -> None:
        self._records.append(dict(payload))

    async def query(
        self,
        profile_version_id: str | None = None,
        *,
        quarantined_only: bool = False,
        limit: int = 100,
    ) -> list[AuditPayload]:
        results: list[AuditPayload] = []
        for record in reversed(self._records):
            if not _matches(record, profile_version_id, quarantined_only):
                continue
            results.append(record)
            if len(results) >= limit:
                break
        return results

    @property
    def records(self) -> list[AuditPayload]:
        """All stored payloads, oldest first."""
        return list(self._records)


class FileAuditSink(AuditSink):
    """Append-only JSONL file, one payload per line.

    File I/O runs in :func:`asyncio.to_thread`.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _append(self, line: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("a", encoding="utf-8") as fh:
            fh.write(line + "\n")

    async def write(self, payload: AuditPayload) -> None:
        line = json.dumps(payload, sort_keys=True, default=str)
        await asyncio.to_thread(self._append, line)

    async def query(
        self,
        profile_version_id: str | None = None,
        *,
        quarantined_only: bool = False,
        limit: int = 100,
    ) -> list[AuditPayload]:
        if not self._path.exists():
            return []

        def _read() -> list[AuditPayload]:
            with self._path.open("r", encoding="utf-8") as fh:
                records = [json.loads(line) for line in fh if line.strip()]
            matching = [
                r for r in reversed(records)
                if _matches(r, profile_version_id, quarantined_only)
            ]
            return matching[:limit]

        return await asyncio.to_thread(_read)


class StructlogAuditSink(AuditSink):
    """Emit each payload as a ``pricing_audit`` event.

    Quarantined charges are logged at ``warning`` so they stand out for review.
    """

    def __init__(self, log_level: str = "info") -> None:
        self._log_level = log_level
        self._logger = structlog.get_logger("countwerk_sdk.audit")

    async def write(self, payload: AuditPayload) -> None:
        level = "warning" if payload.get("quarantineReason") else self._log_level
        log_fn = getattr(self._logger, level, self._logger.info)
        log_fn("pricing_audit", **{k: v for k, v in payload.items() if k != "event"})
