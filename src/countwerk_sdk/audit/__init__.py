from countwerk_sdk.audit.builder import build_audit_payload, format_timestamp
from countwerk_sdk.audit.sinks import (
    AuditPayload,
    AuditSink,
    FileAuditSink,
    InMemoryAuditSink,
    StructlogAuditSink,
)

__all__ = [
    "AuditPayload",
    "AuditSink",
    "FileAuditSink",
    "InMemoryAuditSink",
    "StructlogAuditSink",
    "build_audit_payload",
    "format_timestamp",
]
