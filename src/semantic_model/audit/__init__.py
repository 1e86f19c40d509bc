"""Audit subsystem — async JSONL log of remote commits and fetches."""

from semantic_model.audit.schemas import AuditEvent
from semantic_model.audit.schemas import AuditEventType
from semantic_model.audit.store import AuditLogger

__all__ = [
    "AuditEvent",
    "AuditEventType",
    "AuditLogger",
]
