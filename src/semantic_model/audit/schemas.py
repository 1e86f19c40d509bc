"""Audit event types and data models."""

from __future__ import annotations

import time
from enum import Enum
from typing import Any

from pydantic import BaseModel
from pydantic import Field


class AuditEventType(str, Enum):
    """Categories of auditable store events."""

    COMMIT_SUCCEEDED = "COMMIT_SUCCEEDED"
    COMMIT_FAILED = "COMMIT_FAILED"
    GRAPH_FETCHED = "GRAPH_FETCHED"


class AuditEvent(BaseModel):
    """A single immutable audit log entry."""

    model_config = {"frozen": True}

    timestamp: float = Field(
        default_factory=time.time,
        description="Unix epoch when the event occurred.",
    )
    event_type: AuditEventType = Field(
        description="Category of the audited action.",
    )
    payload: dict[str, Any] = Field(
        default_factory=dict,
        description="Event-specific data (commit result, graph, counts).",
    )
