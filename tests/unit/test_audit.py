"""Unit tests for the audit logger."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError
from rdflib import URIRef

from semantic_model.audit import AuditEvent
from semantic_model.audit import AuditEventType
from semantic_model.audit import AuditLogger
from semantic_model.config import AuditConfig
from semantic_model.store import CommitResult


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_event(
    event_type: AuditEventType = AuditEventType.COMMIT_SUCCEEDED,
    timestamp: float = 1000.0,
    payload: dict | None = None,
) -> AuditEvent:
    return AuditEvent(
        timestamp=timestamp,
        event_type=event_type,
        payload=payload or {},
    )


def _config(tmp_path: Path, *, enabled: bool = True) -> AuditConfig:
    return AuditConfig(file_path=str(tmp_path / "test_audit.jsonl"), enabled=enabled)


# ---------------------------------------------------------------------------
# Write
# ---------------------------------------------------------------------------


class TestAuditLogWrite:
    async def test_log_event_writes_jsonl_line(self, tmp_path: Path):
        logger = AuditLogger(_config(tmp_path))
        await logger.log(_make_event())

        lines = Path(logger.config.file_path).read_text().strip().splitlines()
        assert len(lines) == 1
        data = json.loads(lines[0])
        assert data["event_type"] == "COMMIT_SUCCEEDED"

    async def test_multiple_events_append(self, tmp_path: Path):
        logger = AuditLogger(_config(tmp_path))
        await logger.log(_make_event(timestamp=1.0))
        await logger.log(_make_event(timestamp=2.0))
        await logger.log(_make_event(timestamp=3.0))

        lines = Path(logger.config.file_path).read_text().strip().splitlines()
        assert len(lines) == 3

    async def test_disabled_audit_does_not_write(self, tmp_path: Path):
        cfg = _config(tmp_path, enabled=False)
        logger = AuditLogger(cfg)
        await logger.log(_make_event())

        assert not Path(cfg.file_path).exists()

    async def test_log_commit_maps_outcome_to_event_type(self, tmp_path: Path):
        logger = AuditLogger(_config(tmp_path))
        await logger.log_commit(CommitResult(changeset_id="a", inserted=1))
        await logger.log_commit(
            CommitResult(changeset_id="b", ok=False, message="boom", response="503")
        )

        events = await logger.read_events()
        assert [e.event_type for e in events] == [
            AuditEventType.COMMIT_SUCCEEDED,
            AuditEventType.COMMIT_FAILED,
        ]
        assert events[1].payload["message"] == "boom"
        assert events[1].payload["response"] == "503"

    async def test_log_fetch_records_graph(self, tmp_path: Path):
        logger = AuditLogger(_config(tmp_path))
        await logger.log_fetch(
            model_name="book",
            graph=URIRef("http://example.org/books"),
            statements=3,
        )

        (event,) = await logger.read_events()
        assert event.event_type == AuditEventType.GRAPH_FETCHED
        assert event.payload == {
            "model_name": "book",
            "graph": "http://example.org/books",
            "statements": 3,
        }


# ---------------------------------------------------------------------------
# Read
# ---------------------------------------------------------------------------


class TestAuditLogRead:
    async def test_read_missing_file_returns_empty(self, tmp_path: Path):
        logger = AuditLogger(_config(tmp_path))
        assert await logger.read_events() == []

    async def test_filter_by_event_type(self, tmp_path: Path):
        logger = AuditLogger(_config(tmp_path))
        await logger.log(_make_event(event_type=AuditEventType.COMMIT_SUCCEEDED))
        await logger.log(_make_event(event_type=AuditEventType.GRAPH_FETCHED))

        events = await logger.read_events(event_type=AuditEventType.GRAPH_FETCHED)
        assert len(events) == 1
        assert events[0].event_type == AuditEventType.GRAPH_FETCHED

    async def test_filter_by_since(self, tmp_path: Path):
        logger = AuditLogger(_config(tmp_path))
        await logger.log(_make_event(timestamp=10.0))
        await logger.log(_make_event(timestamp=20.0))

        events = await logger.read_events(since=15.0)
        assert [e.timestamp for e in events] == [20.0]

    async def test_malformed_lines_skipped(self, tmp_path: Path):
        logger = AuditLogger(_config(tmp_path))
        await logger.log(_make_event(timestamp=1.0))
        with open(logger.config.file_path, "a") as fh:
            fh.write("{not json}\n")
        await logger.log(_make_event(timestamp=2.0))

        events = await logger.read_events()
        assert [e.timestamp for e in events] == [1.0, 2.0]


class TestAuditEventSchema:
    def test_event_is_frozen(self):
        evt = _make_event()
        with pytest.raises(ValidationError):
            evt.timestamp = 5.0
