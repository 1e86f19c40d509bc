"""JSONL audit trail of remote commits and graph fetches."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator
from pathlib import Path

from pydantic import ValidationError
from rdflib.term import Node

from semantic_model.audit.schemas import AuditEvent
from semantic_model.audit.schemas import AuditEventType
from semantic_model.config import AuditConfig
from semantic_model.store.schemas import CommitResult

logger = logging.getLogger(__name__)


def _commit_event_type(result: CommitResult) -> AuditEventType:
    if result.ok:
        return AuditEventType.COMMIT_SUCCEEDED
    return AuditEventType.COMMIT_FAILED


class AuditLogger:
    """Record what the store pushed to and pulled from its remote backend.

    One JSON object per line.  Appends and reads share an ``asyncio.Lock``
    and run in a worker thread, so lines written by concurrent autosave
    pushes never interleave.
    """

    def __init__(self, config: AuditConfig) -> None:
        self.config = config
        self._path = Path(config.file_path)
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Store events
    # ------------------------------------------------------------------

    async def log_commit(self, result: CommitResult) -> None:
        """Record the outcome of one changeset push."""
        await self.log(
            AuditEvent(event_type=_commit_event_type(result), payload=result.model_dump())
        )

    async def log_fetch(self, *, model_name: str, graph: Node, statements: int) -> None:
        """Record a named graph loaded from the remote backend."""
        await self.log(
            AuditEvent(
                event_type=AuditEventType.GRAPH_FETCHED,
                payload={
                    "model_name": model_name,
                    "graph": str(graph),
                    "statements": statements,
                },
            )
        )

    async def log(self, event: AuditEvent) -> None:
        if not self.config.enabled:
            return
        async with self._lock:
            await asyncio.to_thread(self._write_line, event.model_dump_json())

    def _write_line(self, line: str) -> None:
        with self._path.open("a", encoding="utf-8") as fh:
            fh.write(line + "\n")

    # ------------------------------------------------------------------
    # Replay
    # ------------------------------------------------------------------

    async def read_events(
        self,
        *,
        event_type: AuditEventType | None = None,
        since: float | None = None,
    ) -> list[AuditEvent]:
        """Return recorded events in write order, optionally filtered."""
        if not self._path.exists():
            return []
        async with self._lock:
            raw = await asyncio.to_thread(self._path.read_text, encoding="utf-8")
        return [
            event
            for event in self._decode(raw)
            if (event_type is None or event.event_type == event_type)
            and (since is None or event.timestamp >= since)
        ]

    def _decode(self, raw: str) -> Iterator[AuditEvent]:
        for line_no, line in enumerate(raw.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                yield AuditEvent.model_validate_json(line)
            except ValidationError:
                logger.warning(
                    "Skipping malformed audit line %d in %s", line_no, self._path
                )
