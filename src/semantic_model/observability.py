"""In-process commit metrics, aggregated per model."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import Lock

logger = logging.getLogger(__name__)

_UNSCOPED = "<none>"


@dataclass
class CommitSummary:
    """Aggregated push outcomes for one model."""

    count: int = 0
    failures: int = 0
    inserted: int = 0
    deleted: int = 0
    total_ms: float = 0.0
    max_ms: float = 0.0


class _CommitRecorder:
    def __init__(self) -> None:
        self._lock = Lock()
        self._stats: dict[str, CommitSummary] = {}

    def record(
        self,
        *,
        model_name: str | None,
        inserted: int,
        deleted: int,
        duration_ms: float,
        ok: bool,
    ) -> None:
        key = model_name or _UNSCOPED
        elapsed = max(float(duration_ms), 0.0)
        with self._lock:
            summary = self._stats.setdefault(key, CommitSummary())
            summary.count += 1
            if not ok:
                summary.failures += 1
            summary.inserted += inserted
            summary.deleted += deleted
            summary.total_ms += elapsed
            summary.max_ms = max(summary.max_ms, elapsed)

        logger.debug(
            "commit model=%s inserted=%d deleted=%d duration_ms=%.3f ok=%s",
            key,
            inserted,
            deleted,
            elapsed,
            ok,
        )

    def snapshot(self) -> dict[str, dict[str, float | int]]:
        with self._lock:
            return {
                model: {
                    "count": summary.count,
                    "failures": summary.failures,
                    "inserted": summary.inserted,
                    "deleted": summary.deleted,
                    "avg_ms": round(
                        summary.total_ms / summary.count if summary.count else 0.0,
                        3,
                    ),
                    "max_ms": round(summary.max_ms, 3),
                }
                for model, summary in sorted(self._stats.items())
            }

    def reset(self) -> None:
        with self._lock:
            self._stats.clear()


_RECORDER = _CommitRecorder()


def record_commit(
    *,
    model_name: str | None,
    inserted: int,
    deleted: int,
    duration_ms: float,
    ok: bool = True,
) -> None:
    """Record the outcome of one changeset push."""
    _RECORDER.record(
        model_name=model_name,
        inserted=inserted,
        deleted=deleted,
        duration_ms=duration_ms,
        ok=ok,
    )


def commit_metrics_snapshot() -> dict[str, dict[str, float | int]]:
    """Return current per-model commit aggregates."""
    return _RECORDER.snapshot()


def reset_commit_metrics() -> None:
    """Clear all commit aggregates (test helper)."""
    _RECORDER.reset()
