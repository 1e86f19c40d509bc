"""Changeset and commit-outcome types for the store commit pipeline."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from dataclasses import field

from pydantic import BaseModel
from pydantic import Field

from semantic_model.store.triples import Statement


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Changeset:
    """Delete/insert statements produced by one property or lifecycle write.

    The local store has already applied a changeset by the time it exists;
    only the remote push is outstanding.
    """

    delete: list[Statement]
    insert: list[Statement]
    model_name: str | None = None
    subject: str | None = None
    id: str = field(default_factory=_new_id)
    created_at: float = field(default_factory=time.time)

    @property
    def is_empty(self) -> bool:
        return not self.delete and not self.insert


class CommitResult(BaseModel):
    """Outcome of pushing one changeset to the remote backend."""

    model_config = {"frozen": True}

    changeset_id: str = Field(description="Identifier of the pushed changeset.")
    model_name: str | None = Field(
        default=None,
        description="Model whose write produced the changeset.",
    )
    subject: str | None = Field(
        default=None,
        description="URI of the entity that was written.",
    )
    deleted: int = Field(default=0, description="Number of statements deleted.")
    inserted: int = Field(default=0, description="Number of statements inserted.")
    ok: bool = Field(default=True, description="Whether the push succeeded.")
    remote: bool = Field(
        default=False,
        description="Whether a remote backend was contacted.",
    )
    message: str | None = Field(
        default=None,
        description="Failure message reported by the backend.",
    )
    response: str | None = Field(
        default=None,
        description="Raw backend response attached to a failure, if any.",
    )
    duration_ms: float = Field(default=0.0, description="Push latency.")
