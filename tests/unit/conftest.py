"""Unit test fixtures — an entity store wired to an in-memory remote."""

from __future__ import annotations

import pytest
from rdflib.term import Node

from semantic_model.observability import reset_commit_metrics
from semantic_model.store import EntityStore
from semantic_model.store import Statement
from tests.helpers.library import register_library


class RecordingSync:
    """Remote backend double that records every pushed changeset."""

    def __init__(self) -> None:
        self.updates: list[tuple[list[Statement], list[Statement]]] = []
        self.graphs: dict[Node, list[Statement]] = {}
        self.fail_with: Exception | None = None

    async def update(self, delete: list[Statement], insert: list[Statement]) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.updates.append((list(delete), list(insert)))

    async def fetch(self, graph: Node) -> list[Statement]:
        return list(self.graphs.get(graph, []))


@pytest.fixture()
def remote() -> RecordingSync:
    return RecordingSync()


@pytest.fixture()
def store(remote) -> EntityStore:
    """Return an EntityStore with the library models registered."""
    return register_library(EntityStore(remote=remote))


@pytest.fixture(autouse=True)
def clean_commit_metrics():
    reset_commit_metrics()
    yield
    reset_commit_metrics()
