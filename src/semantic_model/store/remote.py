"""Remote synchronisation backends.

A backend receives the delete/insert statements of every pushed changeset
and can load a named graph back into the local store.  Two concrete
backends are provided: a Redis set per graph, and a SPARQL 1.1 endpoint.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from collections.abc import Iterable
from typing import Protocol
from typing import runtime_checkable
from urllib.error import HTTPError
from urllib.error import URLError
from urllib.parse import urlencode
from urllib.request import Request
from urllib.request import urlopen

from rdflib import Graph
from rdflib.term import Node
from redis.asyncio import Redis  # type: ignore[import-untyped]

from semantic_model.config import SyncConfig
from semantic_model.errors import RemoteSyncError
from semantic_model.store.triples import Statement

# ---------------------------------------------------------------------------
# Backend abstraction
# ---------------------------------------------------------------------------


@runtime_checkable
class RemoteSync(Protocol):
    """Protocol for remote triple backends."""

    async def update(
        self,
        delete: list[Statement],
        insert: list[Statement],
    ) -> None: ...

    async def fetch(self, graph: Node) -> list[Statement]: ...


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------


def _ntriples_lines(statements: Iterable[Statement]) -> list[str]:
    """Serialize statements as N-Triples lines (graph dropped)."""
    graph = Graph()
    for statement in statements:
        graph.add((statement.subject, statement.predicate, statement.object))
    return [line for line in graph.serialize(format="nt").splitlines() if line.strip()]


def _parse_ntriples(lines: Iterable[str], graph: Node) -> list[Statement]:
    data = "\n".join(lines)
    if not data.strip():
        return []
    parsed = Graph()
    parsed.parse(data=data, format="nt")
    return [Statement(s, p, o, graph) for s, p, o in parsed]


def _group_by_graph(statements: Iterable[Statement]) -> dict[Node, list[Statement]]:
    grouped: dict[Node, list[Statement]] = defaultdict(list)
    for statement in statements:
        grouped[statement.graph].append(statement)
    return grouped


# ---------------------------------------------------------------------------
# Redis
# ---------------------------------------------------------------------------


class RedisTripleSync:
    """Mirror named graphs into Redis sets of N-Triples lines.

    Graph ``<g>`` lives under ``{prefix}:graph:<g>``; the set
    ``{prefix}:graphs`` lists every graph ever written.
    """

    def __init__(self, redis: Redis, *, key_prefix: str = "semantic_model") -> None:
        self._redis = redis
        self._prefix = key_prefix

    def _graph_key(self, graph: Node) -> str:
        return f"{self._prefix}:graph:{graph}"

    @property
    def _graphs_key(self) -> str:
        return f"{self._prefix}:graphs"

    async def update(
        self,
        delete: list[Statement],
        insert: list[Statement],
    ) -> None:
        """Apply deletes then inserts in a single pipeline."""
        pipe = self._redis.pipeline()
        for graph, statements in _group_by_graph(delete).items():
            pipe.srem(self._graph_key(graph), *_ntriples_lines(statements))
        for graph, statements in _group_by_graph(insert).items():
            pipe.sadd(self._graph_key(graph), *_ntriples_lines(statements))
            pipe.sadd(self._graphs_key, str(graph))
        try:
            await pipe.execute()
        except Exception as exc:
            raise RemoteSyncError(f"redis update failed: {exc}") from exc

    async def fetch(self, graph: Node) -> list[Statement]:
        try:
            members = await self._redis.smembers(self._graph_key(graph))
        except Exception as exc:
            raise RemoteSyncError(f"redis fetch failed: {exc}") from exc
        lines = [
            m.decode("utf-8") if isinstance(m, bytes) else m for m in members
        ]
        return _parse_ntriples(lines, graph)


# ---------------------------------------------------------------------------
# SPARQL endpoint
# ---------------------------------------------------------------------------


def build_sparql_update(delete: list[Statement], insert: list[Statement]) -> str:
    """Render a ``DELETE DATA`` / ``INSERT DATA`` request body."""
    operations: list[str] = []
    for keyword, statements in (("DELETE DATA", delete), ("INSERT DATA", insert)):
        if not statements:
            continue
        blocks = []
        for graph, grouped in _group_by_graph(statements).items():
            body = "\n    ".join(_ntriples_lines(grouped))
            blocks.append(f"  GRAPH {graph.n3()} {{\n    {body}\n  }}")
        operations.append(f"{keyword} {{\n" + "\n".join(blocks) + "\n}")
    return " ;\n".join(operations)


class SparqlUpdateSync:
    """SPARQL 1.1 protocol backend over plain HTTP."""

    def __init__(
        self,
        *,
        endpoint: str,
        timeout_seconds: float = 30.0,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._timeout_seconds = timeout_seconds
        self._headers = dict(headers or {})

    async def update(
        self,
        delete: list[Statement],
        insert: list[Statement],
    ) -> None:
        body = build_sparql_update(delete, insert)
        if not body:
            return
        await asyncio.to_thread(
            self._post,
            body.encode("utf-8"),
            content_type="application/sparql-update",
            accept="*/*",
        )

    async def fetch(self, graph: Node) -> list[Statement]:
        query = (
            "CONSTRUCT { ?s ?p ?o } "
            f"WHERE {{ GRAPH {graph.n3()} {{ ?s ?p ?o }} }}"
        )
        raw = await asyncio.to_thread(
            self._post,
            urlencode({"query": query}).encode("utf-8"),
            content_type="application/x-www-form-urlencoded",
            accept="application/n-triples",
        )
        try:
            return _parse_ntriples(raw.splitlines(), graph)
        except Exception as exc:
            raise RemoteSyncError(
                "endpoint returned unparseable N-Triples",
                response=raw[:200],
            ) from exc

    def _post(self, data: bytes, *, content_type: str, accept: str) -> str:
        request = Request(
            url=self._endpoint,
            data=data,
            headers={
                **self._headers,
                "Content-Type": content_type,
                "Accept": accept,
            },
            method="POST",
        )
        try:
            with urlopen(request, timeout=self._timeout_seconds) as response:
                return response.read().decode("utf-8")
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="replace")
            raise RemoteSyncError(
                f"endpoint HTTP {exc.code}",
                response=detail[:200],
            ) from exc
        except URLError as exc:
            raise RemoteSyncError(f"endpoint network error: {exc.reason}") from exc
        except OSError as exc:
            raise RemoteSyncError(f"endpoint IO error: {exc}") from exc


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def build_remote_sync(
    config: SyncConfig,
    *,
    redis: Redis | None = None,
) -> RemoteSync | None:
    """Create a backend from ``SyncConfig``; ``None`` means local only."""

    backend = config.backend.strip().lower()
    if backend == "none":
        return None
    if backend == "redis":
        if redis is None:
            if not config.url:
                raise ValueError("sync_config.url is required when backend='redis'")
            redis = Redis.from_url(config.url)
        return RedisTripleSync(redis, key_prefix=config.key_prefix)
    if backend == "sparql":
        if not config.url:
            raise ValueError("sync_config.url is required when backend='sparql'")
        return SparqlUpdateSync(
            endpoint=config.url,
            timeout_seconds=config.timeout_seconds,
            headers=config.headers,
        )
    raise ValueError(
        f"Unsupported sync_config.backend '{config.backend}'. "
        "Supported backends: none, redis, sparql."
    )
