"""In-memory quad store backed by one ``rdflib.Graph`` per named graph.

``None`` acts as a wildcard in every pattern.  Statements without a graph
are stored in the store's default graph.
"""

from __future__ import annotations

from collections.abc import Iterable
from collections.abc import Iterator
from dataclasses import dataclass

from rdflib import Graph
from rdflib import URIRef
from rdflib.term import Node


@dataclass(frozen=True)
class Statement:
    """A single ``(subject, predicate, object)`` triple scoped to a graph."""

    subject: Node | None
    predicate: Node | None
    object: Node | None
    graph: Node | None = None

    @property
    def is_complete(self) -> bool:
        """``True`` when subject, predicate and object are all populated."""
        return (
            self.subject is not None
            and self.predicate is not None
            and self.object is not None
        )

    def with_graph(self, graph: Node) -> Statement:
        return Statement(self.subject, self.predicate, self.object, graph)


def _sort_key(statement: Statement) -> tuple[str, str, str, str]:
    return (
        statement.graph.n3() if statement.graph is not None else "",
        statement.subject.n3(),
        statement.predicate.n3(),
        statement.object.n3(),
    )


class TripleStore:
    """Mutable set of statements partitioned by named graph."""

    def __init__(self, default_graph: URIRef) -> None:
        self.default_graph = default_graph
        self._graphs: dict[Node, Graph] = {}

    def _graph_for(self, identifier: Node | None, *, create: bool) -> Graph | None:
        identifier = identifier if identifier is not None else self.default_graph
        graph = self._graphs.get(identifier)
        if graph is None and create:
            graph = Graph(identifier=identifier)
            self._graphs[identifier] = graph
        return graph

    # ----- Read -----

    def match(
        self,
        subject: Node | None = None,
        predicate: Node | None = None,
        obj: Node | None = None,
        graph: Node | None = None,
    ) -> list[Statement]:
        """Return every statement matching the pattern, sorted."""
        if graph is not None:
            candidates = [(graph, self._graphs.get(graph))]
        else:
            candidates = list(self._graphs.items())

        results: list[Statement] = []
        for identifier, rdf_graph in candidates:
            if rdf_graph is None:
                continue
            for s, p, o in rdf_graph.triples((subject, predicate, obj)):
                results.append(Statement(s, p, o, identifier))
        results.sort(key=_sort_key)
        return results

    def any(
        self,
        subject: Node | None = None,
        predicate: Node | None = None,
        obj: Node | None = None,
        graph: Node | None = None,
    ) -> Statement | None:
        """Return the first matching statement, or ``None``."""
        matches = self.match(subject, predicate, obj, graph)
        return matches[0] if matches else None

    def graphs(self) -> list[Node]:
        return sorted(self._graphs, key=lambda identifier: identifier.n3())

    def __contains__(self, statement: Statement) -> bool:
        rdf_graph = self._graph_for(statement.graph, create=False)
        if rdf_graph is None:
            return False
        return (statement.subject, statement.predicate, statement.object) in rdf_graph

    def __len__(self) -> int:
        return sum(len(rdf_graph) for rdf_graph in self._graphs.values())

    def __iter__(self) -> Iterator[Statement]:
        return iter(self.match())

    # ----- Write -----

    def add_all(self, statements: Iterable[Statement]) -> None:
        for statement in statements:
            rdf_graph = self._graph_for(statement.graph, create=True)
            rdf_graph.add((statement.subject, statement.predicate, statement.object))

    def remove_statements(self, statements: Iterable[Statement]) -> None:
        for statement in statements:
            rdf_graph = self._graph_for(statement.graph, create=False)
            if rdf_graph is None:
                continue
            rdf_graph.remove((statement.subject, statement.predicate, statement.object))

    def remove_matches(
        self,
        subject: Node | None = None,
        predicate: Node | None = None,
        obj: Node | None = None,
        graph: Node | None = None,
    ) -> list[Statement]:
        """Remove every statement matching the pattern and return them."""
        matches = self.match(subject, predicate, obj, graph)
        self.remove_statements(matches)
        return matches
