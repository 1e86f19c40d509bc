"""Triple diffing and commit for attribute writes.

``compute_property_diff`` is side-effect free apart from materializing the
previous value of a relation; ``write_property`` commits the diff through
the store and invalidates inverse relations on the touched entities.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from dataclasses import field
from typing import TYPE_CHECKING
from typing import Any

from rdflib.term import Node

from semantic_model.models.properties import PropertySpec
from semantic_model.models.properties import PropertyType
from semantic_model.models.resolution import graph_for_instance
from semantic_model.models.resolution import predicate_for_property
from semantic_model.models.resolution import spec_for
from semantic_model.models.values import calculate_property_value
from semantic_model.models.values import related_options
from semantic_model.models.values import to_term
from semantic_model.store.schemas import Changeset
from semantic_model.store.triples import Statement

if TYPE_CHECKING:
    from semantic_model.models.entity import SemanticModel

logger = logging.getLogger(__name__)


@dataclass
class PropertyDiff:
    """Statements and cache invalidations produced by one attribute write."""

    value: Any
    delete: list[Statement] = field(default_factory=list)
    insert: list[Statement] = field(default_factory=list)
    added: list[SemanticModel] = field(default_factory=list)
    removed: list[SemanticModel] = field(default_factory=list)
    invalidate: list[tuple[SemanticModel, str]] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _coerce_related(entity: SemanticModel, spec: PropertySpec, value: Any) -> Any:
    """Accept related entities or bare URIs for relation writes."""
    from semantic_model.models.entity import SemanticModel

    if value is None or isinstance(value, SemanticModel):
        return value
    return entity.store.create(spec.model, value, **related_options(entity, spec))


def _relation_statement(
    entity: SemanticModel,
    spec: PropertySpec,
    predicate: Node,
    related: SemanticModel,
    graph: Node | None,
) -> Statement:
    if spec.inverse:
        return Statement(
            related.uri,
            predicate,
            entity.uri,
            graph if graph is not None else graph_for_instance(related),
        )
    return Statement(entity.uri, predicate, related.uri, graph)


def _existing_statements(
    entity: SemanticModel,
    spec: PropertySpec,
    predicate: Node,
    graph: Node | None,
) -> list[Statement]:
    if spec.inverse:
        return entity.store.match(None, predicate, entity.uri, graph)
    return entity.store.match(entity.uri, predicate, None, graph)


def _previous_members(entity: SemanticModel, property_name: str) -> list[SemanticModel]:
    if entity.is_cached(property_name):
        return list(entity.cached_value(property_name) or [])
    return calculate_property_value(entity, property_name)


# ---------------------------------------------------------------------------
# Diff
# ---------------------------------------------------------------------------


def compute_property_diff(
    entity: SemanticModel,
    property_name: str,
    value: Any,
) -> PropertyDiff:
    """Return the statements to delete and insert for assigning *value*."""
    spec = spec_for(entity, property_name)
    predicate = predicate_for_property(entity, property_name)
    graph = graph_for_instance(entity, property_name)
    kind = spec.kind

    if kind is PropertyType.has_many:
        return _has_many_diff(entity, property_name, spec, predicate, graph, value)

    if kind is PropertyType.belongs_to:
        related = _coerce_related(entity, spec, value)
        previous = entity.read_attribute(property_name)
        diff = PropertyDiff(
            value=related,
            delete=_existing_statements(entity, spec, predicate, graph),
        )
        if related is not None:
            diff.insert.append(
                _relation_statement(entity, spec, predicate, related, graph)
            )
        if spec.inverse_property:
            for touched in (previous, related):
                if touched is not None:
                    diff.invalidate.append((touched, spec.inverse_property))
        return diff

    obj = to_term(kind, value)
    diff = PropertyDiff(
        value=value,
        delete=entity.store.match(entity.uri, predicate, None, graph),
    )
    if obj is not None:
        diff.insert.append(Statement(entity.uri, predicate, obj, graph))
    return diff


def _has_many_diff(
    entity: SemanticModel,
    property_name: str,
    spec: PropertySpec,
    predicate: Node,
    graph: Node | None,
    value: Any,
) -> PropertyDiff:
    members = [_coerce_related(entity, spec, item) for item in (value or [])]
    members = list(dict.fromkeys(members))

    was_cached = entity.is_cached(property_name)
    previous = _previous_members(entity, property_name)
    if not was_cached and not members and previous:
        logger.warning(
            "Bulk clear of uncached relation %s on %s: removing %d materialized "
            "members only; statements outside graph %s are left untouched",
            property_name,
            entity.uri,
            len(previous),
            graph,
        )

    new_set = set(members)
    old_set = set(previous)
    diff = PropertyDiff(
        value=members,
        added=[m for m in members if m not in old_set],
        removed=[m for m in previous if m not in new_set],
    )
    diff.delete = [
        _relation_statement(entity, spec, predicate, m, graph) for m in diff.removed
    ]
    diff.insert = [
        _relation_statement(entity, spec, predicate, m, graph) for m in diff.added
    ]
    if spec.inverse_property:
        diff.invalidate = [
            (m, spec.inverse_property) for m in (*diff.added, *diff.removed)
        ]
    return diff


# ---------------------------------------------------------------------------
# Commit
# ---------------------------------------------------------------------------


def commit_changes(
    entity: SemanticModel,
    delete: list[Statement],
    insert: list[Statement],
) -> Changeset:
    """Commit statements through *entity*'s store on behalf of its model."""
    return entity.store.commit(
        delete,
        insert,
        model_name=entity.model_name,
        subject=str(entity.uri) if entity.uri is not None else None,
    )


def write_property(entity: SemanticModel, property_name: str, value: Any) -> PropertyDiff:
    """Write *value* to the store and invalidate touched inverse relations.

    The local store reflects the write when this returns; the remote push
    (if any) is still outstanding.
    """
    diff = compute_property_diff(entity, property_name, value)
    commit_changes(entity, diff.delete, diff.insert)
    for related, inverse_name in diff.invalidate:
        related.invalidate(inverse_name)
    return diff
