"""Conversion between Python values and RDF terms, and the read path.

``calculate_property_value`` materializes one attribute from the store.
Missing single-valued attributes resolve to ``None``; they never raise.
"""

from __future__ import annotations

import logging
from datetime import UTC
from datetime import datetime
from decimal import Decimal
from decimal import InvalidOperation
from email.utils import parsedate_to_datetime
from typing import TYPE_CHECKING
from typing import Any

from rdflib import Literal
from rdflib.namespace import XSD
from rdflib.term import Node

from semantic_model.models.properties import PropertySpec
from semantic_model.models.properties import PropertyType
from semantic_model.models.resolution import graph_for_instance
from semantic_model.models.resolution import predicate_for_property
from semantic_model.models.resolution import spec_for
from semantic_model.namespaces import to_named_node

if TYPE_CHECKING:
    from semantic_model.models.entity import SemanticModel

logger = logging.getLogger(__name__)

_TRUE_LEXICALS = {"true", "1"}

# ---------------------------------------------------------------------------
# Python -> RDF
# ---------------------------------------------------------------------------


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def to_term(kind: PropertyType, value: Any) -> Node | None:
    """Return the object term written for a scalar *value*."""
    if kind.is_relation:
        msg = f"{kind.value} values are not scalar terms"
        raise TypeError(msg)
    if value is None:
        return None
    if kind is PropertyType.string:
        return Literal(str(value))
    if kind is PropertyType.integer:
        return Literal(str(int(value)), datatype=XSD.decimal)
    if kind is PropertyType.boolean:
        return Literal("true" if value else "false", datatype=XSD.boolean)
    if kind is PropertyType.date_time:
        return Literal(_to_utc(value).isoformat(), datatype=XSD.dateTime)
    return to_named_node(value)


# ---------------------------------------------------------------------------
# RDF -> Python
# ---------------------------------------------------------------------------


def _parse_integer(lexical: str) -> int | None:
    try:
        return int(Decimal(lexical.strip()))
    except (InvalidOperation, ValueError):
        logger.warning("Ignoring non-numeric integer literal %r", lexical)
        return None


def _parse_datetime(lexical: str) -> datetime | None:
    try:
        return datetime.fromisoformat(lexical.strip())
    except ValueError:
        pass
    # RFC 1123 strings ("Tue, 01 Oct 2024 10:00:00 GMT") from older writers
    try:
        return parsedate_to_datetime(lexical)
    except (TypeError, ValueError):
        logger.warning("Ignoring unparseable dateTime literal %r", lexical)
        return None


def from_term(kind: PropertyType, term: Node | None) -> Any:
    """Convert a matched term to the Python value of a scalar attribute."""
    if term is None:
        return None
    if kind is PropertyType.term:
        return term
    lexical = str(term)
    if kind is PropertyType.integer:
        return _parse_integer(lexical)
    if kind is PropertyType.boolean:
        return lexical in _TRUE_LEXICALS
    if kind is PropertyType.date_time:
        return _parse_datetime(lexical)
    return lexical


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


def related_options(entity: SemanticModel, spec: PropertySpec) -> dict[str, Any]:
    """Construction options for entities reached through a relation."""
    if spec.propagate_default_graph and entity.default_graph is not None:
        return {"default_graph": entity.default_graph}
    return {}


def calculate_property_value(entity: SemanticModel, property_name: str) -> Any:
    """Query the store for *property_name* and convert the match."""
    spec = spec_for(entity, property_name)
    predicate = predicate_for_property(entity, property_name)
    graph = graph_for_instance(entity, property_name)
    store = entity.store
    kind = spec.kind

    if kind is PropertyType.has_many:
        if spec.inverse:
            members = [
                st.subject for st in store.match(None, predicate, entity.uri, graph)
            ]
        else:
            members = [
                st.object for st in store.match(entity.uri, predicate, None, graph)
            ]
        options = related_options(entity, spec)
        return [
            store.create(spec.model, uri, **options)
            for uri in dict.fromkeys(members)
        ]

    if spec.inverse:
        match = store.any(None, predicate, entity.uri, graph)
        found = match.subject if match is not None else None
    else:
        match = store.any(entity.uri, predicate, None, graph)
        found = match.object if match is not None else None

    if kind is PropertyType.belongs_to:
        if found is None:
            return None
        return store.create(spec.model, found, **related_options(entity, spec))
    return from_term(kind, found)
