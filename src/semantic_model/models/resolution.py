"""Predicate and named-graph resolution for mapped attributes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rdflib import URIRef
from rdflib.term import Node

from semantic_model.errors import ConfigurationError
from semantic_model.models.properties import PropertySpec
from semantic_model.namespaces import to_namespace

if TYPE_CHECKING:
    from semantic_model.models.entity import SemanticModel
    from semantic_model.store.entity_store import EntityStore


def spec_for(entity: SemanticModel, property_name: str) -> PropertySpec:
    spec = entity.attribute_definitions.get(property_name)
    if spec is None:
        msg = f"{type(entity).__name__} has no mapped attribute {property_name!r}"
        raise ConfigurationError(msg)
    return spec


def predicate_for_property(entity: SemanticModel, property_name: str) -> URIRef:
    """Return the predicate URI for *property_name* on *entity*.

    Precedence: explicit ``predicate`` > the attribute's ``ns`` > the
    entity's ``default_namespace`` > the class-level ``namespace``.
    """
    spec = spec_for(entity, property_name)
    if spec.predicate is not None:
        return spec.predicate
    if spec.ns is not None:
        return spec.ns[property_name]
    if entity.default_namespace is not None:
        return to_namespace(entity.default_namespace)[property_name]
    class_namespace = entity.settings.namespace
    if class_namespace is not None:
        return to_namespace(class_namespace)[property_name]
    msg = (
        f"Could not calculate predicate for {type(entity).__name__}.{property_name}: "
        "declare a predicate, an ns, a default_namespace or a class namespace"
    )
    raise ConfigurationError(msg)


def graph_for_type(model_name: str, store: EntityStore) -> Node | None:
    """Return the graph discovered for the class registered as *model_name*."""
    return store.discover_default_graph_by_type(store.class_for_model(model_name))


def graph_for_instance(
    entity: SemanticModel,
    property_name: str | None = None,
) -> Node | None:
    """Return the graph holding *entity*'s triples for *property_name*.

    Inverse relations live with the related entity as subject, so they
    resolve to the related model's graph.
    """
    entity_graph = entity.store.get_graph_for_type(entity.model_name)
    if property_name is None:
        return entity_graph or entity.default_graph

    spec = spec_for(entity, property_name)
    if spec.model and spec.inverse:
        return graph_for_type(spec.model, entity.store)
    return spec.graph or entity_graph or entity.default_graph
