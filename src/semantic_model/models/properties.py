"""Declarative property specifications and their descriptors.

A class declares its mapped attributes as descriptors::

    class Person(SemanticModel):
        name = string(ns=FOAF)
        age = integer(predicate=VCARD.age)

Each descriptor registers its ``PropertySpec`` in the owning class's
``attribute_definitions`` table; reads and writes are routed to the single
generic dispatcher on ``SemanticModel``.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING
from typing import Any

from pydantic import BaseModel
from pydantic import Field
from pydantic import field_validator
from rdflib import URIRef
from rdflib.namespace import Namespace

from semantic_model.errors import ConfigurationError
from semantic_model.namespaces import to_named_node
from semantic_model.namespaces import to_namespace

if TYPE_CHECKING:
    from semantic_model.models.entity import SemanticModel

# ---------------------------------------------------------------------------
# Specification
# ---------------------------------------------------------------------------


class PropertyType(str, Enum):
    """Value kinds a mapped attribute can hold."""

    string = "string"
    integer = "integer"
    boolean = "boolean"
    date_time = "dateTime"
    term = "term"
    belongs_to = "belongsTo"
    has_many = "hasMany"

    @property
    def is_relation(self) -> bool:
        return self in (PropertyType.belongs_to, PropertyType.has_many)


class PropertySpec(BaseModel):
    """Resolution options for one mapped attribute."""

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    type: PropertyType | None = Field(
        default=None,
        description="Value kind; ``None`` reads and writes plain strings.",
    )
    predicate: URIRef | None = Field(
        default=None,
        description="Explicit predicate URI, wins over every namespace.",
    )
    ns: Namespace | None = Field(
        default=None,
        description="Namespace combined with the attribute name.",
    )
    model: str | None = Field(
        default=None,
        description="Registered model name of related entities.",
    )
    inverse: bool = Field(
        default=False,
        description="Read/write with this entity in the object position.",
    )
    inverse_property: str | None = Field(
        default=None,
        description="Attribute on related entities mirroring this relation.",
    )
    graph: URIRef | None = Field(
        default=None,
        description="Named graph override for this attribute's triples.",
    )
    propagate_default_graph: bool = Field(
        default=False,
        description="Hand this entity's default graph to related entities.",
    )

    @field_validator("predicate", "graph", mode="before")
    @classmethod
    def _coerce_uri(cls, value: Any) -> Any:
        if value is None:
            return None
        return URIRef(str(to_named_node(value)))

    @field_validator("ns", mode="before")
    @classmethod
    def _coerce_namespace(cls, value: Any) -> Any:
        if value is None:
            return None
        return to_namespace(value)

    @property
    def kind(self) -> PropertyType:
        return self.type or PropertyType.string


# ---------------------------------------------------------------------------
# Descriptor
# ---------------------------------------------------------------------------


class Property:
    """Descriptor binding an attribute name to its ``PropertySpec``."""

    def __init__(self, spec: PropertySpec) -> None:
        self.spec = spec
        self.name: str | None = None

    def __set_name__(self, owner: type[SemanticModel], name: str) -> None:
        self.name = name
        owner.declare_attribute(name, self.spec)

    def __get__(self, instance: SemanticModel | None, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return instance.read_attribute(self.name)

    def __set__(self, instance: SemanticModel, value: Any) -> None:
        instance.write_attribute(self.name, value)

    def __repr__(self) -> str:
        return f"Property({self.name!r}, type={self.spec.kind.value!r})"


# ---------------------------------------------------------------------------
# Constructors
# ---------------------------------------------------------------------------


def property_(**options: Any) -> Property:
    """Declare a mapped attribute from raw ``PropertySpec`` options."""
    return Property(PropertySpec(**options))


def string(**options: Any) -> Property:
    return property_(type=PropertyType.string, **options)


def integer(**options: Any) -> Property:
    return property_(type=PropertyType.integer, **options)


def boolean(**options: Any) -> Property:
    return property_(type=PropertyType.boolean, **options)


def date_time(**options: Any) -> Property:
    return property_(type=PropertyType.date_time, **options)


def term(**options: Any) -> Property:
    """Declare an attribute holding a raw RDF term."""
    return property_(type=PropertyType.term, **options)


def belongs_to(**options: Any) -> Property:
    """Declare a single-valued relation to another model."""
    if not options.get("model"):
        raise ConfigurationError("belongs_to requires 'model' to be supplied")
    return property_(type=PropertyType.belongs_to, **options)


def has_many(**options: Any) -> Property:
    """Declare a multi-valued relation to another model."""
    if not options.get("model"):
        raise ConfigurationError("has_many requires 'model' to be supplied")
    return property_(type=PropertyType.has_many, **options)
