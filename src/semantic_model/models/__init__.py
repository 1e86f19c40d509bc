"""Models domain — entity base class and declarative attribute mapping."""

from __future__ import annotations

from semantic_model.models.diff import PropertyDiff
from semantic_model.models.diff import compute_property_diff
from semantic_model.models.entity import PropertyChange
from semantic_model.models.entity import SemanticModel
from semantic_model.models.entity import autosave
from semantic_model.models.entity import default_graph
from semantic_model.models.entity import rdf_type
from semantic_model.models.entity import solid
from semantic_model.models.properties import Property
from semantic_model.models.properties import PropertySpec
from semantic_model.models.properties import PropertyType
from semantic_model.models.properties import belongs_to
from semantic_model.models.properties import boolean
from semantic_model.models.properties import date_time
from semantic_model.models.properties import has_many
from semantic_model.models.properties import integer
from semantic_model.models.properties import property_
from semantic_model.models.properties import string
from semantic_model.models.properties import term
from semantic_model.models.resolution import graph_for_instance
from semantic_model.models.resolution import predicate_for_property

__all__ = [
    # Entity
    "PropertyChange",
    "SemanticModel",
    # Class decorators
    "autosave",
    "default_graph",
    "rdf_type",
    "solid",
    # Properties
    "Property",
    "PropertySpec",
    "PropertyType",
    "belongs_to",
    "boolean",
    "date_time",
    "has_many",
    "integer",
    "property_",
    "string",
    "term",
    # Resolution and diffing
    "PropertyDiff",
    "compute_property_diff",
    "graph_for_instance",
    "predicate_for_property",
]
