"""Namespace helpers and the vocabularies used by the bundled models.

Vocabularies are plain ``Namespace`` objects (not rdflib's closed
``DefinedNamespace`` variants) so any local name can be minted from them.
"""

from __future__ import annotations

from rdflib import BNode
from rdflib import Literal
from rdflib import URIRef
from rdflib.namespace import RDF
from rdflib.namespace import XSD
from rdflib.namespace import Namespace
from rdflib.term import Node

FOAF = Namespace("http://xmlns.com/foaf/0.1/")
LDP = Namespace("http://www.w3.org/ns/ldp#")
SCHEMA = Namespace("http://schema.org/")
SOLID = Namespace("http://www.w3.org/ns/solid/terms#")
SP = Namespace("http://www.w3.org/ns/pim/space#")
VCARD = Namespace("http://www.w3.org/2006/vcard/ns#")

__all__ = [
    "FOAF",
    "LDP",
    "RDF",
    "SCHEMA",
    "SOLID",
    "SP",
    "VCARD",
    "XSD",
    "to_named_node",
    "to_namespace",
]


def to_namespace(ns: Namespace | str) -> Namespace:
    """Return *ns* as an rdflib ``Namespace``."""
    if isinstance(ns, Namespace):
        return ns
    return Namespace(str(ns))


def to_named_node(value: Node | str) -> Node:
    """Coerce *value* into an RDF identifier.

    Existing terms (``URIRef``, ``BNode``, ``Literal``) pass through
    unchanged; strings become ``URIRef``.
    """
    if isinstance(value, (URIRef, BNode, Literal)):
        return value
    if isinstance(value, str):
        return URIRef(value)
    msg = f"Cannot convert {value!r} to a named node"
    raise TypeError(msg)
