"""``SemanticModel`` — objects projected onto RDF resources.

An entity is bound to an ``EntityStore`` and identified by its URI.  Each
mapped attribute owns a cache slot: the first read materializes it from
the store, every write goes through the triple diff and commit path and
then overwrites the slot.  There is no identity map; two instances with
the same URI compare equal.

Change listeners run synchronously right after the local store and cache
were updated, before any remote push has completed.
"""

from __future__ import annotations

import logging
import uuid as uuid_module
from collections.abc import Callable
from dataclasses import dataclass
from dataclasses import replace
from typing import TYPE_CHECKING
from typing import Any
from typing import ClassVar

from rdflib.namespace import Namespace
from rdflib.term import Node

from semantic_model.config import ModelConfig
from semantic_model.errors import ConfigurationError
from semantic_model.models.diff import commit_changes
from semantic_model.models.diff import write_property
from semantic_model.models.properties import PropertySpec
from semantic_model.models.resolution import graph_for_instance
from semantic_model.models.values import calculate_property_value
from semantic_model.namespaces import RDF
from semantic_model.namespaces import to_named_node
from semantic_model.namespaces import to_namespace
from semantic_model.store.triples import Statement

if TYPE_CHECKING:
    from semantic_model.store.entity_store import EntityStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PropertyChange:
    """Payload handed to change listeners after an attribute write."""

    updated_field: str
    new_value: Any


ChangeListener = Callable[["SemanticModel", PropertyChange], None]


class SemanticModel:
    """Base class for entities mapped onto an RDF graph."""

    mapping_config: ClassVar[ModelConfig] = ModelConfig()
    attributes: ClassVar[tuple[str, ...]] = ()
    attribute_definitions: ClassVar[dict[str, PropertySpec]] = {}

    default_namespace: Namespace | str | None = None
    model_name: str | None = None
    rdf_type: Node | None = None

    # ----- Declaration -----

    @classmethod
    def declare_attribute(cls, name: str, spec: PropertySpec) -> None:
        """Register a mapped attribute on *cls* (called by ``Property``)."""
        if "attribute_definitions" not in cls.__dict__:
            cls.attribute_definitions = dict(cls.attribute_definitions)
            cls.attributes = tuple(cls.attributes)
        cls.attribute_definitions[name] = spec
        if name not in cls.attributes:
            cls.attributes = (*cls.attributes, name)

    # ----- Lifecycle -----

    def __init__(
        self,
        *,
        store: EntityStore,
        default_graph: Node | str | None = None,
        default_namespace: Namespace | str | None = None,
        model_name: str | None = None,
        uri: Node | str | None = None,
        uuid: str | None = None,
        **properties: Any,
    ) -> None:
        unknown = [key for key in properties if key not in self.attribute_definitions]
        if unknown:
            msg = f"{type(self).__name__} got unexpected options: {', '.join(unknown)}"
            raise TypeError(msg)

        self.store = store
        self._cache: dict[str, Any] = {}
        self.change_listeners: list[ChangeListener] = []

        self.model_name = (
            model_name or self.model_name or store.model_name_for_class(type(self))
        )
        self.settings = store.config_for_class(type(self), self.model_name)

        if default_graph is not None:
            self.default_graph = to_named_node(default_graph)
        elif self.settings.default_graph is not None:
            self.default_graph = self.settings.default_graph
        elif self.settings.solid:
            self.default_graph = store.discover_default_graph_by_type(type(self))
        else:
            self.default_graph = None

        if default_namespace is not None:
            self.default_namespace = to_namespace(default_namespace)

        self.uuid: str | None = None
        if uri is not None:
            self.uri = to_named_node(uri)
        else:
            if self.default_graph is None:
                msg = (
                    f"Cannot generate a URI for {type(self).__name__}: "
                    "no uri given and no default graph resolved"
                )
                raise ConfigurationError(msg)
            self.uuid = uuid or str(uuid_module.uuid4())
            self.uri = to_named_node(f"{self.default_graph}#{self.uuid}")

        self.rdf_type = self.rdf_type or self.settings.rdf_type

        self._ensure_resource_exists()

        for key, value in properties.items():
            setattr(self, key, value)

    def _ensure_resource_exists(self) -> None:
        """Assert the type triple unless it is already in the store."""
        if self.rdf_type is None:
            return
        target_graph = self.store.get_graph_for_type(self.model_name) or self.default_graph
        if self.store.match(self.uri, RDF.type, self.rdf_type, target_graph):
            return
        commit_changes(
            self,
            [],
            [Statement(self.uri, RDF.type, self.rdf_type, target_graph)],
        )

    def destroy(self) -> None:
        """Clear every mapped attribute and retract the type triple.

        The entity is not tracked anywhere else; callers drop their own
        references.
        """
        for name in self.attributes:
            setattr(self, name, None)

        if self.rdf_type is None:
            return
        commit_changes(
            self,
            [Statement(self.uri, RDF.type, self.rdf_type, graph_for_instance(self))],
            [],
        )
        logger.debug("Destroyed %s", self.uri)

    # ----- Attribute dispatch -----

    def read_attribute(self, name: str) -> Any:
        if name in self._cache:
            return self._cache[name]
        value = calculate_property_value(self, name)
        self._cache[name] = value
        return value

    def write_attribute(self, name: str, value: Any) -> None:
        diff = write_property(self, name, value)
        self._cache[name] = diff.value
        change = PropertyChange(updated_field=name, new_value=diff.value)
        for listener in list(self.change_listeners):
            listener(self, change)

    def is_cached(self, name: str) -> bool:
        """Whether *name* has been materialized (even if it resolved to ``None``)."""
        return name in self._cache

    def cached_value(self, name: str) -> Any:
        return self._cache.get(name)

    def invalidate(self, name: str | None = None) -> None:
        """Drop the cache slot of *name*, or of every attribute."""
        if name is None:
            self._cache.clear()
        else:
            self._cache.pop(name, None)

    # ----- Change listeners -----

    def add_change_listener(self, listener: ChangeListener) -> None:
        if listener not in self.change_listeners:
            self.change_listeners.append(listener)

    def remove_change_listener(self, listener: ChangeListener) -> None:
        if listener in self.change_listeners:
            self.change_listeners.remove(listener)

    # ----- Identity -----

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemanticModel):
            return NotImplemented
        return self.uri == other.uri

    def __hash__(self) -> int:
        return hash(self.uri)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.uri}>"


# ---------------------------------------------------------------------------
# Class decorators
# ---------------------------------------------------------------------------


def _configure(cls: type[SemanticModel], **changes: Any) -> type[SemanticModel]:
    cls.mapping_config = replace(cls.mapping_config, **changes)
    return cls


def rdf_type(type_uri: Node | str) -> Callable[[type[SemanticModel]], type[SemanticModel]]:
    """Mark a class as representing the RDF class *type_uri*."""

    def decorate(cls: type[SemanticModel]) -> type[SemanticModel]:
        return _configure(cls, rdf_type=to_named_node(type_uri))

    return decorate


def default_graph(graph_uri: Node | str) -> Callable[[type[SemanticModel]], type[SemanticModel]]:
    """Fix the graph new instances of a class are written to."""

    def decorate(cls: type[SemanticModel]) -> type[SemanticModel]:
        return _configure(cls, default_graph=to_named_node(graph_uri))

    return decorate


def autosave(enabled: bool = True) -> Callable[[type[SemanticModel]], type[SemanticModel]]:
    """Push writes of a class to the remote backend as they happen."""

    def decorate(cls: type[SemanticModel]) -> type[SemanticModel]:
        return _configure(cls, autosave=enabled)

    return decorate


def solid(
    *,
    type: Node | str | None = None,
    namespace: Namespace | str | None = None,
    ns: Namespace | str | None = None,
) -> Callable[[type[SemanticModel]], type[SemanticModel]]:
    """Mark a class as stored in a Solid pod.

    The graph is discovered through the store's type index.  Without an
    explicit *type* the class name within *namespace* is used.
    """
    namespace = namespace or ns

    def decorate(cls: type[SemanticModel]) -> type[SemanticModel]:
        resolved_ns = to_namespace(namespace) if namespace else cls.mapping_config.namespace
        if type is None and resolved_ns is None:
            msg = (
                f"Must specify type for Solid class {cls.__name__} "
                '(eg: type="http://example.com/MyThing") or a namespace '
                '(eg: namespace="http://example.com/")'
            )
            raise ConfigurationError(msg)
        rdf_class = to_named_node(type) if type is not None else resolved_ns[cls.__name__]
        return _configure(cls, solid=True, namespace=resolved_ns, rdf_type=rdf_class)

    return decorate
