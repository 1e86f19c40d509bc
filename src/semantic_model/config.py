"""Configuration dataclasses.

One frozen dataclass per concern: model mapping, remote sync, audit
log and store defaults. Nothing is read from the environment; callers
pass overrides at construction time.
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field

from rdflib import URIRef
from rdflib.namespace import Namespace


@dataclass(frozen=True)
class ModelConfig:
    """Per-model mapping settings.

    Attached to an entity class by the class decorators in
    ``semantic_model.models.entity`` or handed to
    ``EntityStore.register_model``.
    """

    rdf_type: URIRef | None = None
    namespace: Namespace | None = None
    default_graph: URIRef | None = None
    # None defers to StoreConfig.autosave_default
    autosave: bool | None = None
    # Classes living in a Solid pod discover their graph via the type index
    solid: bool = False


@dataclass(frozen=True)
class SyncConfig:
    """Remote synchronisation backend settings."""

    backend: str = "none"
    url: str | None = None
    key_prefix: str = "semantic_model"
    timeout_seconds: float = 30.0
    headers: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class AuditConfig:
    """Settings for the JSONL commit audit log."""

    file_path: str = "semantic_model_audit.jsonl"
    enabled: bool = True


@dataclass(frozen=True)
class StoreConfig:
    """Defaults applied by ``EntityStore``."""

    default_graph: URIRef = URIRef("urn:semantic-model:default")
    autosave_default: bool = False
