"""Object-graph mapping of typed Python entities onto RDF named graphs."""

from __future__ import annotations

from semantic_model.config import AuditConfig
from semantic_model.config import ModelConfig
from semantic_model.config import StoreConfig
from semantic_model.config import SyncConfig
from semantic_model.errors import ConfigurationError
from semantic_model.errors import RemoteSyncError
from semantic_model.models import SemanticModel
from semantic_model.store.entity_store import EntityStore

__all__ = [
    "AuditConfig",
    "ConfigurationError",
    "EntityStore",
    "ModelConfig",
    "RemoteSyncError",
    "SemanticModel",
    "StoreConfig",
    "SyncConfig",
]
