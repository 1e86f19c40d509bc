"""Store domain — local quad store, commit pipeline and remote backends.

Exports are loaded lazily to avoid import cycles between the store and
models packages during bootstrap imports.
"""

from __future__ import annotations

from importlib import import_module

__all__ = [
    "Changeset",
    "CommitResult",
    "EntityStore",
    "RedisTripleSync",
    "RemoteSync",
    "SparqlUpdateSync",
    "Statement",
    "TripleStore",
    "build_remote_sync",
]


_EXPORT_TO_MODULE = {
    "Changeset": "semantic_model.store.schemas",
    "CommitResult": "semantic_model.store.schemas",
    "EntityStore": "semantic_model.store.entity_store",
    "RedisTripleSync": "semantic_model.store.remote",
    "RemoteSync": "semantic_model.store.remote",
    "SparqlUpdateSync": "semantic_model.store.remote",
    "build_remote_sync": "semantic_model.store.remote",
    "Statement": "semantic_model.store.triples",
    "TripleStore": "semantic_model.store.triples",
}


def __getattr__(name: str):
    module_name = _EXPORT_TO_MODULE.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module = import_module(module_name)
    return getattr(module, name)
