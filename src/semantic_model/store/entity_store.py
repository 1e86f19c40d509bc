"""Entity store — model registry, type index and the commit pipeline.

Writes are optimistic: ``commit`` applies a changeset to the local
``TripleStore`` before returning, then pushes it to the remote backend.
Autosave models push immediately (as a task on the running event loop);
everything else waits for ``persist()``.  A store without a remote
backend keeps no queue.  Push failures are logged and reported to commit
listeners, never raised to the writer, and the local state is not rolled
back.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from collections.abc import Iterable
from time import perf_counter
from typing import TYPE_CHECKING
from typing import Any

from rdflib.term import Node

from semantic_model.audit import AuditLogger
from semantic_model.config import ModelConfig
from semantic_model.config import StoreConfig
from semantic_model.errors import ConfigurationError
from semantic_model.namespaces import RDF
from semantic_model.namespaces import SOLID
from semantic_model.namespaces import to_named_node
from semantic_model.observability import record_commit
from semantic_model.store.remote import RemoteSync
from semantic_model.store.schemas import Changeset
from semantic_model.store.schemas import CommitResult
from semantic_model.store.triples import Statement
from semantic_model.store.triples import TripleStore

if TYPE_CHECKING:
    from semantic_model.models.entity import SemanticModel

logger = logging.getLogger(__name__)

CommitListener = Callable[[CommitResult], None]


class EntityStore:
    """Local triple store plus the object mapping's collaborators."""

    def __init__(
        self,
        *,
        config: StoreConfig | None = None,
        remote: RemoteSync | None = None,
        audit: AuditLogger | None = None,
        triples: TripleStore | None = None,
    ) -> None:
        self.config = config or StoreConfig()
        self.triples = triples or TripleStore(self.config.default_graph)
        self._remote = remote
        self._audit = audit
        self._models: dict[str, type[SemanticModel]] = {}
        self._model_configs: dict[str, ModelConfig] = {}
        self._type_index: dict[Node, Node] = {}
        self._pending: list[Changeset] = []
        self._inflight: set[asyncio.Task[CommitResult]] = set()
        self._commit_listeners: list[CommitListener] = []

    # ------------------------------------------------------------------
    # Model registry
    # ------------------------------------------------------------------

    def register_model(
        self,
        name: str,
        cls: type[SemanticModel],
        config: ModelConfig | None = None,
    ) -> None:
        """Register *cls* as *name*; *config* overrides the class-level one."""
        self._models[name] = cls
        if config is not None:
            self._model_configs[name] = config

    def class_for_model(self, name: str) -> type[SemanticModel]:
        try:
            return self._models[name]
        except KeyError:
            msg = f"Unknown model {name!r}; register it with register_model()"
            raise ConfigurationError(msg) from None

    def model_name_for_class(self, cls: type) -> str | None:
        for name, registered in self._models.items():
            if registered is cls:
                return name
        return None

    def config_for_model(self, name: str) -> ModelConfig:
        if name in self._model_configs:
            return self._model_configs[name]
        return self.class_for_model(name).mapping_config

    def config_for_class(self, cls: type, model_name: str | None = None) -> ModelConfig:
        name = model_name or self.model_name_for_class(cls)
        if name is not None and name in self._model_configs:
            return self._model_configs[name]
        return cls.mapping_config

    def get_autosave_for_type(self, model_name: str) -> bool:
        if model_name not in self._models and model_name not in self._model_configs:
            return self.config.autosave_default
        autosave = self.config_for_model(model_name).autosave
        return self.config.autosave_default if autosave is None else autosave

    # ------------------------------------------------------------------
    # Type index
    # ------------------------------------------------------------------

    def register_type_location(self, rdf_type: Node | str, graph: Node | str) -> None:
        """Record that instances of *rdf_type* live in *graph*."""
        self._type_index[to_named_node(rdf_type)] = to_named_node(graph)

    def discover_default_graph_by_type(self, type_or_class: Node | str | type) -> Node | None:
        """Return the graph registered for an RDF class or a model class.

        Explicit ``register_type_location`` entries win over
        ``solid:TypeRegistration`` statements found in the store.
        """
        if isinstance(type_or_class, type):
            rdf_type = self.config_for_class(type_or_class).rdf_type
        else:
            rdf_type = to_named_node(type_or_class)
        if rdf_type is None:
            return None
        if rdf_type in self._type_index:
            return self._type_index[rdf_type]
        for registration in self.triples.match(None, SOLID.forClass, rdf_type):
            location = self.triples.any(registration.subject, SOLID.instance, None)
            if location is not None:
                return location.object
        return None

    def get_graph_for_type(self, model_name: str | None) -> Node | None:
        if model_name is None:
            return None
        if model_name not in self._models and model_name not in self._model_configs:
            return None
        rdf_type = self.config_for_model(model_name).rdf_type
        if rdf_type is None:
            return None
        return self.discover_default_graph_by_type(rdf_type)

    # ------------------------------------------------------------------
    # Entities
    # ------------------------------------------------------------------

    def create(
        self,
        model_name: str,
        uri: Node | str | None = None,
        **options: Any,
    ) -> SemanticModel:
        """Instantiate the model registered as *model_name*."""
        cls = self.class_for_model(model_name)
        if uri is not None:
            options["uri"] = uri
        return cls(store=self, model_name=model_name, **options)

    def all(self, model_name: str) -> list[SemanticModel]:
        """Return one entity per typed subject of *model_name*'s graph."""
        config = self.config_for_model(model_name)
        if config.rdf_type is None:
            msg = f"Model {model_name!r} declares no rdf_type"
            raise ConfigurationError(msg)
        graph = self.get_graph_for_type(model_name) or config.default_graph
        subjects = [
            st.subject for st in self.triples.match(None, RDF.type, config.rdf_type, graph)
        ]
        return [self.create(model_name, uri) for uri in dict.fromkeys(subjects)]

    # ------------------------------------------------------------------
    # Local triple access
    # ------------------------------------------------------------------

    def match(
        self,
        subject: Node | None = None,
        predicate: Node | None = None,
        obj: Node | None = None,
        graph: Node | None = None,
    ) -> list[Statement]:
        return self.triples.match(subject, predicate, obj, graph)

    def any(
        self,
        subject: Node | None = None,
        predicate: Node | None = None,
        obj: Node | None = None,
        graph: Node | None = None,
    ) -> Statement | None:
        return self.triples.any(subject, predicate, obj, graph)

    def add_all(self, statements: Iterable[Statement]) -> None:
        self.triples.add_all(statements)

    def remove_statements(self, statements: Iterable[Statement]) -> None:
        self.triples.remove_statements(statements)

    # ------------------------------------------------------------------
    # Commit pipeline
    # ------------------------------------------------------------------

    def commit(
        self,
        delete: Iterable[Statement],
        insert: Iterable[Statement],
        *,
        model_name: str | None = None,
        subject: str | None = None,
    ) -> Changeset:
        """Apply a changeset locally and schedule its remote push.

        Statements missing a subject, predicate or object are dropped;
        statements without a graph are bound to the default graph so the
        remote backend sees the same graph the local store used.  Without
        a remote backend nothing is queued.
        """
        changeset = Changeset(
            delete=self._prepare(delete),
            insert=self._prepare(insert),
            model_name=model_name,
            subject=subject,
        )
        self.triples.remove_statements(changeset.delete)
        self.triples.add_all(changeset.insert)

        if changeset.is_empty or self._remote is None:
            return changeset
        if model_name is not None and self.get_autosave_for_type(model_name):
            self._schedule(changeset)
        else:
            self._pending.append(changeset)
        return changeset

    def _prepare(self, statements: Iterable[Statement]) -> list[Statement]:
        default_graph = self.triples.default_graph
        return [
            st if st.graph is not None else st.with_graph(default_graph)
            for st in statements
            if st.is_complete
        ]

    def _schedule(self, changeset: Changeset) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop to push on; the next persist() picks it up
            self._pending.append(changeset)
            return
        task = loop.create_task(self._push(changeset))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    @property
    def pending(self) -> list[Changeset]:
        """Changesets applied locally but not pushed yet."""
        return list(self._pending)

    async def update(
        self,
        delete: Iterable[Statement],
        insert: Iterable[Statement],
    ) -> CommitResult:
        """Push statements to the remote backend without touching the local store."""
        changeset = Changeset(delete=self._prepare(delete), insert=self._prepare(insert))
        return await self._push(changeset)

    async def persist(self) -> list[CommitResult]:
        """Wait for in-flight pushes, then push every queued changeset in order."""
        results: list[CommitResult] = []
        if self._inflight:
            results.extend(await asyncio.gather(*list(self._inflight)))
        pending, self._pending = self._pending, []
        for changeset in pending:
            results.append(await self._push(changeset))
        return results

    async def _push(self, changeset: Changeset) -> CommitResult:
        start = perf_counter()
        message: str | None = None
        response: str | None = None
        ok = True
        if self._remote is not None:
            try:
                await self._remote.update(changeset.delete, changeset.insert)
            except Exception as exc:
                ok = False
                message = str(exc)
                response = getattr(exc, "response", None)
                logger.error(
                    "Remote update failed uri=%s message=%s response=%s",
                    changeset.subject,
                    message,
                    response,
                )
            else:
                logger.debug(
                    "Remote update succeeded uri=%s deleted=%d inserted=%d",
                    changeset.subject,
                    len(changeset.delete),
                    len(changeset.insert),
                )

        duration_ms = (perf_counter() - start) * 1000
        result = CommitResult(
            changeset_id=changeset.id,
            model_name=changeset.model_name,
            subject=changeset.subject,
            deleted=len(changeset.delete),
            inserted=len(changeset.insert),
            ok=ok,
            remote=self._remote is not None,
            message=message,
            response=response,
            duration_ms=duration_ms,
        )
        record_commit(
            model_name=changeset.model_name,
            inserted=result.inserted,
            deleted=result.deleted,
            duration_ms=duration_ms,
            ok=ok,
        )
        if self._audit is not None:
            try:
                await self._audit.log_commit(result)
            except Exception:
                logger.exception("Audit logging failed for changeset %s", changeset.id)
        self._notify(result)
        return result

    # ------------------------------------------------------------------
    # Remote reads
    # ------------------------------------------------------------------

    async def fetch_graph_for_type(self, model_name: str) -> list[Statement]:
        """Load *model_name*'s graph from the remote backend into the local store.

        Fetch errors propagate to the caller.
        """
        graph = self.get_graph_for_type(model_name) or self.config_for_model(
            model_name
        ).default_graph
        if self._remote is None or graph is None:
            return []
        statements = await self._remote.fetch(graph)
        self.triples.add_all(statements)
        if self._audit is not None:
            await self._audit.log_fetch(
                model_name=model_name,
                graph=graph,
                statements=len(statements),
            )
        return statements

    # ------------------------------------------------------------------
    # Commit listeners
    # ------------------------------------------------------------------

    def add_commit_listener(self, listener: CommitListener) -> None:
        if listener not in self._commit_listeners:
            self._commit_listeners.append(listener)

    def remove_commit_listener(self, listener: CommitListener) -> None:
        if listener in self._commit_listeners:
            self._commit_listeners.remove(listener)

    def _notify(self, result: CommitResult) -> None:
        for listener in list(self._commit_listeners):
            try:
                listener(result)
            except Exception:
                logger.exception("Commit listener failed for changeset %s", result.changeset_id)
