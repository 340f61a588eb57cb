"""
Workflow Store: in-memory owner of the editor session.

Holds every open workflow document, tracks the active one, and applies
all node/edge mutations. Each operation builds a complete replacement
``Session`` and installs it in a single assignment, so readers never see
a half-applied change. Mutations are serialized behind one lock.
"""

from __future__ import annotations

import threading
import uuid
from logging import getLogger
from typing import Any, Callable, Collection, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from bioflow.config import EditorConfig, get_editor_config
from bioflow.logging import SessionLogger, get_session_logger, remove_session_logger
from bioflow.workflow.errors import (
    LastWorkflowError,
    MalformedInstantiationPayload,
    UnknownNode,
    UnknownPort,
    UnknownWorkflow,
)
from bioflow.workflow.node_catalog import NodeCatalog, get_node_catalog
from bioflow.workflow.workflow_model import (
    EdgeInstance,
    NodeInstance,
    Position,
    Session,
    WorkflowDocument,
    frozen_values,
    seed_input_values,
)

logger = getLogger(__name__)

Listener = Callable[[str, Session], None]
PositionLike = Union[Position, Mapping[str, float], Tuple[float, float]]


def _as_position(position: PositionLike) -> Position:
    """Coerce a Position, ``{"x", "y"}`` mapping or ``(x, y)`` pair.

    Raises ``MalformedInstantiationPayload`` for anything else.
    """
    if isinstance(position, Position):
        return position
    try:
        if isinstance(position, tuple):
            if len(position) != 2:
                raise MalformedInstantiationPayload(
                    f"position tuple needs 2 coordinates, got {len(position)}"
                )
            return Position(x=position[0], y=position[1])
        if isinstance(position, Mapping):
            return Position.model_validate(dict(position))
    except ValidationError as e:
        raise MalformedInstantiationPayload(
            f"invalid position: {e.errors()[0]['msg']}"
        ) from None
    raise MalformedInstantiationPayload(
        f"position must be a Position, mapping or (x, y) tuple, not {type(position).__name__}"
    )


class WorkflowStore:
    """Sole owner and mutator of one editor ``Session``.

    Create/connect calls that reference a missing type, workflow or node
    raise. Delete, rename, move and update calls that miss are no-ops.

    Usage::

        store = WorkflowStore()
        wf = store.current_workflow().id
        fetch = store.instantiate_node(wf, "protein-fetch", (10, 20))
        prompt = store.instantiate_node(wf, "text-prompt", (200, 20))
        store.connect(wf, prompt.id, "prompt_text", fetch.id, "uniprot_id")
    """

    def __init__(
        self,
        catalog: Optional[NodeCatalog] = None,
        config: Optional[EditorConfig] = None,
        initial_workflow: bool = True,
        session_id: Optional[str] = None,
    ) -> None:
        self._catalog = catalog or get_node_catalog()
        self._config = config or get_editor_config()
        self._lock = threading.RLock()
        self._listeners: List[Listener] = []
        self.session_id = session_id or f"session-{uuid.uuid4().hex[:8]}"
        self._session_log: SessionLogger = get_session_logger(
            self.session_id,
            create_if_missing=True,
            max_entries=self._config.history_limit,
        )

        if initial_workflow:
            first = WorkflowDocument(
                id=self._new_id("workflow", ()),
                name=self._config.default_workflow_name,
                is_active=True,
            )
            self._session = Session(documents=(first,), active_document_id=first.id)
        else:
            self._session = Session()
        logger.info(
            f"[{self.session_id}] WorkflowStore initialized with "
            f"{len(self._session.documents)} workflow(s)"
        )

    # ── Read access ──

    @property
    def session(self) -> Session:
        """The current immutable session snapshot."""
        return self._session

    @property
    def catalog(self) -> NodeCatalog:
        return self._catalog

    @property
    def session_log(self) -> SessionLogger:
        return self._session_log

    def workflows(self) -> List[WorkflowDocument]:
        return list(self._session.documents)

    def get_workflow(self, workflow_id: str) -> Optional[WorkflowDocument]:
        return self._session.get_workflow(workflow_id)

    def current_workflow(self) -> Optional[WorkflowDocument]:
        """Look up the document referenced by the active id."""
        return self._session.current_workflow()

    @property
    def active_workflow_id(self) -> str:
        return self._session.active_document_id

    # ── Listeners ──

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener(operation, session)`` after each mutation.

        Returns a function that removes the listener again.
        """
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    # ── Lifecycle ──

    def close(self) -> None:
        """Drop listeners and unregister this session's log."""
        with self._lock:
            self._listeners.clear()
        if remove_session_logger(self.session_id):
            logger.info(f"[{self.session_id}] WorkflowStore closed")

    def __enter__(self) -> "WorkflowStore":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ── Workflow documents ──

    def create_workflow(self, name: Optional[str] = None) -> str:
        """Append an empty workflow and return its id.

        Without a name the tab is called ``Workflow <n>``, n being the
        new document count. The active workflow only changes when there
        was no valid one.
        """
        with self._lock:
            session = self._session
            if name is None:
                name = f"Workflow {len(session.documents) + 1}"
            workflow_id = self._new_id("workflow", session.workflow_ids())
            activate = session.current_workflow() is None
            doc = WorkflowDocument(id=workflow_id, name=name, is_active=activate)
            documents = session.documents + (doc,)
            if activate:
                documents = tuple(
                    d.model_copy(update={"is_active": d.id == workflow_id}) for d in documents
                )
            self._commit(
                "create_workflow",
                Session(
                    documents=documents,
                    active_document_id=workflow_id if activate else session.active_document_id,
                ),
                workflow_id,
                name=name,
            )
        logger.info(f"[{self.session_id}] Workflow created: {name} ({workflow_id})")
        return workflow_id

    def delete_workflow(self, workflow_id: str) -> None:
        """Remove a workflow; the first remaining one becomes active if needed.

        Raises ``LastWorkflowError`` for the only open workflow when
        ``keep_last_workflow`` is set.
        """
        with self._lock:
            session = self._session
            if session.get_workflow(workflow_id) is None:
                logger.debug(f"[{self.session_id}] delete_workflow: {workflow_id} not found")
                return

            remaining = tuple(d for d in session.documents if d.id != workflow_id)
            if not remaining and self._config.keep_last_workflow:
                raise LastWorkflowError(workflow_id)

            active_id = session.active_document_id
            if active_id == workflow_id and remaining:
                active_id = remaining[0].id
                remaining = (remaining[0].model_copy(update={"is_active": True}),) + remaining[1:]

            self._commit(
                "delete_workflow",
                Session(documents=remaining, active_document_id=active_id),
                workflow_id,
            )
        logger.info(f"[{self.session_id}] Workflow deleted: {workflow_id}")

    def set_active_workflow(self, workflow_id: str) -> None:
        with self._lock:
            session = self._session
            if session.get_workflow(workflow_id) is None:
                logger.debug(f"[{self.session_id}] set_active_workflow: {workflow_id} not found")
                return
            documents = tuple(
                d.model_copy(update={"is_active": d.id == workflow_id})
                for d in session.documents
            )
            self._commit(
                "set_active_workflow",
                Session(documents=documents, active_document_id=workflow_id),
                workflow_id,
            )

    def rename_workflow(self, workflow_id: str, name: str) -> None:
        with self._lock:
            doc = self._session.get_workflow(workflow_id)
            if doc is None:
                logger.debug(f"[{self.session_id}] rename_workflow: {workflow_id} not found")
                return
            self._commit(
                "rename_workflow",
                self._replace(doc.model_copy(update={"name": name})),
                workflow_id,
                name=name,
            )

    # ── Nodes ──

    def instantiate_node(
        self,
        workflow_id: str,
        type_id: str,
        position: PositionLike,
    ) -> NodeInstance:
        """Place a new node of ``type_id`` on a workflow.

        Raises ``UnknownNodeType`` or ``UnknownWorkflow``.
        """
        definition = self._catalog.get_type(type_id)
        pos = _as_position(position)
        with self._lock:
            doc = self._require_workflow(workflow_id)
            node = NodeInstance(
                id=self._new_id(type_id, doc.node_ids()),
                type_id=type_id,
                label=definition.name,
                position=pos,
                type_snapshot=definition.model_copy(deep=True),
                input_values=seed_input_values(definition),
                output_values={},
            )
            self._commit(
                "instantiate_node",
                self._replace(doc.model_copy(update={"nodes": doc.nodes + (node,)})),
                workflow_id,
                node_id=node.id,
                type_id=type_id,
            )
        logger.debug(f"[{self.session_id}] Node {node.id} added to {workflow_id} at ({pos.x}, {pos.y})")
        return node

    def move_node(self, workflow_id: str, node_id: str, position: PositionLike) -> None:
        pos = _as_position(position)
        with self._lock:
            doc = self._session.get_workflow(workflow_id)
            node = doc.get_node(node_id) if doc else None
            if node is None:
                logger.debug(f"[{self.session_id}] move_node: {workflow_id}/{node_id} not found")
                return
            self._commit(
                "move_node",
                self._replace(self._replace_node(doc, node.model_copy(update={"position": pos}))),
                workflow_id,
                node_id=node_id,
                x=pos.x,
                y=pos.y,
            )

    def set_node_input_value(
        self,
        workflow_id: str,
        node_id: str,
        port_id: str,
        value: Any,
    ) -> None:
        """Replace one input value. ``value`` is stored unvalidated."""
        with self._lock:
            doc = self._session.get_workflow(workflow_id)
            node = doc.get_node(node_id) if doc else None
            if node is None or node.type_snapshot.get_input(port_id) is None:
                logger.debug(
                    f"[{self.session_id}] set_node_input_value: "
                    f"{workflow_id}/{node_id}.{port_id} not found"
                )
                return
            values = dict(node.input_values)
            values[port_id] = value
            self._commit(
                "set_node_input_value",
                self._replace(self._replace_node(
                    doc, node.model_copy(update={"input_values": frozen_values(values)})
                )),
                workflow_id,
                node_id=node_id,
                port_id=port_id,
            )

    def delete_node(self, workflow_id: str, node_id: str) -> None:
        """Remove a node together with every edge attached to it."""
        with self._lock:
            doc = self._session.get_workflow(workflow_id)
            if doc is None or doc.get_node(node_id) is None:
                logger.debug(f"[{self.session_id}] delete_node: {workflow_id}/{node_id} not found")
                return
            nodes = tuple(n for n in doc.nodes if n.id != node_id)
            edges = tuple(e for e in doc.edges if not e.touches(node_id))
            self._commit(
                "delete_node",
                self._replace(doc.model_copy(update={"nodes": nodes, "edges": edges})),
                workflow_id,
                node_id=node_id,
                removed_edges=len(doc.edges) - len(edges),
            )

    # ── Edges ──

    def connect(
        self,
        workflow_id: str,
        source: str,
        source_port: str,
        target: str,
        target_port: str,
    ) -> EdgeInstance:
        """Add an edge from ``source.source_port`` to ``target.target_port``.

        Self-loops, parallel duplicates and mismatched data types are all
        accepted. Raises ``UnknownWorkflow``, ``UnknownNode`` or
        ``UnknownPort``.
        """
        with self._lock:
            doc = self._require_workflow(workflow_id)
            source_node = doc.get_node(source)
            if source_node is None:
                raise UnknownNode(workflow_id, source)
            target_node = doc.get_node(target)
            if target_node is None:
                raise UnknownNode(workflow_id, target)
            if source_node.type_snapshot.get_output(source_port) is None:
                raise UnknownPort(workflow_id, source, source_port, "output")
            if target_node.type_snapshot.get_input(target_port) is None:
                raise UnknownPort(workflow_id, target, target_port, "input")

            edge = EdgeInstance(
                id=self._new_id("edge", doc.edge_ids()),
                source_node_id=source,
                source_port_id=source_port,
                target_node_id=target,
                target_port_id=target_port,
            )
            self._commit(
                "connect",
                self._replace(doc.model_copy(update={"edges": doc.edges + (edge,)})),
                workflow_id,
                edge_id=edge.id,
            )
        logger.debug(
            f"[{self.session_id}] Edge {edge.id}: {source}.{source_port} -> {target}.{target_port}"
        )
        return edge

    def delete_edge(self, workflow_id: str, edge_id: str) -> None:
        with self._lock:
            doc = self._session.get_workflow(workflow_id)
            if doc is None or doc.get_edge(edge_id) is None:
                logger.debug(f"[{self.session_id}] delete_edge: {workflow_id}/{edge_id} not found")
                return
            edges = tuple(e for e in doc.edges if e.id != edge_id)
            self._commit(
                "delete_edge",
                self._replace(doc.model_copy(update={"edges": edges})),
                workflow_id,
                edge_id=edge_id,
            )

    # ── Internals ──

    def _new_id(self, prefix: str, taken: Collection[str]) -> str:
        length = self._config.id_suffix_length
        while True:
            candidate = f"{prefix}-{uuid.uuid4().hex[:length]}"
            if candidate not in taken:
                return candidate

    def _require_workflow(self, workflow_id: str) -> WorkflowDocument:
        doc = self._session.get_workflow(workflow_id)
        if doc is None:
            raise UnknownWorkflow(workflow_id)
        return doc

    def _replace(self, doc: WorkflowDocument) -> Session:
        """A copy of the current session with ``doc`` swapped in by id."""
        documents = tuple(doc if d.id == doc.id else d for d in self._session.documents)
        return self._session.model_copy(update={"documents": documents})

    @staticmethod
    def _replace_node(doc: WorkflowDocument, node: NodeInstance) -> WorkflowDocument:
        nodes = tuple(node if n.id == node.id else n for n in doc.nodes)
        return doc.model_copy(update={"nodes": nodes})

    def _commit(self, operation: str, session: Session, workflow_id: Optional[str], **detail: Any) -> None:
        # Caller holds the lock
        self._session = session
        self._session_log.log(operation, workflow_id, **detail)
        for listener in list(self._listeners):
            try:
                listener(operation, session)
            except Exception:
                logger.exception(f"[{self.session_id}] Listener failed after {operation}")


# ── Singleton ──

_store_instance: Optional[WorkflowStore] = None


def get_workflow_store() -> WorkflowStore:
    """Return the global WorkflowStore singleton."""
    global _store_instance
    if _store_instance is None:
        _store_instance = WorkflowStore()
    return _store_instance
