"""
Workflow Data Models: node instances, edges, documents and the session.

All models are frozen snapshots and node value maps are read-only
proxies. The store never edits one in place; each mutation builds
replacement values with ``model_copy(update=...)`` and swaps in a whole
new ``Session``.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from bioflow.workflow.node_catalog import NodeTypeDefinition

# Input value markers for ports nobody has filled in yet
UNSET_REQUIRED: str = ""
UNSET_OPTIONAL = None


class Position(BaseModel):
    """Canvas coordinates of a node's top-left corner."""

    model_config = ConfigDict(frozen=True)

    x: float = 0.0
    y: float = 0.0


def frozen_values(values: Mapping[str, Any]) -> Mapping[str, Any]:
    """Read-only copy of a port value map."""
    return MappingProxyType(dict(values))


def seed_input_values(definition: NodeTypeDefinition) -> Mapping[str, Any]:
    """Initial ``input_values`` for a fresh instance of ``definition``."""
    return frozen_values({
        port.id: UNSET_REQUIRED if port.required else UNSET_OPTIONAL
        for port in definition.inputs
    })


class NodeInstance(BaseModel):
    """A single node placed on the workflow canvas.

    ``type_snapshot`` is a private copy of the catalog definition taken
    at creation time. ``output_values`` stays empty until an execution
    layer fills it.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    type_id: str
    label: str = ""
    position: Position = Field(default_factory=Position)
    type_snapshot: NodeTypeDefinition
    input_values: Mapping[str, Any] = Field(default_factory=dict, validate_default=True)
    output_values: Mapping[str, Any] = Field(default_factory=dict, validate_default=True)

    @field_validator("input_values", "output_values", mode="after")
    @classmethod
    def _freeze_values(cls, values: Mapping[str, Any]) -> Mapping[str, Any]:
        return frozen_values(values)

    @field_serializer("input_values", "output_values")
    def _dump_values(self, values: Mapping[str, Any]) -> Dict[str, Any]:
        return dict(values)


class EdgeInstance(BaseModel):
    """A directed connection from an output port to an input port."""

    model_config = ConfigDict(frozen=True)

    id: str
    source_node_id: str
    source_port_id: str
    target_node_id: str
    target_port_id: str

    def touches(self, node_id: str) -> bool:
        """True if either endpoint is ``node_id``."""
        return self.source_node_id == node_id or self.target_node_id == node_id


class WorkflowDocument(BaseModel):
    """One editable graph, shown as a tab in the editor."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = "Untitled Workflow"
    nodes: Tuple[NodeInstance, ...] = ()
    edges: Tuple[EdgeInstance, ...] = ()
    is_active: bool = False

    def get_node(self, node_id: str) -> Optional[NodeInstance]:
        """Find a node instance by ID."""
        for n in self.nodes:
            if n.id == node_id:
                return n
        return None

    def get_edge(self, edge_id: str) -> Optional[EdgeInstance]:
        for e in self.edges:
            if e.id == edge_id:
                return e
        return None

    def get_edges_from(self, node_id: str) -> List[EdgeInstance]:
        """Get all edges originating from a node."""
        return [e for e in self.edges if e.source_node_id == node_id]

    def get_edges_to(self, node_id: str) -> List[EdgeInstance]:
        """Get all edges pointing to a node."""
        return [e for e in self.edges if e.target_node_id == node_id]

    def node_ids(self) -> Set[str]:
        return {n.id for n in self.nodes}

    def edge_ids(self) -> Set[str]:
        return {e.id for e in self.edges}

    def validate_graph(self) -> List[str]:
        """Check the structural invariants of the document.

        Returns a list of error messages (empty = valid). Port type
        compatibility is not checked here; see ``workflow_inspector``.
        """
        errors: List[str] = []

        if len(self.node_ids()) != len(self.nodes):
            errors.append("Node ids are not unique.")
        if len(self.edge_ids()) != len(self.edges):
            errors.append("Edge ids are not unique.")

        for edge in self.edges:
            source = self.get_node(edge.source_node_id)
            target = self.get_node(edge.target_node_id)
            if source is None:
                errors.append(f"Edge {edge.id} references unknown source node: {edge.source_node_id}")
            elif source.type_snapshot.get_output(edge.source_port_id) is None:
                errors.append(f"Edge {edge.id} references unknown output port: {edge.source_port_id}")
            if target is None:
                errors.append(f"Edge {edge.id} references unknown target node: {edge.target_node_id}")
            elif target.type_snapshot.get_input(edge.target_port_id) is None:
                errors.append(f"Edge {edge.id} references unknown input port: {edge.target_port_id}")

        return errors


class Session(BaseModel):
    """All open workflow documents plus which one is active."""

    model_config = ConfigDict(frozen=True)

    documents: Tuple[WorkflowDocument, ...] = ()
    active_document_id: str = ""

    def get_workflow(self, workflow_id: str) -> Optional[WorkflowDocument]:
        for doc in self.documents:
            if doc.id == workflow_id:
                return doc
        return None

    def current_workflow(self) -> Optional[WorkflowDocument]:
        """The document referenced by ``active_document_id``, if any."""
        return self.get_workflow(self.active_document_id)

    def workflow_ids(self) -> List[str]:
        return [doc.id for doc in self.documents]

    def validate_session(self) -> List[str]:
        """Check the active-flag invariant. Returns error messages."""
        errors: List[str] = []
        if not self.documents:
            return errors
        active = [doc.id for doc in self.documents if doc.is_active]
        if len(active) != 1:
            errors.append(f"Expected exactly one active workflow, found {len(active)}.")
        elif active[0] != self.active_document_id:
            errors.append(
                f"Active flag is on {active[0]} but active id is {self.active_document_id}."
            )
        if self.get_workflow(self.active_document_id) is None:
            errors.append(f"Active id references missing workflow: {self.active_document_id}")
        return errors
