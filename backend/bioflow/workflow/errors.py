"""
Workflow error taxonomy.

Only create-with-reference failures are raised: an unknown node type,
an unknown target workflow or node, or a malformed drag payload.
"Not found" on delete/rename/move is a no-op inside the store and never
reaches callers.
"""

from __future__ import annotations

from typing import Optional


class WorkflowError(Exception):
    """Base class for every error raised by the workflow core."""


class UnknownWorkflow(WorkflowError, LookupError):
    def __init__(self, workflow_id: str) -> None:
        super().__init__(f"Unknown workflow: {workflow_id}")
        self.workflow_id = workflow_id


class UnknownNode(WorkflowError, LookupError):
    def __init__(self, workflow_id: str, node_id: str) -> None:
        super().__init__(f"Unknown node {node_id} in workflow {workflow_id}")
        self.workflow_id = workflow_id
        self.node_id = node_id


class UnknownEdge(WorkflowError, LookupError):
    def __init__(self, workflow_id: str, edge_id: str) -> None:
        super().__init__(f"Unknown edge {edge_id} in workflow {workflow_id}")
        self.workflow_id = workflow_id
        self.edge_id = edge_id


class UnknownNodeType(WorkflowError, LookupError):
    def __init__(self, type_id: str) -> None:
        super().__init__(f"Unknown node type: {type_id}")
        self.type_id = type_id


class MalformedInstantiationPayload(WorkflowError, ValueError):
    """A drag payload could not be decoded into a node type reference."""

    def __init__(self, reason: str, raw: Optional[str] = None) -> None:
        super().__init__(f"Malformed instantiation payload: {reason}")
        self.reason = reason
        self.raw = raw


class LastWorkflowError(WorkflowError):
    """Deleting the only open workflow would leave the session empty."""

    def __init__(self, workflow_id: str) -> None:
        super().__init__(f"Cannot delete {workflow_id}: it is the last open workflow")
        self.workflow_id = workflow_id


class UnknownPort(WorkflowError, LookupError):
    """A connection names a port missing from the node's type snapshot."""

    def __init__(self, workflow_id: str, node_id: str, port_id: str, direction: str) -> None:
        super().__init__(
            f"Node {node_id} in workflow {workflow_id} has no {direction} port {port_id}"
        )
        self.workflow_id = workflow_id
        self.node_id = node_id
        self.port_id = port_id
        self.direction = direction
