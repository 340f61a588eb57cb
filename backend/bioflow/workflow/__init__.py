"""
Workflow Editor Core: session model for the visual workflow builder.

Manages the open workflow documents, their nodes and edges, and the
rules for instantiating, connecting, moving and removing nodes.

Architecture:
    node_catalog: read-only table of placeable node types
    workflow_model: frozen NodeInstance / EdgeInstance / document / session
    workflow_store: owner of the session and all mutations
    canvas_events: drag, connect and change-event adapters
    workflow_inspector: strict checks that ``connect`` does not enforce
    templates: starter workflows
"""

from bioflow.workflow.errors import (
    LastWorkflowError,
    MalformedInstantiationPayload,
    UnknownEdge,
    UnknownNode,
    UnknownNodeType,
    UnknownPort,
    UnknownWorkflow,
    WorkflowError,
)
from bioflow.workflow.node_catalog import (
    BUILT_IN_NODE_TYPES,
    NodeCatalog,
    NodeCategory,
    NodePortSpec,
    NodeTypeDefinition,
    get_node_catalog,
)
from bioflow.workflow.workflow_model import (
    UNSET_OPTIONAL,
    UNSET_REQUIRED,
    EdgeInstance,
    NodeInstance,
    Position,
    Session,
    WorkflowDocument,
)
from bioflow.workflow.workflow_store import WorkflowStore, get_workflow_store
from bioflow.workflow.canvas_events import (
    CanvasBounds,
    Connection,
    EdgeChange,
    NodeChange,
    apply_edge_changes,
    apply_node_changes,
    encode_drag_payload,
    handle_connect,
    handle_drop,
    parse_drag_payload,
)
from bioflow.workflow.workflow_inspector import inspect_workflow, validate_connection
from bioflow.workflow.templates import TEMPLATES, create_from_template

__all__ = [
    "WorkflowError",
    "UnknownWorkflow",
    "UnknownNode",
    "UnknownEdge",
    "UnknownNodeType",
    "UnknownPort",
    "MalformedInstantiationPayload",
    "LastWorkflowError",
    "BUILT_IN_NODE_TYPES",
    "NodeCatalog",
    "NodeCategory",
    "NodePortSpec",
    "NodeTypeDefinition",
    "get_node_catalog",
    "UNSET_OPTIONAL",
    "UNSET_REQUIRED",
    "EdgeInstance",
    "NodeInstance",
    "Position",
    "Session",
    "WorkflowDocument",
    "WorkflowStore",
    "get_workflow_store",
    "CanvasBounds",
    "Connection",
    "EdgeChange",
    "NodeChange",
    "apply_edge_changes",
    "apply_node_changes",
    "encode_drag_payload",
    "handle_connect",
    "handle_drop",
    "parse_drag_payload",
    "inspect_workflow",
    "validate_connection",
    "TEMPLATES",
    "create_from_template",
]
