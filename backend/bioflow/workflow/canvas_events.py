"""
Canvas Protocol Adapters: translate canvas gestures into store calls.

Three inbound protocols:

* drag-instantiate: the palette serializes ``{"type", "nodeType"}`` at
  drag start; on drop the canvas passes the raw payload and pointer
  coordinates here.
* connect: a finished port-to-port drag arrives as a ``Connection``.
* change events: node/edge change records from the canvas, applied in
  order and independently of each other.
"""

from __future__ import annotations

import json
from logging import getLogger
from typing import Any, Iterable, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from bioflow.workflow.errors import MalformedInstantiationPayload
from bioflow.workflow.node_catalog import NodeTypeDefinition
from bioflow.workflow.workflow_model import EdgeInstance, NodeInstance, Position
from bioflow.workflow.workflow_store import WorkflowStore

logger = getLogger(__name__)

DRAG_MIME_TYPE = "application/reactflow"


# ============================================================================
# Drag & drop
# ============================================================================


class DragPayload(BaseModel):
    """Decoded palette drag payload."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type_id: str = Field(alias="type", min_length=1)
    type_snapshot: NodeTypeDefinition = Field(alias="nodeType")


class CanvasBounds(BaseModel):
    """Top-left corner of the canvas in client coordinates."""

    model_config = ConfigDict(frozen=True)

    left: float = 0.0
    top: float = 0.0


def encode_drag_payload(definition: NodeTypeDefinition) -> str:
    """Serialize a catalog entry the way the palette hands it to the canvas."""
    return json.dumps({
        "type": definition.id,
        "nodeType": definition.model_dump(mode="json", by_alias=True),
    })


def parse_drag_payload(raw: Union[str, bytes, None]) -> DragPayload:
    """Decode a drop payload or raise ``MalformedInstantiationPayload``."""
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            raise MalformedInstantiationPayload("payload is not UTF-8") from None
    if raw is not None and not isinstance(raw, str):
        raise MalformedInstantiationPayload(
            f"payload must be str or bytes, not {type(raw).__name__}"
        )
    if not raw or not raw.strip():
        raise MalformedInstantiationPayload("empty payload", raw)

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedInstantiationPayload(f"invalid JSON ({e.msg})", raw) from None
    if not isinstance(data, dict):
        raise MalformedInstantiationPayload("payload is not a JSON object", raw)

    try:
        payload = DragPayload.model_validate(data)
    except ValidationError as e:
        raise MalformedInstantiationPayload(
            f"{e.error_count()} schema error(s): {e.errors()[0]['msg']}", raw
        ) from None

    if payload.type_snapshot.id != payload.type_id:
        raise MalformedInstantiationPayload(
            f"type {payload.type_id!r} does not match nodeType.id {payload.type_snapshot.id!r}",
            raw,
        )
    return payload


def drop_position(client_x: float, client_y: float, bounds: Optional[CanvasBounds] = None) -> Position:
    """Pointer coordinates relative to the canvas origin."""
    b = bounds or CanvasBounds()
    return Position(x=client_x - b.left, y=client_y - b.top)


def handle_drop(
    store: WorkflowStore,
    workflow_id: str,
    raw_payload: Union[str, bytes, None],
    client_x: float,
    client_y: float,
    bounds: Optional[CanvasBounds] = None,
) -> NodeInstance:
    """Instantiate the dropped node type at the pointer position.

    The payload is fully decoded before the store is touched, so a
    malformed drop leaves the session unchanged.
    """
    try:
        payload = parse_drag_payload(raw_payload)
    except MalformedInstantiationPayload as e:
        logger.warning(f"Rejected drop on {workflow_id}: {e.reason}")
        raise
    return store.instantiate_node(
        workflow_id,
        payload.type_id,
        drop_position(client_x, client_y, bounds),
    )


# ============================================================================
# Connect
# ============================================================================


class Connection(BaseModel):
    """A completed drag between two ports."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    source: str
    source_handle: str = Field(alias="sourceHandle")
    target: str
    target_handle: str = Field(alias="targetHandle")


def handle_connect(
    store: WorkflowStore,
    workflow_id: str,
    connection: Union[Connection, Mapping[str, Any]],
) -> EdgeInstance:
    """Forward a connection verbatim to ``WorkflowStore.connect``."""
    if not isinstance(connection, Connection):
        connection = Connection.model_validate(connection)
    return store.connect(
        workflow_id,
        connection.source,
        connection.source_handle,
        connection.target,
        connection.target_handle,
    )


# ============================================================================
# Change events
# ============================================================================


class NodeChange(BaseModel):
    """One node change record reported by the canvas.

    ``position`` changes without coordinates (drag still in progress)
    and ``select``/``dimensions`` changes carry no session state.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["position", "remove", "select", "dimensions"]
    id: str
    position: Optional[Position] = None


class EdgeChange(BaseModel):
    """One edge change record reported by the canvas."""

    model_config = ConfigDict(frozen=True)

    type: Literal["remove", "select"]
    id: str


def apply_node_changes(
    store: WorkflowStore,
    workflow_id: str,
    changes: Iterable[Union[NodeChange, Mapping[str, Any]]],
) -> int:
    """Apply node change records in order. Returns how many were applied.

    Each record stands alone: an unparseable record is skipped with a
    warning and does not stop the rest of the batch.
    """
    applied = 0
    for raw in changes:
        try:
            change = raw if isinstance(raw, NodeChange) else NodeChange.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Ignoring malformed node change on {workflow_id}: {e.errors()[0]['msg']}")
            continue

        if change.type == "position" and change.position is not None:
            store.move_node(workflow_id, change.id, change.position)
        elif change.type == "remove":
            store.delete_node(workflow_id, change.id)
        else:
            continue
        applied += 1
    return applied


def apply_edge_changes(
    store: WorkflowStore,
    workflow_id: str,
    changes: Iterable[Union[EdgeChange, Mapping[str, Any]]],
) -> int:
    """Apply edge change records in order. Returns how many were applied."""
    applied = 0
    for raw in changes:
        try:
            change = raw if isinstance(raw, EdgeChange) else EdgeChange.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Ignoring malformed edge change on {workflow_id}: {e.errors()[0]['msg']}")
            continue

        if change.type == "remove":
            store.delete_edge(workflow_id, change.id)
            applied += 1
    return applied
