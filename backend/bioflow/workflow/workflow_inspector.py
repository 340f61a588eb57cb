"""
Workflow Inspector: strict, read-only checks over a workflow document.

``WorkflowStore.connect`` accepts self-loops, parallel duplicates and
mismatched port data types. This module is the separate layer that
reports them, together with missing required inputs, so a caller that
wants stricter semantics can check before (``validate_connection``) or
after (``inspect_workflow``) editing.
"""

from __future__ import annotations

from collections import Counter
from logging import getLogger
from typing import Any, Dict, List, Optional, Tuple

from bioflow.workflow.node_catalog import NodeCatalog
from bioflow.workflow.workflow_model import (
    UNSET_REQUIRED,
    EdgeInstance,
    NodeInstance,
    WorkflowDocument,
)

logger = getLogger(__name__)

# Issue kinds
SELF_LOOP = "self_loop"
DUPLICATE_EDGE = "duplicate_edge"
TYPE_MISMATCH = "type_mismatch"
DANGLING_EDGE = "dangling_edge"
UNKNOWN_PORT = "unknown_port"
MISSING_INPUT = "missing_input"
UNKNOWN_TYPE = "unknown_type"


# ====================================================================
# Public API
# ====================================================================


def inspect_workflow(
    workflow: WorkflowDocument,
    catalog: Optional[NodeCatalog] = None,
) -> Dict[str, Any]:
    """Inspect a workflow and produce a structured report.

    Returns a dict containing:
        - ``summary`` : counts and overall validity
        - ``nodes``   : per-node port detail
        - ``edges``   : per-edge endpoint types and compatibility
        - ``issues``  : list of ``{"kind", "message", ...}`` records
    """
    issues: List[Dict[str, Any]] = []
    instance_map: Dict[str, NodeInstance] = {n.id: n for n in workflow.nodes}

    edge_details = [_edge_detail(edge, instance_map, issues) for edge in workflow.edges]
    _check_duplicates(workflow.edges, issues)
    node_details = [_node_detail(node, workflow, issues) for node in workflow.nodes]

    if catalog is not None:
        for node in workflow.nodes:
            if node.type_id not in catalog:
                issues.append({
                    "kind": UNKNOWN_TYPE,
                    "node_id": node.id,
                    "message": f"Node {node.id} uses type {node.type_id} which is not in the catalog.",
                })

    by_category = Counter(n.type_snapshot.category.value for n in workflow.nodes)
    summary = {
        "workflow_id": workflow.id,
        "name": workflow.name,
        "node_count": len(workflow.nodes),
        "edge_count": len(workflow.edges),
        "nodes_by_category": dict(by_category),
        "issue_count": len(issues),
        "valid": not issues,
    }
    if issues:
        logger.debug(f"Workflow {workflow.id}: {len(issues)} issue(s) found")

    return {
        "summary": summary,
        "nodes": node_details,
        "edges": edge_details,
        "issues": issues,
    }


def validate_connection(
    workflow: WorkflowDocument,
    source: str,
    source_port: str,
    target: str,
    target_port: str,
) -> List[str]:
    """Check a prospective edge without adding it.

    Returns a list of problems (empty = the strict layer would accept it).
    """
    problems: List[str] = []
    source_node = workflow.get_node(source)
    target_node = workflow.get_node(target)
    if source_node is None:
        problems.append(f"Unknown source node: {source}")
    if target_node is None:
        problems.append(f"Unknown target node: {target}")
    if source_node is None or target_node is None:
        return problems

    out_spec = source_node.type_snapshot.get_output(source_port)
    in_spec = target_node.type_snapshot.get_input(target_port)
    if out_spec is None:
        problems.append(f"Node {source} has no output port {source_port}")
    if in_spec is None:
        problems.append(f"Node {target} has no input port {target_port}")

    if source == target:
        problems.append(f"Node {source} cannot connect to itself")
    if out_spec and in_spec and out_spec.data_type != in_spec.data_type:
        problems.append(
            f"Type mismatch: {source}.{source_port} ({out_spec.data_type}) "
            f"-> {target}.{target_port} ({in_spec.data_type})"
        )
    key = (source, source_port, target, target_port)
    if any(_edge_key(e) == key for e in workflow.edges):
        problems.append(f"Edge {source}.{source_port} -> {target}.{target_port} already exists")
    return problems


# ====================================================================
# Internals
# ====================================================================


def _edge_key(edge: EdgeInstance) -> Tuple[str, str, str, str]:
    return (edge.source_node_id, edge.source_port_id, edge.target_node_id, edge.target_port_id)


def _edge_detail(
    edge: EdgeInstance,
    instance_map: Dict[str, NodeInstance],
    issues: List[Dict[str, Any]],
) -> Dict[str, Any]:
    source = instance_map.get(edge.source_node_id)
    target = instance_map.get(edge.target_node_id)
    source_type = target_type = None

    for node_id, node in ((edge.source_node_id, source), (edge.target_node_id, target)):
        if node is None:
            issues.append({
                "kind": DANGLING_EDGE,
                "edge_id": edge.id,
                "message": f"Edge {edge.id} references missing node {node_id}.",
            })

    if source is not None:
        spec = source.type_snapshot.get_output(edge.source_port_id)
        if spec is None:
            issues.append({
                "kind": UNKNOWN_PORT,
                "edge_id": edge.id,
                "message": f"Edge {edge.id}: {source.id} has no output port {edge.source_port_id}.",
            })
        else:
            source_type = spec.data_type
    if target is not None:
        spec = target.type_snapshot.get_input(edge.target_port_id)
        if spec is None:
            issues.append({
                "kind": UNKNOWN_PORT,
                "edge_id": edge.id,
                "message": f"Edge {edge.id}: {target.id} has no input port {edge.target_port_id}.",
            })
        else:
            target_type = spec.data_type

    if edge.source_node_id == edge.target_node_id:
        issues.append({
            "kind": SELF_LOOP,
            "edge_id": edge.id,
            "message": f"Edge {edge.id} connects node {edge.source_node_id} to itself.",
        })

    compatible = source_type is not None and source_type == target_type
    if source_type is not None and target_type is not None and not compatible:
        issues.append({
            "kind": TYPE_MISMATCH,
            "edge_id": edge.id,
            "message": (
                f"Edge {edge.id}: {edge.source_port_id} ({source_type}) "
                f"feeds {edge.target_port_id} ({target_type})."
            ),
        })

    return {
        "id": edge.id,
        "source": f"{edge.source_node_id}.{edge.source_port_id}",
        "target": f"{edge.target_node_id}.{edge.target_port_id}",
        "source_type": source_type,
        "target_type": target_type,
        "compatible": compatible,
    }


def _check_duplicates(edges: Tuple[EdgeInstance, ...], issues: List[Dict[str, Any]]) -> None:
    seen: Dict[Tuple[str, str, str, str], str] = {}
    for edge in edges:
        key = _edge_key(edge)
        if key in seen:
            issues.append({
                "kind": DUPLICATE_EDGE,
                "edge_id": edge.id,
                "message": f"Edge {edge.id} duplicates {seen[key]}.",
            })
        else:
            seen[key] = edge.id


def _node_detail(
    node: NodeInstance,
    workflow: WorkflowDocument,
    issues: List[Dict[str, Any]],
) -> Dict[str, Any]:
    incoming = workflow.get_edges_to(node.id)
    outgoing = workflow.get_edges_from(node.id)

    inputs = []
    for port in node.type_snapshot.inputs:
        sources = [
            f"{e.source_node_id}.{e.source_port_id}"
            for e in incoming if e.target_port_id == port.id
        ]
        value = node.input_values.get(port.id)
        if port.required and not sources and value == UNSET_REQUIRED:
            issues.append({
                "kind": MISSING_INPUT,
                "node_id": node.id,
                "message": f"Node {node.id}: required input {port.id} is neither set nor connected.",
            })
        inputs.append({
            "port": port.id,
            "data_type": port.data_type,
            "required": port.required,
            "value": value,
            "connected_from": sources,
        })

    outputs = [
        {
            "port": port.id,
            "data_type": port.data_type,
            "connected_to": [
                f"{e.target_node_id}.{e.target_port_id}"
                for e in outgoing if e.source_port_id == port.id
            ],
        }
        for port in node.type_snapshot.outputs
    ]

    return {
        "id": node.id,
        "type_id": node.type_id,
        "label": node.label,
        "category": node.type_snapshot.category.value,
        "position": {"x": node.position.x, "y": node.position.y},
        "inputs": inputs,
        "outputs": outputs,
    }
