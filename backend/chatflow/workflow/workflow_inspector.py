"""
Workflow Inspector - a structured report on one chatbot graph.

Produces what the editor's side panel shows before a workflow is
switched on:

* Per-node detail: kind, output slots and where each slot leads
* Per-edge detail with resolved labels
* Summary counts and the estimated token cost of one full run
* Validation: structural ``errors`` (the graph cannot be saved) and
  publish-readiness ``warnings`` (it can be saved, but will not
  behave well once live)
"""

from __future__ import annotations

from logging import getLogger
from typing import Any, Dict, List, Optional, Set

from chatflow.workflow.errors import InvalidNodeConfig
from chatflow.workflow.nodes.base import NodeKind, NodeRegistry
from chatflow.workflow.workflow_model import WorkflowGraph, same_handle

logger = getLogger(__name__)


# ====================================================================
# Public API
# ====================================================================


def inspect_workflow(
    graph: WorkflowGraph,
    registry: Optional[NodeRegistry] = None,
) -> Dict[str, Any]:
    """Inspect a workflow graph.

    Returns a dict containing:
        - ``nodes``      : Per-node detail list
        - ``edges``      : Per-edge detail list
        - ``summary``    : High-level stats
        - ``validation`` : ``valid``, ``errors`` and ``warnings``
    """
    reg = registry or graph.registry
    errors = graph.validate_invariants()

    node_details = _build_node_details(graph, reg)
    edge_details = _build_edge_details(graph)
    warnings = _collect_warnings(graph, node_details)

    kinds = [d["kind"] for d in node_details]
    token_cost = sum(d["token_cost"] for d in node_details)

    if warnings:
        logger.debug(f"Inspection found {len(warnings)} warnings")

    return {
        "nodes": node_details,
        "edges": edge_details,
        "summary": {
            "total_nodes": len(graph.nodes),
            "total_edges": len(graph.edges),
            "trigger_nodes": kinds.count(NodeKind.TRIGGER.value),
            "interactive_nodes": kinds.count(NodeKind.INTERACTIVE.value),
            "terminal_nodes": kinds.count(NodeKind.TERMINAL.value),
            "entry_node_id": graph.entry_node_id,
            "estimated_token_cost": token_cost,
            "is_valid": len(errors) == 0,
        },
        "validation": {
            "valid": len(errors) == 0,
            "errors": errors,
            "warnings": warnings,
        },
    }


# ====================================================================
# Node / edge detail builders
# ====================================================================


def _build_node_details(graph: WorkflowGraph, reg: NodeRegistry) -> List[Dict[str, Any]]:
    details = []
    for node in graph.nodes:
        base = reg.get(node.node_type)
        if base is None:
            details.append({
                "id": node.id,
                "label": node.label,
                "node_type": node.node_type,
                "kind": "unknown",
                "token_cost": 0,
                "is_entry": node.id == graph.entry_node_id,
                "ports": [],
                "content_warnings": [],
            })
            continue

        try:
            ports = base.get_output_ports(node.config)
            content = base.parse_config(node.config).content_warnings()
        except InvalidNodeConfig as exc:
            ports = []
            content = [str(exc)]

        outgoing = graph.get_edges_from(node.id)
        port_details = []
        for port in ports:
            targets = [
                {"edge_id": e.id, "target_id": e.target, "target_label": _label_of(graph, e.target)}
                for e in outgoing
                if same_handle(e.source_handle, port.id)
            ]
            port_details.append({
                "id": port.id,
                "label": port.label,
                "group": port.group,
                "targets": targets,
            })

        details.append({
            "id": node.id,
            "label": node.label or base.label,
            "node_type": node.node_type,
            "kind": base.kind.value,
            "token_cost": base.token_cost,
            "is_entry": node.id == graph.entry_node_id,
            "ports": port_details,
            "content_warnings": content,
        })
    return details


def _build_edge_details(graph: WorkflowGraph) -> List[Dict[str, Any]]:
    return [
        {
            "id": e.id,
            "source": e.source,
            "source_label": _label_of(graph, e.source),
            "source_handle": e.source_handle,
            "target": e.target,
            "target_label": _label_of(graph, e.target),
        }
        for e in graph.edges
    ]


def _label_of(graph: WorkflowGraph, node_id: str) -> str:
    node = graph.get_node(node_id)
    return node.label if node else node_id


# ====================================================================
# Publish-readiness warnings
# ====================================================================


def _collect_warnings(
    graph: WorkflowGraph,
    node_details: List[Dict[str, Any]],
) -> List[str]:
    warnings: List[str] = []
    if not graph.nodes:
        return ["Workflow is empty"]

    triggers = [d["id"] for d in node_details if d["kind"] == NodeKind.TRIGGER.value]
    if not triggers:
        warnings.append("No trigger node: the workflow will never start")
    if graph.entry_node_id is None:
        warnings.append("No entry node set")
    elif triggers and graph.entry_node_id not in _reachable(graph, triggers):
        warnings.append(f"Entry node {graph.entry_node_id} is not reachable from any trigger")

    touched: Set[str] = set()
    for e in graph.edges:
        touched.add(e.source)
        touched.add(e.target)

    for d in node_details:
        name = f"{d['label']} ({d['id']})"
        for problem in d["content_warnings"]:
            warnings.append(f"{name}: {problem}")
        if d["id"] not in touched and len(graph.nodes) > 1:
            warnings.append(f"{name} is not connected to anything")
        for port in d["ports"]:
            slot = port["id"] or "default"
            if not port["targets"] and d["kind"] == NodeKind.INTERACTIVE.value:
                warnings.append(f"{name}: output '{slot}' is not connected")
            elif len(port["targets"]) > 1:
                warnings.append(
                    f"{name}: output '{slot}' fans out to {len(port['targets'])} nodes"
                )
    return warnings


def _reachable(graph: WorkflowGraph, roots: List[str]) -> Set[str]:
    seen: Set[str] = set(roots)
    stack = list(roots)
    while stack:
        current = stack.pop()
        for e in graph.get_edges_from(current):
            if e.target not in seen:
                seen.add(e.target)
                stack.append(e.target)
    return seen
