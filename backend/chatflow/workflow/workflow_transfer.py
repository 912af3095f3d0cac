"""
Workflow Transfer - schema-versioned export and import of a workflow.

The exported file is the one interchange format shared between
instances::

    {
      "schemaVersion": "1.0",
      "workflow": {"id", "name", "exportedAt"},
      "nodes": [{"id", "type", "label", "config", "position"}],
      "edges": [{"id", "source", "target", "sourceHandle", "targetHandle"}],
      "entryNodeId": "..." | null
    }

Import is all-or-nothing: the incoming graph is assembled and checked
on the side, and the destination is only swapped once every invariant
holds. Node ids that already exist in the destination are remapped
to fresh ids, and edges and the entry node follow the mapping.
"""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from logging import getLogger
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from chatflow.workflow.errors import InvalidFormat
from chatflow.workflow.workflow_model import WorkflowEdge, WorkflowGraph, WorkflowNode

logger = getLogger(__name__)

SCHEMA_VERSION = "1.0"
SUPPORTED_MAJOR_VERSIONS = (1,)
REQUIRED_KEYS = ("schemaVersion", "nodes", "edges")


@dataclass
class ImportResult:
    """Outcome of a successful import."""
    workflow: Dict[str, Any]
    schema_version: str
    id_map: Dict[str, str] = field(default_factory=dict)
    edge_id_map: Dict[str, str] = field(default_factory=dict)
    node_count: int = 0
    edge_count: int = 0
    entry_node_id: Optional[str] = None


# ====================================================================
# Export
# ====================================================================


def export_workflow(
    graph: WorkflowGraph,
    workflow_id: Any,
    name: str,
    exported_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Snapshot ``graph`` and its workflow metadata as a dict."""
    stamp = exported_at or datetime.now(timezone.utc)
    return {
        "schemaVersion": SCHEMA_VERSION,
        "workflow": {
            "id": workflow_id,
            "name": name,
            "exportedAt": stamp.isoformat(),
        },
        "nodes": [
            {
                "id": n.id,
                "type": n.node_type,
                "label": n.label,
                "config": copy.deepcopy(n.config),
                "position": dict(n.position),
            }
            for n in graph.nodes
        ],
        "edges": [
            {
                "id": e.id,
                "source": e.source,
                "target": e.target,
                "sourceHandle": e.source_handle,
                "targetHandle": e.target_handle,
            }
            for e in graph.edges
        ],
        "entryNodeId": graph.entry_node_id,
    }


def dumps_workflow(
    graph: WorkflowGraph,
    workflow_id: Any,
    name: str,
    indent: int = 2,
) -> str:
    """Export as JSON text."""
    return json.dumps(
        export_workflow(graph, workflow_id, name),
        indent=indent,
        ensure_ascii=False,
    )


# ====================================================================
# Import
# ====================================================================


def import_workflow(
    graph: WorkflowGraph,
    payload: Union[str, bytes, Dict[str, Any]],
    merge: bool = False,
) -> ImportResult:
    """Load an exported workflow into ``graph``.

    By default the destination's nodes and edges are replaced. With
    ``merge=True`` the imported nodes and edges are added next to the
    existing ones, and the entry node only changes when the file
    names one.

    Raises:
        InvalidFormat: the payload is rejected; ``graph`` is unchanged.
    """
    data = _parse_payload(payload)
    version = _check_version(data["schemaVersion"])

    nodes = _parse_nodes(data["nodes"])
    edges = _parse_edges(data["edges"])
    entry = data.get("entryNodeId")
    if entry is not None and not isinstance(entry, str):
        raise InvalidFormat("'entryNodeId' must be a string or null")

    # Restored if the candidate is rejected.
    saved_seq = (graph._node_seq, graph._edge_seq)

    # ── Remap node ids that collide with the destination ──
    existing = set(graph.node_ids())
    incoming = {n.id for n in nodes}
    id_map: Dict[str, str] = {}
    for node in nodes:
        if node.id in existing:
            new_id = graph.fresh_node_id(
                node.node_type, reserved=incoming | set(id_map.values()),
            )
            id_map[node.id] = new_id
            node.id = new_id

    # ── Remap edge ids that collide with edges kept by a merge ──
    kept_edge_ids = {e.id for e in graph.edges} if merge else set()
    incoming_edges = {e.id for e in edges}
    edge_id_map: Dict[str, str] = {}
    for edge in edges:
        edge.source = id_map.get(edge.source, edge.source)
        edge.target = id_map.get(edge.target, edge.target)
        if edge.id in kept_edge_ids:
            new_id = graph.fresh_edge_id(
                reserved=incoming_edges | set(edge_id_map.values()),
            )
            edge_id_map[edge.id] = new_id
            edge.id = new_id

    if entry is not None:
        entry = id_map.get(entry, entry)

    # ── Assemble on the side, then swap ──
    if merge:
        candidate = WorkflowGraph(
            nodes=list(graph.nodes) + nodes,
            edges=list(graph.edges) + edges,
            entry_node_id=entry if entry is not None else graph.entry_node_id,
        )
    else:
        candidate = WorkflowGraph(nodes=nodes, edges=edges, entry_node_id=entry)
    candidate._registry = graph.registry

    errors = candidate.validate_invariants()
    if errors:
        logger.warning(f"Import rejected with {len(errors)} errors: {errors}")
        graph._node_seq, graph._edge_seq = saved_seq
        raise InvalidFormat("; ".join(errors[:5]))

    graph.replace_with(candidate)

    workflow_meta = data.get("workflow")
    result = ImportResult(
        workflow=dict(workflow_meta) if isinstance(workflow_meta, dict) else {},
        schema_version=version,
        id_map=id_map,
        edge_id_map=edge_id_map,
        node_count=len(nodes),
        edge_count=len(edges),
        entry_node_id=graph.entry_node_id,
    )
    logger.info(
        f"Workflow imported ({'merge' if merge else 'replace'}): "
        f"{result.node_count} nodes, {result.edge_count} edges, "
        f"{len(id_map)} ids remapped"
    )
    return result


# ── Internals ──


def _parse_payload(payload: Union[str, bytes, Dict[str, Any]]) -> Dict[str, Any]:
    if isinstance(payload, (str, bytes, bytearray)):
        try:
            data = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise InvalidFormat(f"malformed JSON ({exc})") from exc
    else:
        data = payload

    if not isinstance(data, dict):
        raise InvalidFormat("top level must be a JSON object")
    for key in REQUIRED_KEYS:
        if key not in data:
            raise InvalidFormat(f"missing required key '{key}'")
    if not isinstance(data["nodes"], list):
        raise InvalidFormat("'nodes' must be a list")
    if not isinstance(data["edges"], list):
        raise InvalidFormat("'edges' must be a list")
    return data


def _check_version(raw: Any) -> str:
    version = str(raw)
    try:
        major = int(version.split(".")[0])
    except ValueError as exc:
        raise InvalidFormat(f"unreadable schemaVersion '{version}'") from exc
    if major not in SUPPORTED_MAJOR_VERSIONS:
        raise InvalidFormat(f"unsupported schemaVersion '{version}'")
    return version


def _parse_nodes(raw_nodes: List[Any]) -> List[WorkflowNode]:
    nodes: List[WorkflowNode] = []
    seen = set()
    for index, raw in enumerate(raw_nodes):
        if not isinstance(raw, dict):
            raise InvalidFormat(f"node #{index} is not an object")
        raw = _flatten_legacy_node(raw)
        try:
            node = WorkflowNode.model_validate(raw)
        except ValidationError as exc:
            raise InvalidFormat(f"node #{index}: {exc.errors()[0]['msg']}") from exc
        if node.id in seen:
            raise InvalidFormat(f"duplicate node id '{node.id}'")
        seen.add(node.id)
        node.config = copy.deepcopy(node.config)
        nodes.append(node)
    return nodes


def _flatten_legacy_node(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Accept the canvas shape ``{id, position, data: {label, type, config}}``."""
    data = raw.get("data")
    if not isinstance(data, dict):
        return raw
    flat = {k: v for k, v in raw.items() if k != "data"}
    if data.get("type"):
        flat["type"] = data["type"]
    flat.setdefault("label", data.get("label", ""))
    flat.setdefault("config", data.get("config") or {})
    return flat


def _parse_edges(raw_edges: List[Any]) -> List[WorkflowEdge]:
    edges: List[WorkflowEdge] = []
    seen = set()
    for index, raw in enumerate(raw_edges):
        if not isinstance(raw, dict):
            raise InvalidFormat(f"edge #{index} is not an object")
        try:
            edge = WorkflowEdge.model_validate(raw)
        except ValidationError as exc:
            raise InvalidFormat(f"edge #{index}: {exc.errors()[0]['msg']}") from exc
        if edge.id in seen:
            raise InvalidFormat(f"duplicate edge id '{edge.id}'")
        seen.add(edge.id)
        edges.append(edge)
    return edges
