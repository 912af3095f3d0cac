"""
Workflow Data Models - nodes, edges and the chatbot graph.

``WorkflowGraph`` owns the node and edge collections of one chatbot
workflow and enforces the structural invariants on every mutation:

* node ids and edge ids are unique
* every node type is registered in the node catalog
* every edge references existing nodes, and its ``source_handle``
  names an output slot of the source node
* the entry node, if set, exists and is not a trigger

Each mutation validates first and only then changes state, so a
rejected call leaves the graph exactly as it was.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from logging import getLogger
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from chatflow.workflow.errors import (
    InvalidEntryNode,
    InvalidHandle,
    InvalidNodeConfig,
    InvalidPosition,
    UnknownNode,
    UnknownNodeType,
)
from chatflow.workflow.nodes.base import (
    DEFAULT_PORT,
    NodeKind,
    NodeRegistry,
    OutputPort,
    get_node_registry,
)

logger = getLogger(__name__)

# Sentinel for "any handle" in edge queries.
ANY_HANDLE = object()


def same_handle(a: Optional[str], b: Optional[str]) -> bool:
    """``None`` and ``"default"`` both name the default slot."""
    if a in (None, DEFAULT_PORT) and b in (None, DEFAULT_PORT):
        return True
    return a == b


def coerce_position(position: Any) -> Dict[str, float]:
    """Return ``position`` as ``{"x": float, "y": float}``.

    Raises:
        InvalidPosition: a coordinate is missing or not a number.
    """
    try:
        return {"x": float(position["x"]), "y": float(position["y"])}
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidPosition(position) from exc


class WorkflowNode(BaseModel):
    """A single node placed on the chatbot canvas.

    ``node_type`` (``type`` on the wire) references a registered
    ``BaseNode.node_type``; ``config`` holds the message settings.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(min_length=1)
    node_type: str = Field(alias="type")
    label: str = ""
    config: Dict[str, Any] = Field(default_factory=dict)
    position: Dict[str, float] = Field(
        default_factory=lambda: {"x": 0.0, "y": 0.0}
    )

    @field_validator("position")
    @classmethod
    def _xy_only(cls, value: Dict[str, float]) -> Dict[str, float]:
        if "x" not in value or "y" not in value:
            raise ValueError("position needs 'x' and 'y'")
        return {"x": float(value["x"]), "y": float(value["y"])}

    @property
    def kind(self) -> NodeKind:
        return get_node_registry().lookup(self.node_type).kind

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class WorkflowEdge(BaseModel):
    """A directed edge from an output slot to a node's single input.

    ``source_handle`` is the button / list-row id on the source node,
    or ``None`` for the default output of single-output nodes.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(min_length=1)
    source: str
    target: str
    source_handle: Optional[str] = Field(default=None, alias="sourceHandle")
    target_handle: Optional[str] = Field(default=None, alias="targetHandle")

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class WorkflowGraph(BaseModel):
    """The node/edge graph of one chatbot workflow, plus its entry node."""

    model_config = ConfigDict(populate_by_name=True)

    nodes: List[WorkflowNode] = Field(default_factory=list)
    edges: List[WorkflowEdge] = Field(default_factory=list)
    entry_node_id: Optional[str] = Field(default=None, alias="entryNodeId")

    _registry: Optional[NodeRegistry] = PrivateAttr(default=None)
    _node_seq: int = PrivateAttr(default=0)
    _edge_seq: int = PrivateAttr(default=0)
    _revision: int = PrivateAttr(default=0)

    # ========================================================================
    # Lookups
    # ========================================================================

    @property
    def registry(self) -> NodeRegistry:
        if self._registry is None:
            self._registry = get_node_registry()
        return self._registry

    @property
    def revision(self) -> int:
        """Incremented on every successful mutation."""
        return self._revision

    def get_node(self, node_id: str) -> Optional[WorkflowNode]:
        """Find a node by ID."""
        for n in self.nodes:
            if n.id == node_id:
                return n
        return None

    def require_node(self, node_id: str) -> WorkflowNode:
        node = self.get_node(node_id)
        if node is None:
            raise UnknownNode(node_id)
        return node

    def get_edge(self, edge_id: str) -> Optional[WorkflowEdge]:
        for e in self.edges:
            if e.id == edge_id:
                return e
        return None

    def get_edges_from(self, node_id: str, handle: Any = ANY_HANDLE) -> List[WorkflowEdge]:
        """Edges leaving a node, optionally only those of one slot."""
        return [
            e for e in self.edges
            if e.source == node_id
            and (handle is ANY_HANDLE or same_handle(e.source_handle, handle))
        ]

    def get_edges_to(self, node_id: str) -> List[WorkflowEdge]:
        """Get all edges pointing to a node."""
        return [e for e in self.edges if e.target == node_id]

    def get_output_ports(self, node_id: str) -> List[OutputPort]:
        node = self.require_node(node_id)
        return self.registry.lookup(node.node_type).get_output_ports(node.config)

    def next_nodes(self, node_id: str, handle: Optional[str] = None) -> List[WorkflowNode]:
        """Nodes reached from one output slot (more than one = fan-out)."""
        result = []
        for e in self.get_edges_from(node_id, handle):
            target = self.get_node(e.target)
            if target is not None:
                result.append(target)
        return result

    def get_entry_node(self) -> Optional[WorkflowNode]:
        return self.get_node(self.entry_node_id) if self.entry_node_id else None

    def get_trigger_nodes(self) -> List[WorkflowNode]:
        return [n for n in self.nodes if self.kind_of(n) == NodeKind.TRIGGER]

    def kind_of(self, node: WorkflowNode) -> Optional[NodeKind]:
        base = self.registry.get(node.node_type)
        return base.kind if base is not None else None

    def node_ids(self) -> List[str]:
        return [n.id for n in self.nodes]

    # ========================================================================
    # Mutations
    # ========================================================================

    def add_node(
        self,
        node_type: str,
        label: Optional[str] = None,
        position: Optional[Dict[str, float]] = None,
        config: Optional[Dict[str, Any]] = None,
    ) -> WorkflowNode:
        """Place a new node of ``node_type`` on the canvas.

        Raises:
            UnknownNodeType: ``node_type`` is not in the catalog.
            InvalidNodeConfig: ``config`` does not fit the type's shape.
            InvalidPosition: ``position`` is not a pair of numbers.
        """
        try:
            base = self.registry.lookup(node_type)
            cfg = base.validate_config(config or {})
            xy = coerce_position(position) if position is not None else {"x": 0.0, "y": 0.0}
        except (UnknownNodeType, InvalidNodeConfig, InvalidPosition) as exc:
            logger.warning(f"add_node rejected: {exc}")
            raise

        node = WorkflowNode(
            id=self.fresh_node_id(node_type),
            node_type=node_type,
            label=label if label is not None else base.label,
            config=cfg,
            position=xy,
        )
        self.nodes.append(node)
        self._changed()
        logger.debug(f"Node added: {node.label} ({node.id})")
        return node

    def delete_node(self, node_id: str) -> bool:
        """Remove a node together with every edge touching it.

        Deleting an absent node is a no-op and returns ``False``.
        """
        if self.get_node(node_id) is None:
            return False

        self.nodes = [n for n in self.nodes if n.id != node_id]
        before = len(self.edges)
        self.edges = [
            e for e in self.edges
            if e.source != node_id and e.target != node_id
        ]
        if self.entry_node_id == node_id:
            self.entry_node_id = None
        self._changed()
        logger.debug(
            f"Node deleted: {node_id} ({before - len(self.edges)} edges removed)"
        )
        return True

    def connect(
        self,
        source: str,
        source_handle: Optional[str],
        target: str,
        target_handle: Optional[str] = None,
    ) -> WorkflowEdge:
        """Draw an edge from an output slot of ``source`` to ``target``.

        Self-loops and edges into trigger nodes are allowed. Several
        edges may leave the same slot.

        Raises:
            UnknownNode: either endpoint is missing.
            InvalidHandle: ``source_handle`` is not a slot of ``source``.
        """
        try:
            src = self.require_node(source)
            self.require_node(target)
            base = self.registry.lookup(src.node_type)
            if not base.has_output_port(src.config, source_handle):
                raise InvalidHandle(source, source_handle)
        except (UnknownNode, InvalidHandle) as exc:
            logger.warning(f"connect rejected: {exc}")
            raise

        edge = WorkflowEdge(
            id=self.fresh_edge_id(),
            source=source,
            target=target,
            source_handle=source_handle,
            target_handle=target_handle,
        )
        self.edges.append(edge)
        self._changed()
        logger.debug(f"Edge added: {source}[{source_handle}] → {target} ({edge.id})")
        return edge

    def disconnect(self, edge_id: str) -> bool:
        """Remove one edge; removing an absent edge is a no-op."""
        if self.get_edge(edge_id) is None:
            return False
        self.edges = [e for e in self.edges if e.id != edge_id]
        self._changed()
        logger.debug(f"Edge removed: {edge_id}")
        return True

    def set_entry_node(self, node_id: Optional[str]) -> Optional[str]:
        """Toggle the entry node.

        Setting the current entry node again clears it; ``None`` clears
        it as well. Returns the entry node id after the call.

        Raises:
            UnknownNode: ``node_id`` is not in the graph.
            InvalidEntryNode: ``node_id`` is a trigger.
        """
        if node_id is None or node_id == self.entry_node_id:
            self.entry_node_id = None
        else:
            try:
                node = self.require_node(node_id)
                if self.registry.lookup(node.node_type).kind == NodeKind.TRIGGER:
                    raise InvalidEntryNode(node_id, "trigger nodes start a workflow, they are not a landing point")
            except (UnknownNode, InvalidEntryNode) as exc:
                logger.warning(f"set_entry_node rejected: {exc}")
                raise
            self.entry_node_id = node_id
        self._changed()
        logger.debug(f"Entry node: {self.entry_node_id}")
        return self.entry_node_id

    def update_node_config(self, node_id: str, patch: Dict[str, Any]) -> WorkflowNode:
        """Shallow-merge ``patch`` into a node's config.

        Edges leaving a slot that no longer exists (a removed button or
        row) are removed in the same step.

        Raises:
            UnknownNode: ``node_id`` is not in the graph.
            InvalidNodeConfig: the merged config is not valid.
        """
        try:
            node = self.require_node(node_id)
            base = self.registry.lookup(node.node_type)
            merged = base.validate_config({
                **base.normalize_config(node.config),
                **base.normalize_config(patch),
            })
        except (UnknownNode, InvalidNodeConfig) as exc:
            logger.warning(f"update_node_config rejected: {exc}")
            raise

        stale = [
            e.id for e in self.get_edges_from(node_id)
            if not base.has_output_port(merged, e.source_handle)
        ]
        node.config = merged
        if stale:
            self.edges = [e for e in self.edges if e.id not in stale]
            logger.info(f"Removed {len(stale)} edges from vanished slots of {node_id}")
        self._changed()
        return node

    def update_node_label(self, node_id: str, label: str) -> WorkflowNode:
        node = self._require_for(node_id, "update_node_label")
        node.label = label
        self._changed()
        return node

    def move_node(self, node_id: str, position: Dict[str, float]) -> WorkflowNode:
        node = self._require_for(node_id, "move_node")
        try:
            xy = coerce_position(position)
        except InvalidPosition as exc:
            logger.warning(f"move_node rejected: {exc}")
            raise
        node.position = xy
        self._changed()
        return node

    def replace_with(self, other: "WorkflowGraph") -> None:
        """Swap in the nodes, edges and entry node of ``other``."""
        self.nodes = other.nodes
        self.edges = other.edges
        self.entry_node_id = other.entry_node_id
        self._changed()

    # ========================================================================
    # Validation / export
    # ========================================================================

    def validate_invariants(self) -> List[str]:
        """Validate the structural invariants.

        Returns a list of error messages (empty = valid).
        """
        errors: List[str] = []

        node_map: Dict[str, WorkflowNode] = {}
        for node in self.nodes:
            if node.id in node_map:
                errors.append(f"Duplicate node id: {node.id}")
            node_map[node.id] = node

            base = self.registry.get(node.node_type)
            if base is None:
                errors.append(f"Node {node.id} has unknown type '{node.node_type}'")
                continue
            try:
                base.parse_config(node.config)
            except InvalidNodeConfig as exc:
                errors.append(f"Node {node.id}: {exc}")

        edge_ids = set()
        for edge in self.edges:
            if edge.id in edge_ids:
                errors.append(f"Duplicate edge id: {edge.id}")
            edge_ids.add(edge.id)

            src = node_map.get(edge.source)
            if src is None:
                errors.append(f"Edge {edge.id} references unknown source node: {edge.source}")
            if edge.target not in node_map:
                errors.append(f"Edge {edge.id} references unknown target node: {edge.target}")
            if src is None:
                continue
            base = self.registry.get(src.node_type)
            if base is None:
                continue
            try:
                ok = base.has_output_port(src.config, edge.source_handle)
            except InvalidNodeConfig:
                continue
            if not ok:
                errors.append(
                    f"Edge {edge.id} leaves unknown slot '{edge.source_handle}' of {edge.source}"
                )

        if self.entry_node_id is not None:
            entry = node_map.get(self.entry_node_id)
            if entry is None:
                errors.append(f"Entry node {self.entry_node_id} does not exist")
            else:
                base = self.registry.get(entry.node_type)
                if base is not None and base.kind == NodeKind.TRIGGER:
                    errors.append(f"Entry node {self.entry_node_id} is a trigger")

        return errors

    def definition(self) -> Dict[str, Any]:
        """The ``{nodes, edges, entryNodeId}`` triple handed to the store.

        ``entryNodeId`` is always present, ``None`` when unset.
        """
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
            "entryNodeId": self.entry_node_id,
        }

    # ── Internals ──

    def _require_for(self, node_id: str, operation: str) -> WorkflowNode:
        node = self.get_node(node_id)
        if node is None:
            logger.warning(f"{operation} rejected: unknown node '{node_id}'")
            raise UnknownNode(node_id)
        return node

    def fresh_node_id(self, node_type: str, reserved: Iterable[str] = ()) -> str:
        taken = set(self.node_ids()) | set(reserved)
        while True:
            self._node_seq += 1
            candidate = f"{node_type}_{self._node_seq}"
            if candidate not in taken:
                return candidate

    def fresh_edge_id(self, reserved: Iterable[str] = ()) -> str:
        taken = {e.id for e in self.edges} | set(reserved)
        while True:
            self._edge_seq += 1
            candidate = f"edge_{self._edge_seq}"
            if candidate not in taken:
                return candidate

    def _changed(self) -> None:
        self._revision += 1


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class WorkflowRecord(BaseModel):
    """A stored chatbot workflow: metadata plus its graph definition.

    ``version`` is bumped by the store on every save and lets a save
    detect that someone else wrote the workflow in the meantime.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = "Untitled Workflow"
    is_active: bool = True
    nodes: List[WorkflowNode] = Field(default_factory=list)
    edges: List[WorkflowEdge] = Field(default_factory=list)
    entry_node_id: Optional[str] = Field(default=None, alias="entryNodeId")
    version: int = 0
    is_template: bool = False
    template_name: Optional[str] = None
    created_at: str = Field(default_factory=_now)
    updated_at: str = Field(default_factory=_now)

    def touch(self) -> None:
        """Update the ``updated_at`` timestamp."""
        self.updated_at = _now()

    def to_graph(self) -> WorkflowGraph:
        """A fresh, independently mutable graph built from this record."""
        return WorkflowGraph(
            nodes=[n.model_copy(deep=True) for n in self.nodes],
            edges=[e.model_copy(deep=True) for e in self.edges],
            entry_node_id=self.entry_node_id,
        )

    def apply_definition(self, definition: Dict[str, Any]) -> None:
        """Replace the graph part with a ``{nodes, edges, entryNodeId}`` triple."""
        self.nodes = [WorkflowNode.model_validate(n) for n in definition["nodes"]]
        self.edges = [WorkflowEdge.model_validate(e) for e in definition["edges"]]
        self.entry_node_id = definition["entryNodeId"]
