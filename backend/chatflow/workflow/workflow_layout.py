"""
Workflow Layout - layered auto-arrangement of the chatbot canvas.

A Sugiyama-style layout that places nodes in ranks along the flow
direction:

1. Cycle removal    - a DFS in node order reverses back edges.
2. Rank assignment  - longest path from the roots; isolated nodes
                      land in rank 0.
3. Edge splitting   - edges spanning several ranks get virtual nodes
                      so crossing reduction sees them in every rank.
4. Crossing reduction - alternating barycenter sweeps; the ordering
                      with the fewest crossings is kept.
5. Coordinates      - constant node box, ``node_sep`` inside a rank,
                      ``rank_sep`` between ranks, every rank centred.

The layout is a pure function of the node and edge lists: the same
input always gives the same positions. Only positions are produced;
node ids, configs and edges are never touched.
"""

from __future__ import annotations

from logging import getLogger
from typing import Dict, List, Optional, Sequence, Set, Tuple

from chatflow.config import LayoutConfig, get_config
from chatflow.workflow.workflow_model import WorkflowEdge, WorkflowGraph, WorkflowNode

logger = getLogger(__name__)

DIRECTIONS = ("LR", "TB")
SWEEP_PASSES = 8

Position = Dict[str, float]


def layout_graph(
    nodes: Sequence[WorkflowNode],
    edges: Sequence[WorkflowEdge],
    config: Optional[LayoutConfig] = None,
    direction: Optional[str] = None,
) -> Dict[str, Position]:
    """Compute top-left positions for every node.

    Raises:
        ValueError: ``direction`` is not ``"LR"`` or ``"TB"``.
    """
    cfg = config or get_config(LayoutConfig)
    direction = (direction or cfg.direction).upper()
    if direction not in DIRECTIONS:
        raise ValueError(f"Unknown layout direction '{direction}'")

    ids = [n.id for n in nodes]
    if not ids:
        return {}

    dag = _remove_cycles(ids, _simple_edges(ids, edges))
    ranks = _assign_ranks(ids, dag)
    layers, preds, succs = _build_layers(ids, dag, ranks)
    layers = _reduce_crossings(layers, preds, succs)

    positions = _assign_coordinates(layers, set(ids), cfg, direction)
    logger.debug(
        f"Layout {direction}: {len(ids)} nodes in {len(layers)} ranks"
    )
    return positions


def apply_layout(
    graph: WorkflowGraph,
    config: Optional[LayoutConfig] = None,
    direction: Optional[str] = None,
) -> Dict[str, Position]:
    """Lay out ``graph`` in place and return the new positions."""
    positions = layout_graph(graph.nodes, graph.edges, config, direction)
    for node_id, pos in positions.items():
        graph.move_node(node_id, pos)
    return positions


# ====================================================================
# 1. Cycle removal
# ====================================================================


def _simple_edges(
    ids: List[str], edges: Sequence[WorkflowEdge],
) -> List[Tuple[str, str]]:
    """Distinct (source, target) pairs, no self-loops, known endpoints."""
    known = set(ids)
    seen: Set[Tuple[str, str]] = set()
    result = []
    for e in edges:
        pair = (e.source, e.target)
        if e.source == e.target or pair in seen:
            continue
        if e.source not in known or e.target not in known:
            continue
        seen.add(pair)
        result.append(pair)
    return result


def _remove_cycles(
    ids: List[str], edges: List[Tuple[str, str]],
) -> List[Tuple[str, str]]:
    """Reverse every back edge found by an iterative DFS in node order."""
    out: Dict[str, List[str]] = {i: [] for i in ids}
    for s, t in edges:
        out[s].append(t)

    state: Dict[str, int] = {i: 0 for i in ids}  # 0 new, 1 on stack, 2 done
    back: Set[Tuple[str, str]] = set()

    for root in ids:
        if state[root]:
            continue
        state[root] = 1
        stack: List[Tuple[str, int]] = [(root, 0)]
        while stack:
            node, idx = stack[-1]
            children = out[node]
            if idx < len(children):
                stack[-1] = (node, idx + 1)
                child = children[idx]
                if state[child] == 1:
                    back.add((node, child))
                elif state[child] == 0:
                    state[child] = 1
                    stack.append((child, 0))
            else:
                state[node] = 2
                stack.pop()

    seen: Set[Tuple[str, str]] = set()
    dag = []
    for s, t in edges:
        pair = (t, s) if (s, t) in back else (s, t)
        if pair not in seen:
            seen.add(pair)
            dag.append(pair)
    return dag


# ====================================================================
# 2. Rank assignment
# ====================================================================


def _assign_ranks(ids: List[str], dag: List[Tuple[str, str]]) -> Dict[str, int]:
    """Longest path from the roots, via Kahn's algorithm in node order."""
    indeg = {i: 0 for i in ids}
    out: Dict[str, List[str]] = {i: [] for i in ids}
    for s, t in dag:
        out[s].append(t)
        indeg[t] += 1

    rank = {i: 0 for i in ids}
    queue = [i for i in ids if indeg[i] == 0]
    head = 0
    while head < len(queue):
        node = queue[head]
        head += 1
        for child in out[node]:
            rank[child] = max(rank[child], rank[node] + 1)
            indeg[child] -= 1
            if indeg[child] == 0:
                queue.append(child)

    if len(queue) < len(ids):
        # Unreachable after cycle removal; keep leftovers in their current rank.
        logger.warning(f"Layout ranking left {len(ids) - len(queue)} nodes unordered")
    return rank


# ====================================================================
# 3. Layers with virtual nodes
# ====================================================================


def _build_layers(
    ids: List[str],
    dag: List[Tuple[str, str]],
    ranks: Dict[str, int],
) -> Tuple[List[List[str]], Dict[str, List[str]], Dict[str, List[str]]]:
    depth = max(ranks.values()) + 1
    layers: List[List[str]] = [[] for _ in range(depth)]
    for i in ids:
        layers[ranks[i]].append(i)

    preds: Dict[str, List[str]] = {i: [] for i in ids}
    succs: Dict[str, List[str]] = {i: [] for i in ids}

    def _link(a: str, b: str) -> None:
        succs[a].append(b)
        preds[b].append(a)

    virtual = 0
    for s, t in dag:
        prev = s
        for r in range(ranks[s] + 1, ranks[t]):
            virtual += 1
            vid = f"\x00v{virtual}"
            preds[vid] = []
            succs[vid] = []
            layers[r].append(vid)
            _link(prev, vid)
            prev = vid
        _link(prev, t)

    return layers, preds, succs


# ====================================================================
# 4. Crossing reduction
# ====================================================================


def _reduce_crossings(
    layers: List[List[str]],
    preds: Dict[str, List[str]],
    succs: Dict[str, List[str]],
) -> List[List[str]]:
    best = [list(layer) for layer in layers]
    best_crossings = _count_crossings(best, succs)
    current = [list(layer) for layer in layers]

    for sweep in range(SWEEP_PASSES):
        if best_crossings == 0:
            break
        if sweep % 2 == 0:
            for r in range(1, len(current)):
                current[r] = _sort_by_barycenter(current[r], current[r - 1], preds)
        else:
            for r in range(len(current) - 2, -1, -1):
                current[r] = _sort_by_barycenter(current[r], current[r + 1], succs)
        crossings = _count_crossings(current, succs)
        if crossings < best_crossings:
            best = [list(layer) for layer in current]
            best_crossings = crossings

    return best


def _sort_by_barycenter(
    layer: List[str],
    fixed: List[str],
    neighbours: Dict[str, List[str]],
) -> List[str]:
    index = {n: i for i, n in enumerate(fixed)}

    def _key(item: Tuple[int, str]) -> Tuple[float, int]:
        pos, node = item
        linked = [index[n] for n in neighbours[node] if n in index]
        if not linked:
            return (float(pos), pos)
        return (sum(linked) / len(linked), pos)

    return [node for _, node in sorted(enumerate(layer), key=_key)]


def _count_crossings(layers: List[List[str]], succs: Dict[str, List[str]]) -> int:
    total = 0
    for r in range(len(layers) - 1):
        upper = {n: i for i, n in enumerate(layers[r])}
        lower = {n: i for i, n in enumerate(layers[r + 1])}
        segments = [
            (upper[a], lower[b])
            for a in layers[r]
            for b in succs[a]
            if b in lower
        ]
        for i in range(len(segments)):
            a1, b1 = segments[i]
            for j in range(i + 1, len(segments)):
                a2, b2 = segments[j]
                if (a1 - a2) * (b1 - b2) < 0:
                    total += 1
    return total


# ====================================================================
# 5. Coordinates
# ====================================================================


def _assign_coordinates(
    layers: List[List[str]],
    real: Set[str],
    cfg: LayoutConfig,
    direction: str,
) -> Dict[str, Position]:
    if direction == "LR":
        main_step = cfg.node_width + cfg.rank_sep
        breadth = cfg.node_height
    else:
        main_step = cfg.node_height + cfg.rank_sep
        breadth = cfg.node_width

    # Virtual nodes take no room beyond the separation gap.
    def _extent(layer: List[str]) -> float:
        if not layer:
            return 0.0
        size = sum(breadth if n in real else 0.0 for n in layer)
        return size + cfg.node_sep * (len(layer) - 1)

    widest = max(_extent(layer) for layer in layers)
    positions: Dict[str, Position] = {}
    for r, layer in enumerate(layers):
        cross = (widest - _extent(layer)) / 2
        main = r * main_step
        for n in layer:
            if n in real:
                if direction == "LR":
                    positions[n] = {"x": main, "y": cross}
                else:
                    positions[n] = {"x": cross, "y": main}
                cross += breadth + cfg.node_sep
            else:
                cross += cfg.node_sep
    return positions
