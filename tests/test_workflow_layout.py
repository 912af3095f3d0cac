"""Tests for the layered auto-layout."""

import pytest

from chatflow.config import LayoutConfig
from chatflow.workflow.workflow_layout import apply_layout, layout_graph
from chatflow.workflow.workflow_model import WorkflowEdge, WorkflowGraph, WorkflowNode


def _graph(node_ids, pairs):
    return WorkflowGraph(
        nodes=[WorkflowNode(id=n, type="manualTrigger") for n in node_ids],
        edges=[
            WorkflowEdge(id=f"e{i}", source=s, target=t)
            for i, (s, t) in enumerate(pairs)
        ],
    )


@pytest.fixture
def cfg():
    return LayoutConfig()


class TestRanks:
    """Rank placement along the flow direction."""

    def test_chain_left_to_right(self, cfg):
        """Each step moves one rank (width + rank_sep) to the right."""
        g = _graph(["a", "b", "c"], [("a", "b"), ("b", "c")])
        pos = layout_graph(g.nodes, g.edges, cfg)
        assert [pos[n]["x"] for n in "abc"] == [0.0, 280.0, 560.0]
        assert pos["a"]["y"] == pos["b"]["y"] == pos["c"]["y"]

    def test_chain_top_to_bottom(self, cfg):
        """TB swaps the axes and steps by height + rank_sep."""
        g = _graph(["a", "b"], [("a", "b")])
        pos = layout_graph(g.nodes, g.edges, cfg, direction="TB")
        assert pos["a"]["y"] == 0.0
        assert pos["b"]["y"] == 160.0
        assert pos["a"]["x"] == pos["b"]["x"]

    def test_longest_path_rank(self, cfg):
        """A node reached by a short and a long path sits after the long one."""
        g = _graph(["a", "b", "c"], [("a", "c"), ("a", "b"), ("b", "c")])
        pos = layout_graph(g.nodes, g.edges, cfg)
        assert pos["c"]["x"] == 560.0

    def test_isolated_nodes_share_rank_zero(self, cfg):
        """Unconnected nodes are stacked without overlap."""
        g = _graph(["a", "b", "c"], [])
        pos = layout_graph(g.nodes, g.edges, cfg)
        assert [pos[n]["x"] for n in "abc"] == [0.0, 0.0, 0.0]
        assert [pos[n]["y"] for n in "abc"] == [0.0, 130.0, 260.0]

    def test_ranks_are_centred(self, cfg):
        """A lone parent sits midway between its two children."""
        g = _graph(["a", "b", "c"], [("a", "b"), ("a", "c")])
        pos = layout_graph(g.nodes, g.edges, cfg)
        assert pos["b"]["y"] == 0.0
        assert pos["c"]["y"] == 130.0
        assert pos["a"]["y"] == 65.0


class TestRobustness:
    """Cycles, self-loops and odd input."""

    def test_cycle_terminates(self, cfg):
        """A cycle is broken deterministically."""
        g = _graph(["a", "b", "c"], [("a", "b"), ("b", "c"), ("c", "a")])
        pos = layout_graph(g.nodes, g.edges, cfg)
        assert len({pos[n]["x"] for n in "abc"}) == 3

    def test_self_loop_and_duplicate_edges(self, cfg):
        g = _graph(["a", "b"], [("a", "a"), ("a", "b"), ("a", "b")])
        pos = layout_graph(g.nodes, g.edges, cfg)
        assert pos["b"]["x"] == 280.0

    def test_empty_graph(self, cfg):
        assert layout_graph([], [], cfg) == {}

    def test_unknown_direction(self, cfg):
        with pytest.raises(ValueError):
            layout_graph([], [], cfg, direction="RL")


class TestDeterminism:
    """Same input, same output."""

    def test_repeated_calls_identical(self, menu_graph, cfg):
        first = layout_graph(menu_graph.nodes, menu_graph.edges, cfg)
        second = layout_graph(menu_graph.nodes, menu_graph.edges, cfg)
        assert first == second

    def test_crossings_are_removed(self, cfg):
        """Children are reordered to follow their parents."""
        g = _graph(["a1", "a2", "b2", "b1"], [("a1", "b1"), ("a2", "b2")])
        pos = layout_graph(g.nodes, g.edges, cfg)
        assert pos["b1"]["y"] < pos["b2"]["y"]
        assert pos["a1"]["y"] < pos["a2"]["y"]

    def test_apply_only_moves_nodes(self, menu_graph):
        """Ids, configs and edges are untouched."""
        before = menu_graph.definition()
        positions = apply_layout(menu_graph)
        after = menu_graph.definition()
        assert after["edges"] == before["edges"]
        assert after["entryNodeId"] == before["entryNodeId"]
        for old, new in zip(before["nodes"], after["nodes"]):
            assert new["id"] == old["id"]
            assert new["config"] == old["config"]
            assert new["position"] == positions[new["id"]]

    def test_env_configured_spacing(self, monkeypatch):
        """Spacing comes from the layout config section."""
        monkeypatch.setenv("CHATFLOW_LAYOUT_RANK_SEP", "20")
        g = _graph(["a", "b"], [("a", "b")])
        pos = layout_graph(g.nodes, g.edges)
        assert pos["b"]["x"] == 220.0
