"""Tests for the workflow inspector report."""

from chatflow.workflow.workflow_inspector import inspect_workflow
from chatflow.workflow.workflow_model import WorkflowEdge, WorkflowGraph, WorkflowNode


def _warnings(graph):
    return inspect_workflow(graph)["validation"]["warnings"]


class TestReport:
    """Node, edge and summary sections."""

    def test_summary_counts(self, menu_graph):
        report = inspect_workflow(menu_graph)
        summary = report["summary"]
        assert summary["total_nodes"] == 4
        assert summary["total_edges"] == 3
        assert summary["trigger_nodes"] == 1
        assert summary["interactive_nodes"] == 1
        assert summary["terminal_nodes"] == 2
        assert summary["estimated_token_cost"] == 4
        assert summary["is_valid"]

    def test_ports_list_their_targets(self, menu_graph):
        report = inspect_workflow(menu_graph)
        ask = next(d for d in report["nodes"] if d["node_type"] == "quickReply")
        assert ask["is_entry"]
        assert [p["id"] for p in ask["ports"]] == ["b1", "b2"]
        assert [t["target_label"] for t in ask["ports"][0]["targets"]] == ["Yes"]

    def test_edges_resolve_labels(self, menu_graph):
        report = inspect_workflow(menu_graph)
        assert report["edges"][0]["source_label"] == "Start"
        assert report["edges"][0]["target_label"] == "Ask"

    def test_ready_graph_has_no_warnings(self, menu_graph):
        assert _warnings(menu_graph) == []


class TestValidation:
    """Structural errors and publish-readiness warnings."""

    def test_structural_errors(self):
        graph = WorkflowGraph(
            nodes=[WorkflowNode(id="a", type="message.text")],
            edges=[WorkflowEdge(id="e", source="a", target="ghost")],
        )
        validation = inspect_workflow(graph)["validation"]
        assert not validation["valid"]
        assert any("ghost" in e for e in validation["errors"])

    def test_empty_workflow(self, graph):
        assert _warnings(graph) == ["Workflow is empty"]

    def test_missing_trigger_and_entry(self, graph):
        graph.add_node("message.text", config={"text": "hi"})
        warnings = _warnings(graph)
        assert "No trigger node: the workflow will never start" in warnings
        assert "No entry node set" in warnings

    def test_unreachable_entry(self, graph):
        graph.add_node("manualTrigger", "Go")
        lonely = graph.add_node("message.text", "Lonely", config={"text": "hi"})
        graph.set_entry_node(lonely.id)
        warnings = _warnings(graph)
        assert f"Entry node {lonely.id} is not reachable from any trigger" in warnings
        assert f"Lonely ({lonely.id}) is not connected to anything" in warnings

    def test_unconnected_slot_and_fan_out(self, menu_graph):
        ask = menu_graph.nodes[1]
        yes, no = menu_graph.nodes[2], menu_graph.nodes[3]
        b2_edge = menu_graph.get_edges_from(ask.id, "b2")[0]
        menu_graph.disconnect(b2_edge.id)
        menu_graph.connect(ask.id, "b1", no.id)
        warnings = _warnings(menu_graph)
        assert f"Ask ({ask.id}): output 'b2' is not connected" in warnings
        assert f"Ask ({ask.id}): output 'b1' fans out to 2 nodes" in warnings
        assert yes.id != no.id

    def test_empty_content(self, graph):
        trigger = graph.add_node("manualTrigger", "Go")
        reply = graph.add_node("message.text", "Reply")
        graph.connect(trigger.id, None, reply.id)
        graph.set_entry_node(reply.id)
        assert _warnings(graph) == [f"Reply ({reply.id}): message text is empty"]
