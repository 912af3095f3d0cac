"""Shared fixtures for the workflow builder tests."""

import pytest

from chatflow.config import reset_configs
from chatflow.workflow.workflow_model import WorkflowGraph
from chatflow.workflow.workflow_store import WorkflowStore

_ENV_VARS = (
    "CHATFLOW_STORAGE_DIR",
    "CHATFLOW_OPTIMISTIC_LOCKING",
    "CHATFLOW_LAYOUT_NODE_WIDTH",
    "CHATFLOW_LAYOUT_NODE_HEIGHT",
    "CHATFLOW_LAYOUT_NODE_SEP",
    "CHATFLOW_LAYOUT_RANK_SEP",
    "CHATFLOW_LAYOUT_DIRECTION",
    "CHATFLOW_LOG_LEVEL",
    "CHATFLOW_LOG_FORMAT",
)

YES_NO_BUTTONS = {
    "bodyText": "Do you want to continue?",
    "buttons": [
        {"id": "b1", "title": "Yes"},
        {"id": "b2", "title": "No"},
    ],
}


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Every test starts from default config sections."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_configs()
    yield
    reset_configs()


@pytest.fixture
def graph():
    """An empty graph."""
    return WorkflowGraph()


@pytest.fixture
def menu_graph():
    """trigger → quickReply(b1, b2) → two text replies, entry on the menu."""
    g = WorkflowGraph()
    trigger = g.add_node("firstMessageTrigger", "Start")
    ask = g.add_node("quickReply", "Ask", config=YES_NO_BUTTONS)
    yes = g.add_node("message.text", "Yes", config={"text": "Great!"})
    no = g.add_node("message.text", "No", config={"text": "Maybe later."})
    g.connect(trigger.id, None, ask.id)
    g.connect(ask.id, "b1", yes.id)
    g.connect(ask.id, "b2", no.id)
    g.set_entry_node(ask.id)
    return g


@pytest.fixture
def store(tmp_path):
    """A store writing into a temporary directory."""
    return WorkflowStore(storage_dir=tmp_path / "workflows")


@pytest.fixture
def yes_no_config():
    """quickReply config with two reply buttons, b1 and b2."""
    return {
        "bodyText": YES_NO_BUTTONS["bodyText"],
        "buttons": [dict(b) for b in YES_NO_BUTTONS["buttons"]],
    }
