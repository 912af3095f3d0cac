"""
Editor Commands - typed edit commands and the command bus.

Canvas components do not mutate the graph themselves. They emit a
typed command (``DeleteNode``, ``SetEntryNode``, ...) into the
session's ``CommandBus``; the graph is the single subscriber and
applies each command through a dispatch table keyed by command class.

Rejected commands are never dropped silently: ``dispatch`` re-raises
the ``WorkflowError`` and ``drain`` returns it inside the
``CommandResult`` so the caller can react.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from logging import getLogger
from typing import Any, Callable, Deque, Dict, List, Optional, Type

from chatflow.workflow.errors import WorkflowError
from chatflow.workflow.workflow_model import WorkflowGraph

logger = getLogger(__name__)


# ============================================================================
# Commands
# ============================================================================


class EditorCommand:
    """Marker base for every edit command."""


@dataclass(frozen=True)
class AddNode(EditorCommand):
    node_type: str
    label: Optional[str] = None
    position: Optional[Dict[str, float]] = None
    config: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class DeleteNode(EditorCommand):
    node_id: str


@dataclass(frozen=True)
class Connect(EditorCommand):
    source: str
    source_handle: Optional[str]
    target: str
    target_handle: Optional[str] = None


@dataclass(frozen=True)
class Disconnect(EditorCommand):
    edge_id: str


@dataclass(frozen=True)
class SetEntryNode(EditorCommand):
    node_id: Optional[str]


@dataclass(frozen=True)
class UpdateNodeConfig(EditorCommand):
    node_id: str
    patch: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class UpdateNodeLabel(EditorCommand):
    node_id: str
    label: str


@dataclass(frozen=True)
class MoveNode(EditorCommand):
    node_id: str
    position: Dict[str, float]


@dataclass
class CommandResult:
    """What happened to one queued command."""
    command: EditorCommand
    value: Any = None
    error: Optional[WorkflowError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


# ============================================================================
# Dispatch table
# ============================================================================


_HANDLERS: Dict[Type[EditorCommand], Callable[[WorkflowGraph, Any], Any]] = {
    AddNode: lambda g, c: g.add_node(c.node_type, c.label, c.position, c.config),
    DeleteNode: lambda g, c: g.delete_node(c.node_id),
    Connect: lambda g, c: g.connect(c.source, c.source_handle, c.target, c.target_handle),
    Disconnect: lambda g, c: g.disconnect(c.edge_id),
    SetEntryNode: lambda g, c: g.set_entry_node(c.node_id),
    UpdateNodeConfig: lambda g, c: g.update_node_config(c.node_id, c.patch),
    UpdateNodeLabel: lambda g, c: g.update_node_label(c.node_id, c.label),
    MoveNode: lambda g, c: g.move_node(c.node_id, c.position),
}


class CommandBus:
    """Command channel owned by one editing surface."""

    def __init__(self, graph: WorkflowGraph) -> None:
        self._graph = graph
        self._queue: Deque[EditorCommand] = deque()

    @property
    def graph(self) -> WorkflowGraph:
        return self._graph

    @property
    def pending(self) -> int:
        return len(self._queue)

    def emit(self, command: EditorCommand) -> None:
        """Queue a command for the next ``drain()``."""
        if type(command) not in _HANDLERS:
            raise TypeError(f"Unsupported editor command: {type(command).__name__}")
        self._queue.append(command)

    def dispatch(self, command: EditorCommand) -> Any:
        """Apply one command now and return the graph operation's result."""
        handler = _HANDLERS.get(type(command))
        if handler is None:
            raise TypeError(f"Unsupported editor command: {type(command).__name__}")
        return handler(self._graph, command)

    def drain(self) -> List[CommandResult]:
        """Apply queued commands in FIFO order.

        A rejected command does not stop the ones behind it.
        """
        results: List[CommandResult] = []
        while self._queue:
            command = self._queue.popleft()
            try:
                value = self.dispatch(command)
            except WorkflowError as exc:
                logger.info(f"Command {type(command).__name__} rejected: {exc}")
                results.append(CommandResult(command, error=exc))
            else:
                results.append(CommandResult(command, value=value))
        return results
