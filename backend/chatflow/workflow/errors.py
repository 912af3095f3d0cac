"""
Workflow Errors - the failure taxonomy of the workflow builder.

Mutation errors are raised before the graph is touched. Import and
persistence errors leave the live graph as it was.
"""

from __future__ import annotations

from typing import Any, List, Optional


class WorkflowError(Exception):
    """Base class for every workflow builder error."""


class UnknownNodeType(WorkflowError):
    def __init__(self, node_type: str) -> None:
        self.node_type = node_type
        super().__init__(f"Unknown node type '{node_type}'")


class UnknownNode(WorkflowError):
    def __init__(self, node_id: str) -> None:
        self.node_id = node_id
        super().__init__(f"Unknown node '{node_id}'")


class InvalidHandle(WorkflowError):
    """The source handle is not an output slot of the source node."""

    def __init__(self, node_id: str, handle: Optional[str]) -> None:
        self.node_id = node_id
        self.handle = handle
        super().__init__(f"Node '{node_id}' has no output slot '{handle}'")


class InvalidEntryNode(WorkflowError):
    def __init__(self, node_id: str, reason: str) -> None:
        self.node_id = node_id
        self.reason = reason
        super().__init__(f"Node '{node_id}' cannot be the entry node: {reason}")


class InvalidNodeConfig(WorkflowError):
    """A node config does not match the shape its node type declares."""

    def __init__(self, node_type: str, errors: List[str]) -> None:
        self.node_type = node_type
        self.errors = errors
        super().__init__(
            f"Invalid config for '{node_type}': " + "; ".join(errors)
        )


class InvalidPosition(WorkflowError):
    """A canvas position is not an ``{"x", "y"}`` pair of numbers."""

    def __init__(self, position: Any) -> None:
        self.position = position
        super().__init__(f"Invalid node position {position!r}: expected numeric 'x' and 'y'")


class InvalidFormat(WorkflowError):
    """An imported workflow file was rejected as a whole."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid workflow file: {reason}")


class PersistenceFailure(WorkflowError):
    """Saving or loading a workflow failed in the store."""

    def __init__(self, workflow_id: str, reason: str) -> None:
        self.workflow_id = workflow_id
        self.reason = reason
        super().__init__(f"Workflow '{workflow_id}': {reason}")


class WorkflowConflict(PersistenceFailure):
    """The stored workflow changed since the editor loaded it."""

    def __init__(self, workflow_id: str, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            workflow_id,
            f"version conflict (expected {expected}, stored {actual})",
        )
