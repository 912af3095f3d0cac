"""
Workflow Engine - Visual Chatbot Workflow Builder.

Provides the infrastructure for authoring, checking and storing
chatbot conversation graphs through a visual node-edge editor.

Architecture:
    nodes/             - BaseNode + the trigger / interactive / terminal catalog
    workflow_model     - Nodes, edges, the graph and its mutation protocol
    commands           - Typed editor commands and the command bus
    workflow_layout    - Layered auto-layout of the canvas
    workflow_transfer  - Schema-versioned export / import
    workflow_store     - Persistence layer for workflow records
    workflow_session   - One authoring session over one stored workflow
    workflow_inspector - Structure report and publish-readiness warnings
    templates          - Pre-built chatbot templates
"""

from chatflow.workflow.errors import (
    WorkflowError,
    UnknownNodeType,
    UnknownNode,
    InvalidHandle,
    InvalidEntryNode,
    InvalidNodeConfig,
    InvalidPosition,
    InvalidFormat,
    PersistenceFailure,
    WorkflowConflict,
)
from chatflow.workflow.nodes.base import (
    BaseNode,
    NodeKind,
    OutputArity,
    OutputPort,
    NodeRegistry,
    get_node_registry,
)
from chatflow.workflow.workflow_model import (
    WorkflowNode,
    WorkflowEdge,
    WorkflowGraph,
    WorkflowRecord,
)
from chatflow.workflow.commands import (
    CommandBus,
    CommandResult,
    AddNode,
    DeleteNode,
    Connect,
    Disconnect,
    SetEntryNode,
    UpdateNodeConfig,
    UpdateNodeLabel,
    MoveNode,
)
from chatflow.workflow.workflow_layout import apply_layout, layout_graph
from chatflow.workflow.workflow_transfer import (
    SCHEMA_VERSION,
    ImportResult,
    export_workflow,
    import_workflow,
)
from chatflow.workflow.workflow_store import WorkflowStore, get_workflow_store
from chatflow.workflow.workflow_session import WorkflowSession
from chatflow.workflow.workflow_inspector import inspect_workflow

__all__ = [
    "WorkflowError",
    "UnknownNodeType",
    "UnknownNode",
    "InvalidHandle",
    "InvalidEntryNode",
    "InvalidNodeConfig",
    "InvalidPosition",
    "InvalidFormat",
    "PersistenceFailure",
    "WorkflowConflict",
    "BaseNode",
    "NodeKind",
    "OutputArity",
    "OutputPort",
    "NodeRegistry",
    "get_node_registry",
    "WorkflowNode",
    "WorkflowEdge",
    "WorkflowGraph",
    "WorkflowRecord",
    "CommandBus",
    "CommandResult",
    "AddNode",
    "DeleteNode",
    "Connect",
    "Disconnect",
    "SetEntryNode",
    "UpdateNodeConfig",
    "UpdateNodeLabel",
    "MoveNode",
    "apply_layout",
    "layout_graph",
    "SCHEMA_VERSION",
    "ImportResult",
    "export_workflow",
    "import_workflow",
    "WorkflowStore",
    "get_workflow_store",
    "WorkflowSession",
    "inspect_workflow",
]
