"""
Workflow Nodes Package.

Auto-registers all concrete node types into the global NodeRegistry.
Import this package to ensure all nodes are available.
"""

from chatflow.workflow.nodes.base import _registry

# Import all node modules to trigger registration
from chatflow.workflow.nodes import trigger_nodes      # noqa: F401
from chatflow.workflow.nodes import interactive_nodes  # noqa: F401
from chatflow.workflow.nodes import message_nodes      # noqa: F401


def register_all_nodes() -> None:
    """Ensure all node types are registered.

    Called at application startup. The module-level imports above
    trigger ``@register_node`` decorators, but this function
    provides an explicit entry point.
    """
    from logging import getLogger
    getLogger(__name__).info(
        f"Workflow nodes registered: {len(_registry)} node types"
    )


__all__ = ["register_all_nodes"]
