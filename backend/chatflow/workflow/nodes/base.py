"""
Node Base - node type contract and the global node catalog.

Every node type placed on the chatbot canvas is a ``BaseNode``
subclass registered with ``@register_node``. The class declares:

* ``kind``          - trigger, interactive message or terminal message
* ``output_arity``  - how many output slots a node of this type exposes
* ``config_model``  - the pydantic shape its ``config`` payload must have
* ``token_cost``    - tokens charged each time the node sends

``NodeRegistry`` is the read-only lookup used by the graph model to
create nodes and to compute their output slots.
"""

from __future__ import annotations

import copy
from enum import Enum
from logging import getLogger
from typing import Any, ClassVar, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from chatflow.workflow.errors import InvalidNodeConfig, UnknownNodeType

logger = getLogger(__name__)

DEFAULT_PORT = "default"


class NodeKind(str, Enum):
    TRIGGER = "trigger"
    INTERACTIVE = "interactive"
    TERMINAL = "terminal"


class OutputArity(str, Enum):
    FIXED_ONE = "fixed_one"     # one implicit default slot
    DERIVED = "derived"         # one slot per button / list row
    NONE = "none"               # terminal, no slots


class OutputPort(BaseModel):
    """An addressable output slot of a node.

    ``id`` is ``None`` for the implicit default slot; otherwise it is
    the button or row id an edge's ``sourceHandle`` refers to.
    """

    id: Optional[str] = None
    label: str = ""
    group: str = ""


class WireModel(BaseModel):
    """camelCase on the wire (``bodyText``), unknown keys kept."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


class NodeConfig(WireModel):
    """Base shape for node configs.

    Unknown keys are kept so editor-only flags (capture settings and
    the like) survive a save.
    """

    def output_slots(self) -> List[OutputPort]:
        """Slots declared by this config (buttons, rows, ...)."""
        return []

    def content_warnings(self) -> List[str]:
        """Things that would make the message unsendable as configured."""
        return []


class BaseNode:
    """A node type in the catalog."""

    node_type: ClassVar[str] = ""
    label: ClassVar[str] = ""
    description: ClassVar[str] = ""
    category: ClassVar[str] = ""
    icon: ClassVar[str] = ""
    color: ClassVar[str] = "#6b7280"
    kind: ClassVar[NodeKind] = NodeKind.INTERACTIVE
    output_arity: ClassVar[OutputArity] = OutputArity.FIXED_ONE
    token_cost: ClassVar[int] = 1
    config_model: ClassVar[Type[NodeConfig]] = NodeConfig

    # ── Config ──

    def parse_config(self, config: Dict[str, Any]) -> NodeConfig:
        """Validate ``config`` against this type's config model.

        Raises:
            InvalidNodeConfig: shape errors or duplicate slot ids.
        """
        try:
            parsed = self.config_model.model_validate(config)
        except ValidationError as exc:
            errors = [
                f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
                for err in exc.errors()
            ]
            raise InvalidNodeConfig(self.node_type, errors) from exc

        seen = set()
        dupes = []
        for slot in parsed.output_slots():
            if slot.id in seen:
                dupes.append(f"duplicate slot id '{slot.id}'")
            seen.add(slot.id)
        if dupes:
            raise InvalidNodeConfig(self.node_type, dupes)
        return parsed

    def normalize_config(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Rename field-name keys (``body_text``) to their wire alias (``bodyText``).

        Unknown keys pass through unchanged.
        """
        aliases = {
            name: field.alias or name
            for name, field in self.config_model.model_fields.items()
        }
        return {aliases.get(key, key): value for key, value in config.items()}

    def validate_config(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Validate ``config`` and return the copy stored on the node.

        The copy is deep and keyed by wire alias, so the caller's nested
        lists are never shared with graph state.
        """
        stored = copy.deepcopy(self.normalize_config(config))
        self.parse_config(stored)
        return stored

    # ── Output slots ──

    def get_output_ports(self, config: Dict[str, Any]) -> List[OutputPort]:
        if self.output_arity == OutputArity.NONE:
            return []
        if self.output_arity == OutputArity.DERIVED:
            slots = self.parse_config(config).output_slots()
            if slots:
                return slots
        return [OutputPort(id=None, label="Next")]

    def has_output_port(self, config: Dict[str, Any], handle: Optional[str]) -> bool:
        for port in self.get_output_ports(config):
            if port.id is None:
                if handle is None or handle == DEFAULT_PORT:
                    return True
            elif port.id == handle:
                return True
        return False

    # ── Serialization ──

    def to_dict(self) -> Dict[str, Any]:
        """Palette entry for the editor."""
        return {
            "node_type": self.node_type,
            "kind": self.kind.value,
            "label": self.label,
            "description": self.description,
            "category": self.category,
            "icon": self.icon,
            "color": self.color,
            "output_arity": self.output_arity.value,
            "token_cost": self.token_cost,
            "config_schema": self.config_model.model_json_schema(by_alias=True),
        }

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.node_type}>"


class NodeRegistry:
    """Catalog of node types keyed by ``node_type``."""

    def __init__(self) -> None:
        self._nodes: Dict[str, BaseNode] = {}

    def register(self, node_cls: Type[BaseNode]) -> None:
        if not node_cls.node_type:
            raise ValueError(f"{node_cls.__name__} has no node_type")
        if node_cls.kind == NodeKind.TERMINAL and node_cls.output_arity != OutputArity.NONE:
            raise ValueError(f"Terminal node type {node_cls.node_type} must have no outputs")
        self._nodes[node_cls.node_type] = node_cls()

    def get(self, node_type: str) -> Optional[BaseNode]:
        return self._nodes.get(node_type)

    def lookup(self, node_type: str) -> BaseNode:
        """Return the node type or raise ``UnknownNodeType``."""
        node = self._nodes.get(node_type)
        if node is None:
            raise UnknownNodeType(node_type)
        return node

    def list_all(self) -> List[BaseNode]:
        return list(self._nodes.values())

    def list_by_kind(self, kind: NodeKind) -> List[BaseNode]:
        return [n for n in self._nodes.values() if n.kind == kind]

    def catalog(self) -> Dict[str, List[Dict[str, Any]]]:
        """Palette grouped by kind, in registration order."""
        grouped: Dict[str, List[Dict[str, Any]]] = {k.value: [] for k in NodeKind}
        for node in self._nodes.values():
            grouped[node.kind.value].append(node.to_dict())
        return grouped

    def __contains__(self, node_type: object) -> bool:
        return node_type in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)


# ── Singleton ──

_registry = NodeRegistry()


def register_node(node_cls: Type[BaseNode]) -> Type[BaseNode]:
    """Class decorator: add a node type to the global catalog."""
    _registry.register(node_cls)
    return node_cls


def get_node_registry() -> NodeRegistry:
    """Return the global NodeRegistry with all built-in node types loaded."""
    # Importing the package registers every concrete node module.
    import chatflow.workflow.nodes  # noqa: F401
    return _registry
