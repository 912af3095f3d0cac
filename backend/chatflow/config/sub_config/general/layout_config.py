"""
Layout Configuration.

Controls the node box and spacing used by the auto-arrange action.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from chatflow.config.base import BaseConfig, ConfigField, FieldType, register_config
from chatflow.config.sub_config.general.env_utils import env_sync, read_env_defaults

DIRECTION_OPTIONS = [
    {"value": "LR", "label": "Left to right"},
    {"value": "TB", "label": "Top to bottom"},
]


@register_config
@dataclass
class LayoutConfig(BaseConfig):
    """Auto-layout box size and spacing."""

    node_width: float = 200.0
    node_height: float = 80.0
    node_sep: float = 50.0
    rank_sep: float = 80.0
    direction: str = "LR"

    _ENV_MAP = {
        "node_width": "CHATFLOW_LAYOUT_NODE_WIDTH",
        "node_height": "CHATFLOW_LAYOUT_NODE_HEIGHT",
        "node_sep": "CHATFLOW_LAYOUT_NODE_SEP",
        "rank_sep": "CHATFLOW_LAYOUT_RANK_SEP",
        "direction": "CHATFLOW_LAYOUT_DIRECTION",
    }

    @classmethod
    def get_default_instance(cls) -> "LayoutConfig":
        defaults = read_env_defaults(cls._ENV_MAP, cls.__dataclass_fields__)
        return cls(**defaults)

    @classmethod
    def get_config_name(cls) -> str:
        return "layout"

    @classmethod
    def get_display_name(cls) -> str:
        return "Auto Layout"

    @classmethod
    def get_description(cls) -> str:
        return "Node box size and spacing used when arranging a workflow."

    @classmethod
    def get_fields_metadata(cls) -> List[ConfigField]:
        return [
            ConfigField(
                name="node_width",
                field_type=FieldType.NUMBER,
                label="Node Width",
                description="Width assumed for every node",
                default=200.0,
                min_value=40,
                max_value=1000,
                group="box",
                apply_change=env_sync("CHATFLOW_LAYOUT_NODE_WIDTH"),
            ),
            ConfigField(
                name="node_height",
                field_type=FieldType.NUMBER,
                label="Node Height",
                description="Height assumed for every node",
                default=80.0,
                min_value=20,
                max_value=1000,
                group="box",
                apply_change=env_sync("CHATFLOW_LAYOUT_NODE_HEIGHT"),
            ),
            ConfigField(
                name="node_sep",
                field_type=FieldType.NUMBER,
                label="Node Spacing",
                description="Gap between neighbouring nodes in the same rank",
                default=50.0,
                min_value=0,
                group="spacing",
                apply_change=env_sync("CHATFLOW_LAYOUT_NODE_SEP"),
            ),
            ConfigField(
                name="rank_sep",
                field_type=FieldType.NUMBER,
                label="Rank Spacing",
                description="Gap between consecutive ranks",
                default=80.0,
                min_value=0,
                group="spacing",
                apply_change=env_sync("CHATFLOW_LAYOUT_RANK_SEP"),
            ),
            ConfigField(
                name="direction",
                field_type=FieldType.SELECT,
                label="Direction",
                description="Flow direction of the arranged graph",
                default="LR",
                options=DIRECTION_OPTIONS,
                group="spacing",
                apply_change=env_sync("CHATFLOW_LAYOUT_DIRECTION"),
            ),
        ]
