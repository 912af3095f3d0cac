"""
Workflow Store Configuration.

Controls where workflow definitions are written and whether saves
are checked against the stored version.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List

from chatflow.config.base import BaseConfig, ConfigField, FieldType, register_config
from chatflow.config.sub_config.general.env_utils import env_sync, read_env_defaults

_DEFAULT_DIR = str(Path(__file__).resolve().parents[4] / "workflows")


@register_config
@dataclass
class StoreConfig(BaseConfig):
    """Workflow persistence settings."""

    storage_dir: str = _DEFAULT_DIR
    optimistic_locking: bool = False

    _ENV_MAP = {
        "storage_dir": "CHATFLOW_STORAGE_DIR",
        "optimistic_locking": "CHATFLOW_OPTIMISTIC_LOCKING",
    }

    @classmethod
    def get_default_instance(cls) -> "StoreConfig":
        defaults = read_env_defaults(cls._ENV_MAP, cls.__dataclass_fields__)
        return cls(**defaults)

    @classmethod
    def get_config_name(cls) -> str:
        return "store"

    @classmethod
    def get_display_name(cls) -> str:
        return "Workflow Storage"

    @classmethod
    def get_description(cls) -> str:
        return "Storage directory and save conflict policy for workflows."

    @classmethod
    def get_fields_metadata(cls) -> List[ConfigField]:
        return [
            ConfigField(
                name="storage_dir",
                field_type=FieldType.STRING,
                label="Storage Directory",
                description="Directory holding one JSON file per workflow",
                default=_DEFAULT_DIR,
                group="storage",
                apply_change=env_sync("CHATFLOW_STORAGE_DIR"),
            ),
            ConfigField(
                name="optimistic_locking",
                field_type=FieldType.BOOLEAN,
                label="Reject Stale Saves",
                description="Refuse a save when the workflow changed since it was loaded",
                default=False,
                group="storage",
                apply_change=env_sync("CHATFLOW_OPTIMISTIC_LOCKING"),
            ),
        ]
