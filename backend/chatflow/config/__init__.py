"""
Configuration - dataclass config sections with environment defaults.
"""

from chatflow.config.base import (
    BaseConfig,
    ConfigField,
    FieldType,
    get_config,
    list_configs,
    register_config,
    reset_configs,
)
from chatflow.config.sub_config.general.layout_config import LayoutConfig
from chatflow.config.sub_config.general.logging_config import LoggingConfig
from chatflow.config.sub_config.general.store_config import StoreConfig

__all__ = [
    "BaseConfig",
    "ConfigField",
    "FieldType",
    "get_config",
    "list_configs",
    "register_config",
    "reset_configs",
    "LayoutConfig",
    "LoggingConfig",
    "StoreConfig",
]
