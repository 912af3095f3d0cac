"""
Logging Configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from chatflow.config.base import BaseConfig, ConfigField, FieldType, register_config
from chatflow.config.sub_config.general.env_utils import env_sync, read_env_defaults

LEVEL_OPTIONS = [
    {"value": level, "label": level}
    for level in ("DEBUG", "INFO", "WARNING", "ERROR")
]


@register_config
@dataclass
class LoggingConfig(BaseConfig):
    """Log level and line format."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

    _ENV_MAP = {
        "level": "CHATFLOW_LOG_LEVEL",
        "format": "CHATFLOW_LOG_FORMAT",
    }

    @classmethod
    def get_default_instance(cls) -> "LoggingConfig":
        defaults = read_env_defaults(cls._ENV_MAP, cls.__dataclass_fields__)
        return cls(**defaults)

    @classmethod
    def get_config_name(cls) -> str:
        return "logging"

    @classmethod
    def get_display_name(cls) -> str:
        return "Logging"

    @classmethod
    def get_fields_metadata(cls) -> List[ConfigField]:
        return [
            ConfigField(
                name="level",
                field_type=FieldType.SELECT,
                label="Log Level",
                default="INFO",
                options=LEVEL_OPTIONS,
                group="logging",
                apply_change=env_sync("CHATFLOW_LOG_LEVEL"),
            ),
            ConfigField(
                name="format",
                field_type=FieldType.STRING,
                label="Line Format",
                description="logging.Formatter format string",
                default="%(asctime)s %(levelname)s [%(name)s] %(message)s",
                group="logging",
                apply_change=env_sync("CHATFLOW_LOG_FORMAT"),
            ),
        ]
