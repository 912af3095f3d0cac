"""
Config Base - dataclass-backed configuration sections.

Every configuration section is a ``@dataclass`` subclass of
``BaseConfig`` registered with ``@register_config``. Defaults come
from environment variables through ``get_default_instance()``; the
field metadata describes each field for the settings screen.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from logging import getLogger
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar

logger = getLogger(__name__)

T = TypeVar("T", bound="BaseConfig")


class FieldType(str, Enum):
    """Editor widget used for a config field."""
    STRING = "string"
    TEXTAREA = "textarea"
    NUMBER = "number"
    BOOLEAN = "boolean"
    SELECT = "select"
    PASSWORD = "password"
    URL = "url"


@dataclass
class ConfigField:
    """Metadata for a single configuration field."""
    name: str
    field_type: FieldType
    label: str
    description: str = ""
    default: Any = None
    required: bool = False
    placeholder: str = ""
    options: List[Dict[str, Any]] = field(default_factory=list)
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    group: str = "general"
    secure: bool = False
    apply_change: Optional[Callable[[Any], None]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for the frontend (callbacks are dropped)."""
        return {
            "name": self.name,
            "type": self.field_type.value,
            "label": self.label,
            "description": self.description,
            "default": self.default,
            "required": self.required,
            "placeholder": self.placeholder,
            "options": self.options,
            "min": self.min_value,
            "max": self.max_value,
            "group": self.group,
            "secure": self.secure,
        }


class BaseConfig:
    """Base class for configuration sections."""

    _ENV_MAP: Dict[str, str] = {}

    @classmethod
    def get_default_instance(cls: Type[T]) -> T:
        return cls()

    @classmethod
    def get_config_name(cls) -> str:
        raise NotImplementedError

    @classmethod
    def get_display_name(cls) -> str:
        return cls.get_config_name()

    @classmethod
    def get_description(cls) -> str:
        return ""

    @classmethod
    def get_category(cls) -> str:
        return "general"

    @classmethod
    def get_fields_metadata(cls) -> List[ConfigField]:
        return []

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)  # type: ignore[call-overload]


# ── Registry ──

_CONFIG_CLASSES: Dict[str, Type[BaseConfig]] = {}
_CONFIG_INSTANCES: Dict[str, BaseConfig] = {}


def register_config(cls: Type[T]) -> Type[T]:
    """Class decorator: make a config section discoverable by name."""
    _CONFIG_CLASSES[cls.get_config_name()] = cls
    return cls


def get_config(cls: Type[T]) -> T:
    """Return the cached instance of a config section."""
    name = cls.get_config_name()
    instance = _CONFIG_INSTANCES.get(name)
    if instance is None:
        instance = cls.get_default_instance()
        _CONFIG_INSTANCES[name] = instance
        logger.debug(f"Config loaded: {name} = {instance}")
    return instance  # type: ignore[return-value]


def list_configs() -> List[Type[BaseConfig]]:
    return list(_CONFIG_CLASSES.values())


def reset_configs() -> None:
    """Drop cached instances so the next access re-reads the environment."""
    _CONFIG_INSTANCES.clear()
