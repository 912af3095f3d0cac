"""
Environment helpers shared by the general config sections.
"""

from __future__ import annotations

import os
from dataclasses import MISSING, Field
from logging import getLogger
from typing import Any, Callable, Dict

logger = getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _coerce(raw: str, default: Any) -> Any:
    if isinstance(default, bool):
        return raw.strip().lower() in _TRUE_VALUES
    if isinstance(default, int):
        return int(raw)
    if isinstance(default, float):
        return float(raw)
    return raw


def read_env_defaults(
    env_map: Dict[str, str],
    fields: Dict[str, Field],
) -> Dict[str, Any]:
    """Build constructor kwargs from environment variables.

    Only variables that are set are returned, coerced to the type of
    the dataclass field default. Unparseable values are logged and
    skipped so the field keeps its default.
    """
    values: Dict[str, Any] = {}
    for field_name, env_name in env_map.items():
        raw = os.environ.get(env_name)
        if raw is None or field_name not in fields:
            continue
        default = fields[field_name].default
        if default is MISSING:
            default = ""
        try:
            values[field_name] = _coerce(raw, default)
        except ValueError:
            logger.warning(f"Ignoring invalid value for {env_name}: {raw!r}")
    return values


def env_sync(env_name: str) -> Callable[[Any], None]:
    """Return a callback that mirrors a changed field into ``os.environ``."""

    def _apply(value: Any) -> None:
        os.environ[env_name] = str(value)

    return _apply
