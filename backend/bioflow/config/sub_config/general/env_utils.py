"""
Environment variable helpers shared by dataclass configs.
"""

from __future__ import annotations

import os
from dataclasses import MISSING, Field
from logging import getLogger
from typing import Any, Callable, Dict, Mapping, Optional

logger = getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _coerce(raw: str, default: Any) -> Any:
    """Convert an env string to the type of the field default."""
    if isinstance(default, bool):
        lowered = raw.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ValueError(f"not a boolean: {raw!r}")
    if isinstance(default, int):
        return int(raw)
    if isinstance(default, float):
        return float(raw)
    return raw


def read_env_defaults(
    env_map: Mapping[str, str],
    fields: Mapping[str, Field],
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """Build constructor kwargs from environment variables.

    Only fields present in ``env_map`` and set in the environment are
    returned; the rest keep their dataclass defaults. Values that cannot
    be converted are skipped with a warning.
    """
    env = os.environ if environ is None else environ
    values: Dict[str, Any] = {}
    for field_name, env_name in env_map.items():
        raw = env.get(env_name)
        if raw is None or field_name not in fields:
            continue
        default = fields[field_name].default
        if default is MISSING:
            values[field_name] = raw
            continue
        try:
            values[field_name] = _coerce(raw, default)
        except ValueError as e:
            logger.warning(f"Ignoring {env_name}={raw!r}: {e}")
    return values


def env_sync(env_name: str) -> Callable[[Any], None]:
    """Return a callback that mirrors a changed value into ``os.environ``."""

    def _apply(value: Any) -> None:
        if value is None:
            os.environ.pop(env_name, None)
        elif isinstance(value, bool):
            os.environ[env_name] = "true" if value else "false"
        else:
            os.environ[env_name] = str(value)

    return _apply
