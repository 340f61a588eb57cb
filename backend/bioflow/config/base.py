"""
Config base classes and registry.

Each config is a dataclass subclassing ``BaseConfig``. Field metadata
(``ConfigField``) describes how a settings form renders and validates
each value; ``@register_config`` adds the class to the global registry.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from logging import getLogger
from typing import Any, Callable, Dict, List, Optional, Type

logger = getLogger(__name__)


class FieldType(str, Enum):
    """Input widget kind for a config field."""
    STRING = "string"
    PASSWORD = "password"
    NUMBER = "number"
    BOOLEAN = "boolean"
    SELECT = "select"


@dataclass
class ConfigField:
    """Display and validation metadata for one config field."""
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
        """Serialize for the settings UI (``apply_change`` is dropped)."""
        return {
            "name": self.name,
            "type": self.field_type.value,
            "label": self.label,
            "description": self.description,
            "default": self.default,
            "required": self.required,
            "placeholder": self.placeholder,
            "options": list(self.options),
            "min": self.min_value,
            "max": self.max_value,
            "group": self.group,
            "secure": self.secure,
        }


@dataclass
class BaseConfig:
    """Base class for all dataclass configs."""

    @classmethod
    def get_default_instance(cls) -> "BaseConfig":
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
        return asdict(self)

    def validate(self) -> List[str]:
        """Check values against field metadata.

        Returns a list of error messages (empty = valid).
        """
        errors: List[str] = []
        values = self.to_dict()
        for meta in self.get_fields_metadata():
            value = values.get(meta.name)
            if meta.required and value in (None, ""):
                errors.append(f"{meta.label} is required.")
                continue
            if meta.field_type == FieldType.NUMBER and value is not None:
                if meta.min_value is not None and value < meta.min_value:
                    errors.append(f"{meta.label} must be >= {meta.min_value}.")
                if meta.max_value is not None and value > meta.max_value:
                    errors.append(f"{meta.label} must be <= {meta.max_value}.")
        return errors

    def apply_changes(self, changes: Dict[str, Any]) -> List[str]:
        """Apply a settings form submission.

        Everything is checked first; if any value is rejected nothing is
        applied and the error messages are returned. Otherwise each field
        whose value changed is assigned and its ``apply_change`` hook runs.
        """
        fields_meta = {meta.name: meta for meta in self.get_fields_metadata()}
        errors: List[str] = []
        for name, value in changes.items():
            meta = fields_meta.get(name)
            if meta is None:
                errors.append(f"Unknown setting: {name}")
            elif not isinstance(value, type(getattr(self, name))):
                errors.append(f"{meta.label} must be a {type(getattr(self, name)).__name__}.")
        if errors:
            return errors

        errors = replace(self, **changes).validate()
        if errors:
            return errors

        applied = []
        for name, value in changes.items():
            if getattr(self, name) == value:
                continue
            setattr(self, name, value)
            hook = fields_meta[name].apply_change
            if hook is not None:
                hook(value)
            applied.append(name)
        if applied:
            logger.info(f"Config '{self.get_config_name()}' updated: {applied}")
        return []


# ── Registry ──

_CONFIG_REGISTRY: Dict[str, Type[BaseConfig]] = {}


def register_config(cls: Type[BaseConfig]) -> Type[BaseConfig]:
    """Class decorator: add a config class to the global registry."""
    name = cls.get_config_name()
    if name in _CONFIG_REGISTRY and _CONFIG_REGISTRY[name] is not cls:
        logger.warning(f"Config '{name}' re-registered by {cls.__name__}")
    _CONFIG_REGISTRY[name] = cls
    return cls


def get_config_class(name: str) -> Optional[Type[BaseConfig]]:
    return _CONFIG_REGISTRY.get(name)


def list_config_classes() -> List[Type[BaseConfig]]:
    return list(_CONFIG_REGISTRY.values())
