"""
Configuration package.

Sub-configs register themselves with ``@register_config``; importing
``bioflow.config.sub_config`` makes them all available.
"""

from bioflow.config.base import (
    BaseConfig,
    ConfigField,
    FieldType,
    get_config_class,
    list_config_classes,
    register_config,
)
from bioflow.config.sub_config import EditorConfig, get_editor_config

__all__ = [
    "BaseConfig",
    "ConfigField",
    "FieldType",
    "get_config_class",
    "list_config_classes",
    "register_config",
    "EditorConfig",
    "get_editor_config",
]
