"""
Workflow Editor Configuration.

Controls the initial workflow tab, the last-workflow guard, generated
id length, and the size of the per-session mutation log.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import List, Optional

from bioflow.config.base import BaseConfig, ConfigField, FieldType, register_config
from bioflow.config.sub_config.general.env_utils import env_sync, read_env_defaults

logger = getLogger(__name__)


@register_config
@dataclass
class EditorConfig(BaseConfig):
    """Workflow editor session settings."""

    default_workflow_name: str = "Workflow 1"
    keep_last_workflow: bool = True
    id_suffix_length: int = 8
    history_limit: int = 500

    _ENV_MAP = {
        "default_workflow_name": "BIOFLOW_DEFAULT_WORKFLOW_NAME",
        "keep_last_workflow": "BIOFLOW_KEEP_LAST_WORKFLOW",
        "id_suffix_length": "BIOFLOW_ID_SUFFIX_LENGTH",
        "history_limit": "BIOFLOW_HISTORY_LIMIT",
    }

    @classmethod
    def get_default_instance(cls) -> "EditorConfig":
        defaults = read_env_defaults(cls._ENV_MAP, cls.__dataclass_fields__)
        instance = cls(**defaults)
        errors = instance.validate()
        if errors:
            logger.warning(f"Invalid editor settings in environment, using defaults: {errors}")
            return cls()
        return instance

    @classmethod
    def get_config_name(cls) -> str:
        return "editor"

    @classmethod
    def get_display_name(cls) -> str:
        return "Workflow Editor"

    @classmethod
    def get_description(cls) -> str:
        return "Initial workflow tab, deletion guard, id length and session log size."

    @classmethod
    def get_fields_metadata(cls) -> List[ConfigField]:
        return [
            ConfigField(
                name="default_workflow_name",
                field_type=FieldType.STRING,
                label="Default Workflow Name",
                description="Name of the workflow tab opened with a new session",
                default="Workflow 1",
                required=True,
                group="session",
                apply_change=env_sync("BIOFLOW_DEFAULT_WORKFLOW_NAME"),
            ),
            ConfigField(
                name="keep_last_workflow",
                field_type=FieldType.BOOLEAN,
                label="Keep Last Workflow",
                description="Reject deleting the only remaining workflow",
                default=True,
                group="session",
                apply_change=env_sync("BIOFLOW_KEEP_LAST_WORKFLOW"),
            ),
            ConfigField(
                name="id_suffix_length",
                field_type=FieldType.NUMBER,
                label="Id Suffix Length",
                description="Hex characters appended to generated workflow/node/edge ids",
                default=8,
                min_value=4,
                max_value=32,
                group="ids",
                apply_change=env_sync("BIOFLOW_ID_SUFFIX_LENGTH"),
            ),
            ConfigField(
                name="history_limit",
                field_type=FieldType.NUMBER,
                label="Session Log Size",
                description="Mutation events kept per session log",
                default=500,
                min_value=1,
                max_value=100000,
                group="logging",
                apply_change=env_sync("BIOFLOW_HISTORY_LIMIT"),
            ),
        ]


# ── Singleton ──

_config_instance: Optional[EditorConfig] = None


def get_editor_config() -> EditorConfig:
    """Return the process-wide EditorConfig, read from the environment once."""
    global _config_instance
    if _config_instance is None:
        _config_instance = EditorConfig.get_default_instance()
    return _config_instance
