"""
Sub-config package.

Importing this package registers every concrete config class.
"""

from bioflow.config.sub_config.general.editor_config import (  # noqa: F401
    EditorConfig,
    get_editor_config,
)

__all__ = ["EditorConfig", "get_editor_config"]
