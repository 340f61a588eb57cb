"""
Session Logging Module

Provides per-session mutation logs for the workflow editor.
"""
from bioflow.logging.session_logger import (
    SessionLogEntry,
    SessionLogger,
    get_session_logger,
    remove_session_logger,
)

__all__ = ['SessionLogEntry', 'SessionLogger', 'get_session_logger', 'remove_session_logger']
