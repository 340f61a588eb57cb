"""
Session Logger: bounded in-memory record of workflow mutations.

One logger per store session. The store appends an entry after every
successful mutation; entries are also forwarded to the standard
``logging`` tree at DEBUG level.
"""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from logging import getLogger
from typing import Any, Deque, Dict, List, Optional

logger = getLogger(__name__)

_DEFAULT_MAX_ENTRIES = 500


@dataclass(frozen=True)
class SessionLogEntry:
    """A single recorded mutation."""
    operation: str
    workflow_id: Optional[str] = None
    detail: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation,
            "workflow_id": self.workflow_id,
            "detail": dict(self.detail),
            "timestamp": self.timestamp,
        }


class SessionLogger:
    """Ring buffer of ``SessionLogEntry`` for one session."""

    def __init__(self, session_id: str, max_entries: int = _DEFAULT_MAX_ENTRIES) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.session_id = session_id
        self._entries: Deque[SessionLogEntry] = deque(maxlen=max_entries)
        self._lock = threading.Lock()

    @property
    def max_entries(self) -> int:
        return self._entries.maxlen or 0

    def log(self, operation: str, workflow_id: Optional[str] = None, **detail: Any) -> SessionLogEntry:
        entry = SessionLogEntry(operation=operation, workflow_id=workflow_id, detail=detail)
        with self._lock:
            self._entries.append(entry)
        logger.debug(f"[{self.session_id}] {operation} workflow={workflow_id} {detail}")
        return entry

    def entries(self, workflow_id: Optional[str] = None) -> List[SessionLogEntry]:
        """Recorded entries, oldest first, optionally for one workflow."""
        with self._lock:
            items = list(self._entries)
        if workflow_id is None:
            return items
        return [e for e in items if e.workflow_id == workflow_id]

    def operations(self) -> List[str]:
        return [e.operation for e in self.entries()]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


# ── Registry ──

_loggers: Dict[str, SessionLogger] = {}
_registry_lock = threading.Lock()


def get_session_logger(
    session_id: str,
    create_if_missing: bool = False,
    max_entries: int = _DEFAULT_MAX_ENTRIES,
) -> Optional[SessionLogger]:
    """Return the logger for ``session_id``, creating it on request."""
    with _registry_lock:
        session_logger = _loggers.get(session_id)
        if session_logger is None and create_if_missing:
            session_logger = SessionLogger(session_id, max_entries=max_entries)
            _loggers[session_id] = session_logger
        return session_logger


def remove_session_logger(session_id: str) -> bool:
    with _registry_lock:
        return _loggers.pop(session_id, None) is not None
