"""Holder for the daemon's rotating session id."""

from __future__ import annotations

import threading
from typing import Optional


class SessionState:
    """Zero-or-one current session id, shared by every request of a client.

    The daemon issues one id per authenticated identity, so a single
    instance is shared across threads. Reads and writes go through a lock
    so a renewal is never observed half-way.
    """

    def __init__(self, session_id: Optional[str] = None):
        self._session_id = session_id or None
        self._lock = threading.Lock()

    def get(self) -> Optional[str]:
        with self._lock:
            return self._session_id

    def set(self, session_id: str) -> None:
        """Replace the current id unconditionally."""
        with self._lock:
            self._session_id = session_id

    def __repr__(self) -> str:
        return f"SessionState(session_id={self.get()!r})"
