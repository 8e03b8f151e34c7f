from __future__ import annotations

import threading
import uuid
from collections import OrderedDict
from typing import Tuple

from bfvm.debugger import DebugSession


class SessionStore:
    """Debug sessions keyed by id; the least recently used one is evicted at capacity."""

    def __init__(self, capacity: int = 64) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._sessions: "OrderedDict[str, DebugSession]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def add(self, session: DebugSession) -> Tuple[str, DebugSession]:
        session_id = uuid.uuid4().hex
        with self._lock:
            self._sessions[session_id] = session
            while len(self._sessions) > self.capacity:
                self._sessions.popitem(last=False)
        return session_id, session

    def get(self, session_id: str) -> DebugSession:
        with self._lock:
            session = self._sessions[session_id]
            self._sessions.move_to_end(session_id)
            return session

    def discard(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None


__all__ = ["SessionStore"]
