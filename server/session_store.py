"""
session_store.py — Thread-safe in-memory registry of simulation sessions.
Each session is owned by exactly one id; nothing is shared between them.
"""
from __future__ import annotations

import uuid
from collections import OrderedDict
from threading import Lock
from typing import Optional, Tuple

from keygenie import config
from keygenie.bb84 import SimulationSession
from keygenie.logging_config import get_logger
from keygenie.random_source import RandomSource

log = get_logger("keygenie.api")


class SessionStore:
    """
    Holds live sessions keyed by id.
    - Oldest session is evicted once capacity is reached
    - The lock guards the registry only; callers own a session's state
    """

    def __init__(self, capacity: int = config.MAX_SESSIONS):
        self._capacity = max(1, capacity)
        self._sessions: "OrderedDict[str, SimulationSession]" = OrderedDict()
        self._lock = Lock()

    def create(self, seed: Optional[int] = None) -> Tuple[str, SimulationSession]:
        session_id = uuid.uuid4().hex[:12]
        session = SimulationSession(RandomSource(seed))
        with self._lock:
            while len(self._sessions) >= self._capacity:
                evicted, _ = self._sessions.popitem(last=False)
                log.info("Session store full; evicted %s", evicted)
            self._sessions[session_id] = session
        return session_id, session

    def get(self, session_id: str) -> Optional[SimulationSession]:
        with self._lock:
            return self._sessions.get(session_id)

    def delete(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
