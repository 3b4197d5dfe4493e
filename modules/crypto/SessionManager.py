#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import secrets
import threading
import time

from modules.crypto.SRP6Session import SRP6Session
from utils.Logger import Logger


class SessionManager:
    """
    In-memory store of pending SRP6 sessions keyed by a random session id.

    Sessions older than ``timeout`` seconds are expired and evicted on every
    access, so abandoned challenges never accumulate. Age is measured from
    ``add_session`` with the manager's own clock.
    """

    def __init__(self, timeout: float = 300, clock=time.monotonic) -> None:
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self.timeout = timeout
        self._clock = clock
        self._lock = threading.RLock()
        self.sessions: dict[str, SRP6Session] = {}
        self._issued_at: dict[str, float] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self.sessions)

    def purge_expired(self) -> int:
        """Expire and drop stale sessions. Returns how many were removed."""
        with self._lock:
            now = self._clock()
            stale = [sid for sid, issued in self._issued_at.items() if now - issued >= self.timeout]
            for sid in stale:
                del self._issued_at[sid]
                self.sessions.pop(sid).expire()

        if stale:
            Logger.debug(f"[SRP6] Purged {len(stale)} expired session(s)")
        return len(stale)

    def add_session(self, session: SRP6Session) -> str:
        """Store a session and return its new id."""
        self.purge_expired()
        session_id = secrets.token_urlsafe(24)
        with self._lock:
            self.sessions[session_id] = session
            self._issued_at[session_id] = self._clock()
        return session_id

    def get_session(self, session_id: str) -> SRP6Session | None:
        """Return a live session without removing it, or None."""
        self.purge_expired()
        with self._lock:
            return self.sessions.get(session_id)

    def take_session(self, session_id: str) -> SRP6Session | None:
        """
        Atomically remove and return a live session.

        Only the caller that takes a session may advance it; a second take
        for the same id returns None.
        """
        self.purge_expired()
        with self._lock:
            self._issued_at.pop(session_id, None)
            return self.sessions.pop(session_id, None)

    def remove_session(self, session_id: str) -> bool:
        with self._lock:
            self._issued_at.pop(session_id, None)
            return self.sessions.pop(session_id, None) is not None
