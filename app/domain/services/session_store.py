# app/domain/services/session_store.py
"""
In-memory, per-sender session store.

The store is the sole owner of Session records: every read hands back a
detached snapshot and every write goes through ``update``/``touch``.
Mutations for one sender are serialized with ``lock(sender_id)``; other
senders never contend. Map operations contain no ``await`` so they are
atomic with respect to other coroutines on the loop, including the sweep.

Sessions live only in process memory and are lost on restart.
"""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Iterable, Mapping, Optional

from app.domain.models.conversation import Session

logger = logging.getLogger("session_store")


class SessionStore:
    def __init__(
        self,
        entry_step: str,
        valid_steps: Iterable[str],
        clock: Callable[[], float] = time.time,
    ):
        self._entry_step = entry_step
        self._valid_steps = frozenset(valid_steps)
        if entry_step not in self._valid_steps:
            raise ValueError(f"Entry step {entry_step!r} is not a valid step")
        self._clock = clock
        self._sessions: dict[str, Session] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        # coroutines holding or waiting on each sender's lock
        self._lock_users: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, sender_id: str) -> bool:
        return sender_id in self._sessions

    # ── locking ─────────────────────────────────────────────

    @asynccontextmanager
    async def lock(self, sender_id: str) -> AsyncIterator[None]:
        """Serialize all work on one sender's session."""
        lock = self._locks.get(sender_id)
        if lock is None:
            lock = self._locks[sender_id] = asyncio.Lock()
        self._lock_users[sender_id] = self._lock_users.get(sender_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[sender_id] -= 1
            if not self._lock_users[sender_id]:
                del self._lock_users[sender_id]
                if sender_id not in self._sessions:
                    self._locks.pop(sender_id, None)

    def is_locked(self, sender_id: str) -> bool:
        """True while any coroutine holds or waits for the sender's lock."""
        return self._lock_users.get(sender_id, 0) > 0

    # ── reads ───────────────────────────────────────────────

    def get(self, sender_id: str) -> Optional[Session]:
        session = self._sessions.get(sender_id)
        return session.snapshot() if session else None

    # ── writes ──────────────────────────────────────────────

    def get_or_create(self, sender_id: str) -> Session:
        session = self._sessions.get(sender_id)
        if session is None:
            session = self._new_session(sender_id)
            self._sessions[sender_id] = session
            logger.info("Session created for %s at step %s", sender_id, session.current_step)
        return session.snapshot()

    def reset(self, sender_id: str) -> Session:
        """Replace any existing session with a fresh one at the entry step."""
        session = self._new_session(sender_id)
        self._sessions[sender_id] = session
        logger.info("Session reset for %s", sender_id)
        return session.snapshot()

    def update(
        self,
        sender_id: str,
        *,
        step: Optional[str] = None,
        fields: Optional[Mapping[str, Any]] = None,
        append: Optional[Mapping[str, Any]] = None,
    ) -> Optional[Session]:
        """Merge collected fields and/or move to ``step``.

        Returns the updated snapshot, or None (no-op) when the sender has
        no session. ``append`` adds items to list-valued fields.
        """
        session = self._sessions.get(sender_id)
        if session is None:
            return None
        if step is not None and step not in self._valid_steps:
            raise ValueError(f"Unknown step {step!r}")

        if fields:
            session.collected.update(fields)
        if append:
            for key, value in append.items():
                session.collected.setdefault(key, []).append(value)
        if step is not None:
            session.current_step = step
        session.last_activity_at = self._clock()
        return session.snapshot()

    def touch(self, sender_id: str) -> None:
        """Refresh last activity without changing anything else."""
        session = self._sessions.get(sender_id)
        if session is not None:
            session.last_activity_at = self._clock()

    def delete(self, sender_id: str) -> None:
        if self._sessions.pop(sender_id, None) is not None:
            logger.info("Session deleted for %s", sender_id)

    def sweep_expired(self, now: float, max_idle: float) -> int:
        """Delete sessions idle longer than ``max_idle`` seconds.

        Senders whose lock is currently held are mid-transition and are
        left alone until the next sweep.
        """
        expired = [
            sender_id
            for sender_id, session in self._sessions.items()
            if now - session.last_activity_at > max_idle
            and not self.is_locked(sender_id)
        ]
        for sender_id in expired:
            del self._sessions[sender_id]
            self._locks.pop(sender_id, None)

        if expired:
            logger.info("Swept %d expired session(s)", len(expired))
        return len(expired)

    def _new_session(self, sender_id: str) -> Session:
        now = self._clock()
        return Session(
            sender_id=sender_id,
            current_step=self._entry_step,
            collected={},
            created_at=now,
            last_activity_at=now,
        )
