# app/infrastructure/jobs/session_sweeper.py
"""
Background sweeper that evicts idle conversation sessions.

Runs on a fixed interval, independent of request handling. Started and
stopped by the application's startup/shutdown hooks.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable

from app.domain.services.session_store import SessionStore

logger = logging.getLogger("session_sweeper")


class SessionSweeper:
    def __init__(
        self,
        store: SessionStore,
        interval: float,
        max_idle: float,
        clock: Callable[[], float] = time.time,
    ):
        self._store = store
        self._interval = interval
        self._max_idle = max_idle
        self._clock = clock
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def run_once(self) -> int:
        """Run one sweep and return the number of sessions removed."""
        removed = self._store.sweep_expired(self._clock(), self._max_idle)
        if removed:
            logger.info("Evicted %d idle session(s); %d active", removed, len(self._store))
        return removed

    async def _loop(self) -> None:
        """Infinite loop that sweeps at the configured interval."""
        logger.info(
            "Session sweeper started (interval=%ss, max_idle=%ss)",
            self._interval,
            self._max_idle,
        )
        while True:
            await asyncio.sleep(self._interval)
            try:
                self.run_once()
            except Exception:
                logger.exception("Session sweep failed")

    def start(self) -> None:
        """Start the sweeper task. Safe to call multiple times."""
        if self.running:
            logger.debug("Session sweeper already running")
            return
        self._task = asyncio.create_task(self._loop())

    async def stop(self) -> None:
        """Cancel the sweeper task and wait for it to finish."""
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Session sweeper stopped")
