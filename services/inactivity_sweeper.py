"""
Inactivity Sweeper
Periodically times out focus sessions that have been left open too long
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from models.focus_session import CloseReason, utcnow
from services.session_manager import SessionManager
from services.session_store import SessionStore

logger = logging.getLogger("deepwork-tracker")


@dataclass
class SweepResult:
    """Outcome of one sweep cycle"""
    candidates: int = 0
    closed: int = 0
    skipped: int = 0
    failed: int = 0


class InactivitySweeper:
    """Closes stale in-progress sessions on a timer and on demand"""

    def __init__(self,
                 store: SessionStore,
                 manager: SessionManager,
                 timeout_minutes: int = 180,
                 interval_minutes: int = 15,
                 clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize the sweeper.

        Args:
            store: Persistence for sessions
            manager: Lifecycle manager whose close path is used
            timeout_minutes: Sessions open longer than this are timed out
            interval_minutes: Time between scheduled sweeps
            clock: Returns the current aware UTC time (injectable for tests)
        """
        self.store = store
        self.manager = manager
        self.timeout_minutes = timeout_minutes
        self.interval_minutes = interval_minutes
        self.clock = clock or utcnow
        self._task = None
        self._running = False

        # Statistics
        self._runs = 0
        self._failed_runs = 0
        self._timed_out = 0
        self._last_run = None

    async def sweep(self, now: Optional[datetime] = None) -> SweepResult:
        """
        Run one sweep cycle.

        A failure to query the store propagates; a failure closing a single
        session is logged and the rest of the batch continues.
        """
        now = now or self.clock()
        cutoff = now - timedelta(minutes=self.timeout_minutes)
        result = SweepResult()

        self._runs += 1
        self._last_run = now
        try:
            candidates = await self.store.find_stale(cutoff)
        except Exception:
            self._failed_runs += 1
            raise
        result.candidates = len(candidates)

        for session in candidates:
            elapsed = session.elapsed_minutes(now)
            if elapsed <= self.timeout_minutes:
                logger.debug(f"Session {session.id} not yet timed out ({elapsed:.1f} minutes)")
                result.skipped += 1
                continue

            try:
                closed = await self.manager.close(session, CloseReason.TIMEOUT, now=now)
            except Exception as e:
                logger.error(f"Failed to time out session {session.id}: {e}")
                result.failed += 1
                continue

            if closed:
                result.closed += 1
            else:
                result.skipped += 1

        self._timed_out += result.closed
        logger.info(
            f"Sweep finished: {result.candidates} candidates, {result.closed} timed out, "
            f"{result.skipped} skipped, {result.failed} failed"
        )
        return result

    async def start(self):
        """Start the periodic sweep task"""
        self._running = True
        self._task = asyncio.create_task(self._sweep_loop())
        logger.info(
            f"Inactivity sweeper started (timeout={self.timeout_minutes}m, "
            f"interval={self.interval_minutes}m)"
        )

    async def stop(self):
        """Stop the periodic sweep task"""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Inactivity sweeper stopped")

    async def _sweep_loop(self):
        """Periodic sweep; a failed cycle does not stop the next one"""
        while self._running:
            try:
                await asyncio.sleep(self.interval_minutes * 60)
                await self.sweep()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in sweep cycle: {e}")

    @property
    def stats(self) -> dict:
        """Get sweeper statistics"""
        return {
            "runs": self._runs,
            "failed_runs": self._failed_runs,
            "sessions_timed_out": self._timed_out,
            "last_run": self._last_run.isoformat() if self._last_run else None,
            "running": self._running,
        }
