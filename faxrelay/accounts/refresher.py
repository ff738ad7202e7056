"""Directory refresher: periodic background reload of the account directory."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from faxrelay.accounts.store import DirectoryStore

logger = logging.getLogger(__name__)

REFRESH_INTERVAL_SECONDS = 10.0


class DirectoryRefresher:
    """Reloads the account directory every fixed interval.

    There is no jitter and no backoff; every tick is an independent attempt.
    ``stop()`` cancels the loop so the owner can shut down cleanly.
    """

    def __init__(
        self,
        store: DirectoryStore,
        *,
        interval: float = REFRESH_INTERVAL_SECONDS,
    ) -> None:
        self._store = store
        self._interval = interval
        self._task: asyncio.Task[None] | None = None
        self._running = False

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the refresh loop."""
        if self._task is not None:
            return
        self._running = True
        self._task = asyncio.create_task(self._loop(), name="directory-refresh")
        self._task.add_done_callback(_log_task_crash)
        logger.info("Account refresh started (every %.0fs)", self._interval)

    async def stop(self) -> None:
        """Cancel the refresh loop and wait for it to finish."""
        self._running = False
        if self._task:
            task = self._task
            self._task = None
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        logger.info("Account refresh stopped")

    async def _loop(self) -> None:
        try:
            while self._running:
                await asyncio.sleep(self._interval)
                if not self._running:
                    break
                try:
                    await self._store.refresh()
                except asyncio.CancelledError:
                    raise
                except Exception:
                    logger.exception("Account refresh tick failed (continuing)")
        except asyncio.CancelledError:
            logger.debug("Account refresh loop cancelled")


def _log_task_crash(task: asyncio.Task[None]) -> None:
    """Log if the refresh task crashes unexpectedly."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Account refresh loop crashed: %s", exc, exc_info=exc)
