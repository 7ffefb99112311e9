"""Periodic driver for :class:`SyncService`.

The loop owns one asyncio task. Whoever starts it must stop it; using the
loop as an async context manager does both.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from core.settings import OFFLINE_SYNC
from services.sync_service import SyncReport, SyncService


logger = logging.getLogger(__name__)

RunTask = Callable[[Callable[[], Awaitable[None]]], Any]


class SyncLoop:
    def __init__(self, service: SyncService, interval_sec: float | None = None) -> None:
        self.service = service
        self.interval = interval_sec if interval_sec is not None else OFFLINE_SYNC.interval_sec
        self._task: Any = None
        self._running = False
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._running

    async def tick(self) -> Optional[SyncReport]:
        """Run one replay pass in a worker thread so the event loop stays free."""

        try:
            return await asyncio.to_thread(self.service.sync_pending)
        except Exception:
            logger.exception("Offline sync tick failed")
            return None
        finally:
            self.ticks += 1

    async def _loop(self) -> None:
        while self._running:
            await self.tick()
            if not self._running:
                break
            await asyncio.sleep(self.interval)

    def start(self, run_task: Optional[RunTask] = None) -> None:
        """Start ticking. ``run_task`` lets a host (e.g. ``flet.Page.run_task``) own the task."""

        if self._running:
            return
        self._running = True
        if run_task is not None:
            self._task = run_task(self._loop)
        else:
            self._task = asyncio.get_running_loop().create_task(self._loop())

    def stop(self) -> None:
        self._running = False
        task, self._task = self._task, None
        if task is not None:
            try:
                task.cancel()
            except RuntimeError as exc:
                logger.debug("Sync task already finished: %s", exc)

    async def __aenter__(self) -> "SyncLoop":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        task = self._task
        self.stop()
        if isinstance(task, asyncio.Task):
            try:
                await task
            except asyncio.CancelledError:
                pass


__all__ = ["SyncLoop"]
