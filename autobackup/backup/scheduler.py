"""Periodic backup check running as an asyncio background task."""

import asyncio
from typing import Optional

from .._utils import logger
from .models import OperationResult
from .store import BackupStore


class BackupScheduler:
    """Poll the backup store and create a backup whenever one is due.

    Ticks once on start (optional) and then every ``interval_seconds``. A
    tick that finds the store busy is skipped, so ticks never overlap with
    each other or with a user-triggered backup or restore. Failures are
    logged and retried on the next tick.
    """

    def __init__(self, store: BackupStore, interval_seconds: float = 300.0, run_on_start: bool = True):
        self.store = store
        self.interval_seconds = interval_seconds
        self.run_on_start = run_on_start
        self.running = False
        self.task: Optional[asyncio.Task] = None

    async def start(self) -> None:
        if self.running:
            logger.warning("Backup scheduler already running")
            return

        self.running = True
        self.task = asyncio.create_task(self._run_loop())
        logger.info(f"Backup scheduler started (every {self.interval_seconds:g}s)")

    async def stop(self) -> None:
        if not self.running:
            return

        self.running = False
        if self.task:
            self.task.cancel()
            try:
                await self.task
            except asyncio.CancelledError:
                pass
            self.task = None

        logger.info("Backup scheduler stopped")

    async def _run_loop(self) -> None:
        if self.run_on_start:
            await self.tick()

        while self.running:
            await asyncio.sleep(self.interval_seconds)
            await self.tick()

    async def tick(self) -> Optional[OperationResult]:
        """Run one check. Returns None when the tick was skipped or failed."""
        if self.store.is_busy:
            logger.debug("Backup store busy, skipping tick")
            return None

        try:
            result = await self.store.run_if_due()
        except Exception as e:
            logger.error(f"Error in backup scheduler tick: {e}")
            return None

        if result.ok and result.value is not None:
            logger.info(f"Scheduled backup created: {result.value.file_name}")
        elif not result.ok:
            logger.warning(f"Scheduled backup skipped: {result.error}")
        return result

    async def trigger_now(self) -> OperationResult:
        """Create a backup immediately, bypassing the due check."""
        return await self.store.create_backup()
