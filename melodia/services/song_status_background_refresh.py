"""
Background Refresh
Detached status refreshes scheduled from the read path
"""

import asyncio
import time
from typing import Set

from ..core.job_source import DemoJob, JobSource
from ..core.logging import status_logger
from .song_status_demo_handler import DemoModeHandler
from .song_status_production_handler import ProductionModeHandler


class BackgroundRefresher:
    """Runs refreshes as fire-and-forget tasks.

    Failures are logged and never reach the request that scheduled them.
    References to running tasks are kept until completion so they are not
    garbage collected mid-flight, and so shutdown can wait for them.
    """

    def __init__(self, demo_handler: DemoModeHandler, production_handler: ProductionModeHandler):
        self.demo_handler = demo_handler
        self.production_handler = production_handler
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def _run(self, song_id: int, job: JobSource) -> None:
        start = time.perf_counter()
        try:
            if isinstance(job, DemoJob):
                await self.demo_handler.refresh(song_id, job)
            else:
                await self.production_handler.refresh(song_id, job)
        except Exception as e:
            status_logger.log_refresh_failed(song_id, job.mode, str(e))
            return

        status_logger.log_refresh_completed(
            song_id,
            job.mode,
            (time.perf_counter() - start) * 1000
        )

    def refresh_in_background(self, song_id: int, job: JobSource) -> asyncio.Task:
        task = asyncio.create_task(self._run(song_id, job))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        status_logger.log_refresh_scheduled(song_id, job.mode)
        return task

    async def drain(self) -> None:
        """Wait for every scheduled refresh to finish"""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
