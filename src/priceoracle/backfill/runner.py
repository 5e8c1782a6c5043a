"""JobRunner — fire-and-forget asyncio tasks for backfill jobs."""

import asyncio
import logging
from collections.abc import Coroutine
from functools import partial
from typing import Any

logger = logging.getLogger(__name__)


class JobRunner:
    """Holds strong references to running jobs so they are not garbage collected mid-run.

    The submitter never sees a job's outcome; crashes are logged here.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Task] = {}

    def submit(self, job_id: str, job: Coroutine[Any, Any, None]) -> asyncio.Task:
        task = asyncio.create_task(job, name=f"backfill-{job_id}")
        self._tasks[job_id] = task
        task.add_done_callback(partial(self._on_done, job_id))
        return task

    def _on_done(self, job_id: str, task: asyncio.Task) -> None:
        self._tasks.pop(job_id, None)
        if task.cancelled():
            logger.warning("Backfill job %s was cancelled", job_id)
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Backfill job %s crashed", job_id, exc_info=exc)

    @property
    def active(self) -> int:
        return len(self._tasks)

    def is_running(self, job_id: str) -> bool:
        return job_id in self._tasks

    async def drain(self) -> None:
        """Wait until every submitted job has finished, including ones submitted meanwhile."""
        while self._tasks:
            await asyncio.gather(*self._tasks.values(), return_exceptions=True)

    async def shutdown(self) -> None:
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
