"""Bounded background task runner.

Export jobs are submitted here instead of being launched as unmanaged
``asyncio.create_task`` calls.  A semaphore caps how many submitted
coroutines run at once; the rest wait in ``PENDING`` until a slot frees up.
One runner is created per application and injected where needed.
"""

import asyncio
import enum
import uuid
from collections.abc import Coroutine
from typing import Any

from loguru import logger


class TaskStatus(enum.StrEnum):
    """Status of a submitted background task."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class BoundedTaskRunner:
    """In-process runner executing at most ``max_concurrency`` tasks at a time.

    Args:
        max_concurrency: Maximum number of tasks allowed in ``RUNNING``.
    """

    def __init__(self, max_concurrency: int = 4) -> None:
        if max_concurrency < 1:
            msg = f"max_concurrency must be at least 1, got {max_concurrency}"
            raise ValueError(msg)
        self._max_concurrency = max_concurrency
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._statuses: dict[str, TaskStatus] = {}
        self._tasks: dict[str, asyncio.Task[Any]] = {}

    @property
    def max_concurrency(self) -> int:
        return self._max_concurrency

    @property
    def active_count(self) -> int:
        """Number of tasks that have not reached a final status."""
        return sum(1 for task in self._tasks.values() if not task.done())

    def submit_task(self, coro: Coroutine[Any, Any, Any], *, task_id: str | None = None) -> str:
        """Submit a coroutine for background execution.

        Args:
            coro: The coroutine to execute.
            task_id: Optional identifier to track the task under; a UUID is
                generated when omitted.

        Returns:
            The task identifier.

        Raises:
            ValueError: If ``task_id`` is already tracked by this runner.
        """
        task_id = task_id or str(uuid.uuid4())
        if task_id in self._statuses:
            coro.close()
            msg = f"Task {task_id!r} already submitted"
            raise ValueError(msg)
        self._statuses[task_id] = TaskStatus.PENDING

        async def _run() -> None:
            try:
                async with self._semaphore:
                    self._statuses[task_id] = TaskStatus.RUNNING
                    try:
                        await coro
                    except asyncio.CancelledError:
                        self._statuses[task_id] = TaskStatus.CANCELLED
                        raise
                    except Exception:
                        self._statuses[task_id] = TaskStatus.FAILED
                        logger.exception(f"Background task {task_id} failed")
                    else:
                        self._statuses[task_id] = TaskStatus.COMPLETED
            finally:
                # Cancelled while still queued on the semaphore
                if self._statuses[task_id] is TaskStatus.PENDING:
                    coro.close()
                    self._statuses[task_id] = TaskStatus.CANCELLED

        task = asyncio.create_task(_run(), name=f"background-{task_id}")
        task.add_done_callback(lambda t: self._tasks.pop(task_id, None))
        self._tasks[task_id] = task
        return task_id

    def get_status(self, task_id: str) -> TaskStatus:
        """Get the current status of a background task.

        Raises:
            KeyError: If the task ID is not found.
        """
        return self._statuses[task_id]

    async def wait_all(self) -> None:
        """Wait until every task submitted so far has finished."""
        pending = list(self._tasks.values())
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel outstanding tasks and wait for them to unwind."""
        pending = [task for task in self._tasks.values() if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            logger.info(f"Cancelling {len(pending)} background task(s) on shutdown")
            await asyncio.gather(*pending, return_exceptions=True)
        for task_id, status in self._statuses.items():
            if status in (TaskStatus.PENDING, TaskStatus.RUNNING):
                self._statuses[task_id] = TaskStatus.CANCELLED
