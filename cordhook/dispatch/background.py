"""Background executors for deferred handler work.

The dispatcher never awaits deferred work. It hands each task to an
executor supplied by the host, which decides how long the task may live.
Tasks reach that executor only after the synchronous response is built.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Protocol, Union

logger = logging.getLogger(__name__)

Task = Union[Awaitable[Any], Callable[[], Any]]


class BackgroundExecutor(Protocol):
    def spawn(self, task: Task) -> None: ...


async def run_task(task: Task) -> None:
    """Run a deferred task to completion, logging rather than raising failures."""
    try:
        result = task() if callable(task) else task
        if inspect.isawaitable(result):
            await result
    except Exception:
        logger.exception("Deferred background task failed")


class AsyncioBackgroundExecutor:
    """Schedules tasks on the running event loop and tracks them until done."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task] = set()

    def spawn(self, task: Task) -> None:
        scheduled = asyncio.get_running_loop().create_task(run_task(task))
        self._tasks.add(scheduled)
        scheduled.add_done_callback(self._tasks.discard)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for every outstanding task, e.g. at shutdown."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))


class StarletteBackgroundExecutor:
    """Defers tasks to Starlette ``BackgroundTasks``, run after the response is sent."""

    def __init__(self, background_tasks: Any) -> None:
        self._background_tasks = background_tasks

    def spawn(self, task: Task) -> None:
        self._background_tasks.add_task(run_task, task)


class CollectingExecutor:
    """Holds tasks until ``run_all()`` or ``release_into()``.

    The dispatcher collects each handler's deferred work here and only hands
    it to the host executor once the synchronous response exists.
    """

    def __init__(self) -> None:
        self.tasks: list[Task] = []

    def spawn(self, task: Task) -> None:
        self.tasks.append(task)

    def release_into(self, executor: BackgroundExecutor) -> None:
        """Forward held tasks to *executor* in the order they were spawned."""
        tasks, self.tasks = self.tasks, []
        for task in tasks:
            executor.spawn(task)

    async def run_all(self) -> None:
        while self.tasks:
            await run_task(self.tasks.pop(0))
