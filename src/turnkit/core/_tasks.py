"""Task and callback helpers shared by the turnkit components."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable, Coroutine, Iterable
from typing import Any

logger = logging.getLogger("turnkit.tasks")


class TaskScheduler:
    """Tracks fire-and-forget tasks so they can be drained or cancelled.

    Works from both the event-loop thread and foreign threads (microphone
    listeners, audio callbacks). On foreign threads the task is created via
    ``call_soon_threadsafe`` on the loop cached from the last in-loop call.
    """

    def __init__(self, owner: str) -> None:
        self._owner = owner
        self._tasks: set[asyncio.Task[Any]] = set()
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def schedule(self, coro: Coroutine[Any, Any, Any], *, name: str) -> None:
        """Schedule *coro* as a tracked task."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            cached = self._loop
            if cached is not None and cached.is_running():
                cached.call_soon_threadsafe(self._create_task, coro, name)
            else:
                logger.warning("%s: no running loop for task %s; dropping", self._owner, name)
                coro.close()
            return
        self._loop = loop
        self._create_task(coro, name)

    def _create_task(self, coro: Coroutine[Any, Any, Any], name: str) -> None:
        task = asyncio.get_running_loop().create_task(coro, name=f"{self._owner}:{name}")
        task.add_done_callback(self._task_done)
        self._tasks.add(task)

    def _task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Unhandled exception in scheduled task %s: %s",
                task.get_name(),
                exc,
                exc_info=exc,
            )

    async def drain(self) -> None:
        """Wait until every tracked task (including ones they spawn) is done."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def cancel_all(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()


def fire_callbacks(
    callbacks: Iterable[Callable[..., Any]],
    *args: Any,
    scheduler: TaskScheduler,
    name: str,
) -> None:
    """Call each callback synchronously; coroutine results become tasks."""
    for cb in list(callbacks):
        try:
            result = cb(*args)
        except Exception:
            logger.exception("Callback %s for %s raised", getattr(cb, "__name__", cb), name)
            continue
        if inspect.isawaitable(result):
            scheduler.schedule(_await(result), name=name)


async def await_callbacks(
    callbacks: Iterable[Callable[..., Any]],
    *args: Any,
    name: str,
) -> None:
    """Call each callback in order, awaiting coroutine results.

    Failures are logged and never propagate to the caller.
    """
    for cb in list(callbacks):
        try:
            result = cb(*args)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Callback %s for %s raised", getattr(cb, "__name__", cb), name)


async def _await(awaitable: Any) -> Any:
    return await awaitable
