"""Cancellable delayed calls on the asyncio event loop"""

import asyncio
import inspect
import logging
from typing import Any, Callable, Optional

logger = logging.getLogger("queryview.scheduling")


class ScheduledTask:
    """A callback that runs once after a delay

    Scheduling again supersedes the pending call, which is how both the poll
    timer and the search debounce are implemented. When the callback is a
    coroutine function, it runs as an asyncio task which :meth:`cancel` also
    cancels.
    """

    def __init__(
        self,
        callback: Callable[[], Any],
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self.callback = callback
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    @property
    def pending(self) -> bool:
        """True if the callback is scheduled or its coroutine still running"""
        if self._handle is not None:
            return True
        return self._task is not None and not self._task.done()

    def schedule(self, delay: float) -> None:
        """(Re)schedule the callback `delay` seconds from now"""
        if self._handle is not None:
            self._handle.cancel()
        self._handle = self.loop.call_later(delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def _fire(self) -> None:
        self._handle = None
        if inspect.iscoroutinefunction(self.callback):
            self._task = self.loop.create_task(self.callback())
            self._task.add_done_callback(self._task_done)
        else:
            self.callback()

    def _task_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        if task.exception() is not None:
            logger.error(
                "Scheduled task %s failed",
                getattr(self.callback, "__qualname__", self.callback),
                exc_info=task.exception(),
            )
