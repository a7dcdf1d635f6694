"""
Frame-boundary scheduling for the detection loop.

A tick is scheduled only after the previous tick finished, so slow
inference never piles up overlapping ticks. Tests swap in a scheduler
they can step by hand.
"""
import asyncio
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional

from magic_lens import config

TickCallback = Callable[[], Awaitable[None]]


class FrameScheduler(ABC):
    @abstractmethod
    def schedule(self, callback: TickCallback):
        """Run `callback` at the next frame boundary. Returns a cancel handle."""
        ...

    @abstractmethod
    def cancel(self, handle):
        ...


class AsyncioFrameScheduler(FrameScheduler):
    def __init__(self, interval: float | None = None):
        self.interval = config.FRAME_INTERVAL_S if interval is None else interval
        self._tasks: set[asyncio.Task] = set()

    def schedule(self, callback: TickCallback):
        loop = asyncio.get_running_loop()
        return loop.call_later(self.interval, self._spawn, callback)

    def _spawn(self, callback: TickCallback):
        task = asyncio.ensure_future(callback())
        # keep a strong ref until done, the loop only holds weak ones
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def cancel(self, handle: Optional[asyncio.TimerHandle]):
        if handle is not None:
            handle.cancel()

    async def drain(self):
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
