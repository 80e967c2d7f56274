from __future__ import annotations

import asyncio
from typing import Callable, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """
    One-shot timers on the single thread that owns playback state.
    Every suspension point of the playback core goes through here.
    """
    def call_later(self, delay_sec: float, fn: Callable[[], None]) -> TimerHandle:
        ...


class AsyncioScheduler:
    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self.loop = loop or asyncio.get_running_loop()

    def call_later(self, delay_sec: float, fn: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(max(0.0, float(delay_sec)), fn)

    def dispatch(self, fn: Callable[[], None]) -> None:
        # Safe from any thread (PortAudio callbacks).
        self.loop.call_soon_threadsafe(fn)
