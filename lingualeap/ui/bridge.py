from __future__ import annotations

import queue
from typing import Callable, Optional

UiCall = Callable[[], None]


class EventBus:
    """
    Thread-safe handoff from the audio driver thread -> UI thread.
    The device pushes callables; the UI timer drains and runs them (non-blocking).
    """
    def __init__(self, maxsize: int = 64):
        self.q: "queue.Queue[UiCall]" = queue.Queue(maxsize=maxsize)

    def push(self, fn: UiCall) -> None:
        try:
            self.q.put_nowait(fn)
        except queue.Full:
            # drop oldest to keep UI responsive
            try:
                _ = self.q.get_nowait()
            except queue.Empty:
                return
            try:
                self.q.put_nowait(fn)
            except queue.Full:
                return

    def pop(self) -> Optional[UiCall]:
        try:
            return self.q.get_nowait()
        except queue.Empty:
            return None


def drain_event_bus(bus: EventBus, max_items: int) -> int:
    drained = 0
    while drained < max_items:
        fn = bus.pop()
        if fn is None:
            break
        fn()
        drained += 1
    return drained
