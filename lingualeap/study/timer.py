from __future__ import annotations

from typing import Callable, Optional

from lingualeap.playback.scheduler import Scheduler, TimerHandle


def format_time(total_seconds: int) -> str:
    total_seconds = max(0, int(total_seconds))
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes:02d}:{seconds:02d}"


class PracticeTimer:
    """Countdown that raises the switch-to-native-content alert at zero."""

    def __init__(
        self,
        scheduler: Scheduler,
        minutes: int = 15,
        *,
        on_tick: Optional[Callable[[int], None]] = None,
        on_expired: Optional[Callable[[], None]] = None,
    ) -> None:
        self.scheduler = scheduler
        self.minutes = max(1, int(minutes))
        self.remaining = self.minutes * 60
        self.is_running = False
        self.show_switch_alert = False
        self.on_tick = on_tick
        self.on_expired = on_expired
        self._handle: TimerHandle | None = None

    def set_minutes(self, minutes: int) -> None:
        self.minutes = max(1, int(minutes))
        self.remaining = self.minutes * 60

    def start(self) -> None:
        self.stop()
        self.remaining = self.minutes * 60
        self.is_running = True
        self.show_switch_alert = False
        self._schedule()

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self.is_running = False

    def dismiss_alert(self) -> None:
        self.show_switch_alert = False

    def _schedule(self) -> None:
        self._handle = self.scheduler.call_later(1.0, self._tick)

    def _tick(self) -> None:
        self._handle = None
        if not self.is_running:
            return
        if self.remaining <= 1:
            self.remaining = 0
            self.stop()
            self.show_switch_alert = True
            if self.on_tick is not None:
                self.on_tick(0)
            if self.on_expired is not None:
                self.on_expired()
            return
        self.remaining -= 1
        if self.on_tick is not None:
            self.on_tick(self.remaining)
        self._schedule()
