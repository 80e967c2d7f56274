from __future__ import annotations

from typing import Callable

import pytest

from lingualeap.audio.device import AudioDevice, AudioDeviceError


class _ManualHandle:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """call_later on a virtual clock; advance() fires due callbacks in order."""

    def __init__(self) -> None:
        self.now = 0.0
        self._seq = 0
        self._timers: list[tuple[float, int, Callable[[], None], _ManualHandle]] = []

    def call_later(self, delay_sec: float, fn: Callable[[], None]) -> _ManualHandle:
        handle = _ManualHandle()
        self._seq += 1
        self._timers.append((self.now + max(0.0, float(delay_sec)), self._seq, fn, handle))
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for t in self._timers if not t[3].cancelled)

    def advance(self, sec: float) -> None:
        target = self.now + sec
        while True:
            live = [t for t in self._timers if not t[3].cancelled and t[0] <= target + 1e-9]
            if not live:
                break
            entry = min(live, key=lambda t: (t[0], t[1]))
            self._timers.remove(entry)
            self.now = max(self.now, entry[0])
            entry[2]()
        self._timers = [t for t in self._timers if not t[3].cancelled]
        self.now = target


class FakeAudioDevice(AudioDevice):
    def __init__(self) -> None:
        super().__init__()
        self.calls: list[tuple] = []
        self.loaded: str | None = None
        self.playing = False
        self.rate = 1.0
        self.fail_load: set[str] = set()
        self.fail_play = False

    @property
    def has_source(self) -> bool:
        return self.loaded is not None

    def load(self, path: str) -> None:
        self.calls.append(("load", path))
        if any(path.endswith(name) for name in self.fail_load):
            raise AudioDeviceError(f"Audio file not found: {path}")
        self.loaded = path

    def set_rate(self, rate: float) -> None:
        self.calls.append(("set_rate", rate))
        self.rate = rate
        if self.playing:
            # restarts the open stream, as SoundDeviceAudioDevice does
            self.playing = False
            self.play()

    def play(self) -> None:
        self.calls.append(("play", self.loaded))
        if self.fail_play:
            raise AudioDeviceError("Failed to open audio output")
        self.playing = True

    def pause(self) -> None:
        self.calls.append(("pause",))
        self.playing = False

    def reset_position(self) -> None:
        self.calls.append(("reset_position",))

    def release(self) -> None:
        self.calls.append(("release",))
        self.loaded = None
        self.playing = False

    def finish_clip(self) -> None:
        """Simulate the driver reporting end-of-clip."""
        self.playing = False
        if self.on_ended is not None:
            self.on_ended()

    def fail_clip(self, detail: str = "decode error") -> None:
        self.playing = False
        if self.on_error is not None:
            self.on_error(detail)

    def played(self) -> list[str]:
        return [c[1] for c in self.calls if c[0] == "play"]


class RecordingNotify:
    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def __call__(self, key, severity=None, **params):
        self.calls.append((key, severity, params))

    def keys(self) -> list[str]:
        return [c[0] for c in self.calls]


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def device() -> FakeAudioDevice:
    return FakeAudioDevice()


@pytest.fixture
def notify() -> RecordingNotify:
    return RecordingNotify()
