from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class PlaybackState(str, Enum):
    IDLE = "idle"
    PLAYING_SOURCE = "playing_source"
    PLAYING_TARGET = "playing_target"


@dataclass
class SequencerState:
    is_running: bool = False
    current_index: int = 0

    def set_running(self) -> None:
        self.is_running = True
        self.current_index = 0

    def advance(self) -> int:
        self.current_index += 1
        return self.current_index

    def set_stopped(self) -> None:
        self.is_running = False
        self.current_index = 0
