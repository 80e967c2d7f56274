from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional


class ClipKind(str, Enum):
    SOURCE = "source"
    TARGET = "target"


class Severity(str, Enum):
    INFO = "info"
    ERROR = "error"


class StudyMode(str, Enum):
    READ_LISTEN = "read_listen"
    ACTIVE_RECALL = "active_recall"


@dataclass(frozen=True)
class Sentence:
    id: int
    source_text: str  # French
    target_text: str  # learner's reference language
    audio_source: Optional[str] = None
    audio_target: Optional[str] = None
    verb_source: Optional[str] = None
    verb_target: Optional[str] = None
    # Albanian reference fields, used when the UI language is "sq"
    target_text_sq: Optional[str] = None
    audio_target_sq: Optional[str] = None
    verb_target_sq: Optional[str] = None

    def has_audio(self) -> bool:
        return bool(self.audio_source) or bool(self.audio_target)

    def localized(self, ui_language: str) -> "Sentence":
        """
        Swap in the reference language matching the UI.

        Albanian text falls back to English when missing. The Albanian clip
        and verb do not, so an "sq" sentence without audioSrcAl plays French
        only.
        """
        if ui_language != "sq":
            return self
        return replace(
            self,
            target_text=self.target_text_sq or self.target_text,
            audio_target=self.audio_target_sq,
            verb_target=self.verb_target_sq,
        )


@dataclass(frozen=True)
class PlaybackRequest:
    """Token for one play attempt; async completions carrying an older id are stale."""
    sequence_id: int


# notify(message, severity)
NotifySink = Callable[[str, Severity], None]
