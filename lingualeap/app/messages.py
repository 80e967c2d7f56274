from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from lingualeap.contracts import Severity

MESSAGES: dict[str, dict[str, str]] = {
    "sentence_data_loaded": {
        "en": "Sentence data loaded.",
        "sq": "Të dhënat e fjalive u ngarkuan.",
    },
    "no_sentences_loaded": {
        "en": "No sentences were found in the data file.",
        "sq": "Nuk u gjetën fjali në skedarin e të dhënave.",
    },
    "error_loading_sentence_data": {
        "en": "Error loading sentence data: {error}",
        "sq": "Gabim gjatë ngarkimit të fjalive: {error}",
    },
    "chunk_loaded": {
        "en": "Chunk {chunk_num} loaded.",
        "sq": "Pjesa {chunk_num} u ngarkua.",
    },
    "chunk_empty": {
        "en": "Chunk {chunk_num} is empty.",
        "sq": "Pjesa {chunk_num} është bosh.",
    },
    "error_playing_audio": {
        "en": "Could not play audio: {source}",
        "sq": "Audio nuk mund të luhej: {source}",
    },
    "no_sentence_to_play": {
        "en": "There is no sentence to play.",
        "sq": "Nuk ka fjali për të luajtur.",
    },
    "no_sentences_in_chunk_to_play": {
        "en": "There are no sentences in this chunk to play.",
        "sq": "Nuk ka fjali në këtë pjesë për të luajtur.",
    },
    "starting_continuous_play": {
        "en": "Playing all sentences in this chunk.",
        "sq": "Po luhen të gjitha fjalitë e kësaj pjese.",
    },
    "continuous_play_stopped": {
        "en": "Continuous play stopped.",
        "sq": "Luajtja e vazhdueshme u ndal.",
    },
    "practice_time_up": {
        "en": "Practice time is up. Switch to native content!",
        "sq": "Koha e praktikës mbaroi. Kalo te përmbajtja në gjuhën amtare!",
    },
    "ai_request_failed": {
        "en": "The AI assistant is unavailable: {error}",
        "sq": "Asistenti AI nuk është i disponueshëm: {error}",
    },
}

UI_LANGUAGES: tuple[str, ...] = ("en", "sq")


def translate(key: str, ui_language: str = "en", **params: Any) -> str:
    lang = ui_language if ui_language in UI_LANGUAGES else "en"
    text = MESSAGES.get(key, {}).get(lang) or key
    for name, value in params.items():
        text = text.replace("{" + name + "}", str(value))
    return text


class Notifier:
    """Formats message keys and forwards them to the single notify(message, severity) sink."""

    def __init__(
        self,
        sink: Optional[Callable[[str, Severity], None]] = None,
        *,
        ui_language: str = "en",
        logger: logging.Logger | None = None,
    ) -> None:
        self.sink = sink
        self.ui_language = ui_language
        self.logger = logger

    def __call__(self, key: str, severity: Severity = Severity.INFO, **params: Any) -> str:
        message = translate(key, self.ui_language, **params)
        if self.logger is not None:
            level = logging.WARNING if severity == Severity.ERROR else logging.INFO
            self.logger.log(level, "notify", extra={"key": key, "severity": severity.value})
        if self.sink is not None:
            self.sink(message, severity)
        return message
