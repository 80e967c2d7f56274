from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, List, Optional

from lingualeap.app.diagnostics import summarize_exception
from lingualeap.app.logging_setup import log_event
from lingualeap.contracts import Sentence, Severity


class SentenceDataError(RuntimeError):
    pass


@dataclass
class LoadResult:
    sentences: List[Sentence] = field(default_factory=list)
    error: Optional[str] = None
    skipped: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def sentence_from_raw(item: dict[str, Any]) -> Sentence:
    """Map one raw data.json record to a Sentence."""
    if not isinstance(item, dict):
        raise SentenceDataError(f"record must be an object, got {type(item).__name__}")
    try:
        sentence_id = int(str(item["id"]).strip())
    except (KeyError, ValueError) as e:
        raise SentenceDataError(f"record has no integer id: {item.get('id')!r}") from e
    source = _opt_str(item.get("targetSentence"))
    if source is None:
        raise SentenceDataError(f"record {sentence_id} has no targetSentence")
    return Sentence(
        id=sentence_id,
        source_text=source,
        target_text=_opt_str(item.get("englishSentence")) or "",
        audio_source=_opt_str(item.get("audioSrcFr")),
        audio_target=_opt_str(item.get("audioSrcEn")),
        verb_source=_opt_str(item.get("verb")),
        verb_target=_opt_str(item.get("verbEnglish")),
        target_text_sq=_opt_str(item.get("albanianSentence")),
        audio_target_sq=_opt_str(item.get("audioSrcAl")),
        verb_target_sq=_opt_str(item.get("verbAlbanian")),
    )


def read_sentence_file(path: str | Path) -> Any:
    with Path(path).open("r", encoding="utf-8-sig") as f:
        return json.load(f)


class SentenceLoader:
    def __init__(
        self,
        data_path: str | Path,
        *,
        notify: Optional[Callable[..., object]] = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.data_path = Path(data_path)
        self.notify = notify
        self.logger = logger

    @property
    def data_dir(self) -> Path:
        return self.data_path.parent

    def load(self) -> LoadResult:
        try:
            raw = read_sentence_file(self.data_path)
        except (OSError, ValueError) as e:
            detail = summarize_exception(f"{type(e).__name__}: {e}")
            log_event(self.logger, logging.ERROR, "sentence_data_load_failed", path=str(self.data_path), detail=detail)
            if self.notify is not None:
                self.notify("error_loading_sentence_data", Severity.ERROR, error=detail)
            return LoadResult(error=detail)

        if not isinstance(raw, list) or not raw:
            log_event(self.logger, logging.WARNING, "sentence_data_empty", path=str(self.data_path))
            if self.notify is not None:
                self.notify("no_sentences_loaded", Severity.ERROR)
            return LoadResult()

        result = LoadResult()
        for item in raw:
            try:
                result.sentences.append(sentence_from_raw(item))
            except SentenceDataError as e:
                result.skipped += 1
                log_event(self.logger, logging.WARNING, "sentence_record_skipped", detail=str(e))

        if not result.sentences:
            if self.notify is not None:
                self.notify("no_sentences_loaded", Severity.ERROR)
            return result

        log_event(
            self.logger,
            logging.INFO,
            "sentence_data_loaded",
            path=str(self.data_path),
            count=len(result.sentences),
            skipped=result.skipped,
        )
        if self.notify is not None:
            self.notify("sentence_data_loaded", Severity.INFO)
        return result
