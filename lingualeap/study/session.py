from __future__ import annotations

import logging
from typing import Callable, List, Optional

from lingualeap.app.logging_setup import log_event
from lingualeap.contracts import PlaybackRequest, Sentence, Severity, StudyMode
from lingualeap.data.loader import LoadResult, SentenceLoader
from lingualeap.playback.controller import PlaybackController
from lingualeap.playback.scheduler import Scheduler, TimerHandle
from lingualeap.playback.sequencer import DEFAULT_ADVANCE_DELAY_SEC, ContinuousSequencer
from lingualeap.study.chunks import DEFAULT_CHUNK_SIZE, ChunkManager


class StudySession:
    """
    All page-level study state in one place: loaded sentences, the current
    chunk and sentence, study mode, answer visibility and looping. The UI
    reads attributes and calls the mutation methods; on_change fires after
    every mutation that the UI should redraw for.
    """

    def __init__(
        self,
        controller: PlaybackController,
        scheduler: Scheduler,
        *,
        notify: Optional[Callable[..., object]] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        study_mode: StudyMode = StudyMode.READ_LISTEN,
        ui_language: str = "en",
        advance_delay_sec: float = DEFAULT_ADVANCE_DELAY_SEC,
        logger: logging.Logger | None = None,
    ) -> None:
        self.controller = controller
        self.scheduler = scheduler
        self.notify = notify
        self.logger = logger
        self.advance_delay_sec = max(0.0, float(advance_delay_sec))
        self.ui_language = ui_language

        self.chunks = ChunkManager(chunk_size)
        self.sentences: List[Sentence] = []
        self.chunk: List[Sentence] = []
        self.current_index = 0
        self.study_mode = study_mode
        self.is_answer_revealed = study_mode != StudyMode.ACTIVE_RECALL
        self.is_looping = False
        self.load_error: Optional[str] = None
        self.on_change: Optional[Callable[[], None]] = None

        self.sequencer = ContinuousSequencer(
            controller,
            scheduler,
            notify=notify,
            on_index_change=self._on_sequencer_index,
            on_reveal=self._reveal,
            advance_delay_sec=self.advance_delay_sec,
            logger=logger,
        )
        controller.on_sequence_end = self._on_sequence_end
        self._loop_pending: TimerHandle | None = None

    @property
    def current_sentence(self) -> Optional[Sentence]:
        if 0 <= self.current_index < len(self.chunk):
            return self.chunk[self.current_index]
        return None

    @property
    def is_busy(self) -> bool:
        return self.controller.is_playing or self.sequencer.is_running

    def load(self, loader: SentenceLoader) -> LoadResult:
        result = loader.load()
        self.load_error = result.error
        self.sentences = [s.localized(self.ui_language) for s in result.sentences]
        self.controller.data_dir = loader.data_dir
        self.chunks.set_sentences(self.sentences)
        self.apply_chunk()
        return result

    def apply_chunk(self) -> None:
        self._stop_all()
        if not self.sentences:
            self.chunk = []
            self.current_index = 0
            self._changed()
            return

        self.chunk = self.chunks.current_chunk()
        self.current_index = 0
        self._reset_reveal()
        chunk_num = self.chunks.selected + 1
        if self.notify is not None:
            if self.chunk:
                self.notify("chunk_loaded", Severity.INFO, chunk_num=chunk_num)
            else:
                self.notify("chunk_empty", Severity.INFO, chunk_num=chunk_num)
        log_event(self.logger, logging.INFO, "chunk_applied", chunk_num=chunk_num, size=len(self.chunk))
        self._changed()

    def set_chunk_size(self, size: int) -> None:
        self.chunks.set_chunk_size(size)
        self.apply_chunk()

    def select_chunk(self, chunk_num: int) -> None:
        self.chunks.select(chunk_num)
        self.apply_chunk()

    def toggle_play_pause(self) -> None:
        if self.is_busy:
            self._stop_all()
            self._changed()
            return
        sentence = self.current_sentence
        if sentence is None:
            if self.notify is not None:
                self.notify("no_sentence_to_play", Severity.ERROR)
            return
        self.controller.play(sentence)
        self._changed()

    def play_all(self) -> None:
        self._cancel_loop()
        self.sequencer.start(self.chunk)
        self._changed()

    def next_sentence(self) -> None:
        self._stop_all()
        if self.current_index < len(self.chunk) - 1:
            self.current_index += 1
            self._reset_reveal()
        self._changed()

    def prev_sentence(self) -> None:
        self._stop_all()
        if self.current_index > 0:
            self.current_index -= 1
            self._reset_reveal()
        self._changed()

    def reveal_answer(self) -> None:
        self.is_answer_revealed = True
        sentence = self.current_sentence
        if sentence is not None and not self.is_busy:
            self.controller.play(sentence)
        self._changed()

    def set_study_mode(self, mode: StudyMode) -> None:
        self._stop_all()
        self.study_mode = StudyMode(mode)
        self._reset_reveal()
        self._changed()

    def set_looping(self, looping: bool) -> None:
        self.is_looping = bool(looping)
        if not self.is_looping:
            self._cancel_loop()
        self._changed()

    def set_playback_rate(self, rate: float) -> None:
        self.controller.set_playback_rate(rate)
        self._changed()

    def close(self) -> None:
        self._cancel_loop()
        self.sequencer.state.set_stopped()
        self.controller.close()

    def _on_sequence_end(self, request: PlaybackRequest) -> None:
        if self.is_looping and not self.sequencer.is_running:
            self._cancel_loop()
            self._loop_pending = self.scheduler.call_later(
                self.advance_delay_sec,
                lambda: self._replay(request),
            )
        elif not self.sequencer.handle_sequence_end(request):
            log_event(self.logger, logging.DEBUG, "sequence_end_idle", sequence_id=request.sequence_id)
        self._changed()

    def _replay(self, request: PlaybackRequest) -> None:
        self._loop_pending = None
        sentence = self.current_sentence
        if (
            sentence is None
            or not self.controller.is_current(request)
            or not self.is_looping
            or self.sequencer.is_running
        ):
            log_event(self.logger, logging.DEBUG, "loop_replay_skipped", sequence_id=request.sequence_id)
            return
        self.controller.play(sentence)
        self._changed()

    def _on_sequencer_index(self, index: int) -> None:
        self.current_index = index
        self._reset_reveal()
        self._changed()

    def _reveal(self) -> None:
        self.is_answer_revealed = True

    def _reset_reveal(self) -> None:
        self.is_answer_revealed = self.study_mode != StudyMode.ACTIVE_RECALL or self.sequencer.is_running

    def _stop_all(self) -> None:
        self._cancel_loop()
        if self.sequencer.is_running:
            self.sequencer.stop()
        else:
            self.controller.stop()

    def _cancel_loop(self) -> None:
        if self._loop_pending is not None:
            self._loop_pending.cancel()
            self._loop_pending = None

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()
