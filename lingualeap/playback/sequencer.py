from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from lingualeap.app.logging_setup import log_event
from lingualeap.app.state import SequencerState
from lingualeap.contracts import PlaybackRequest, Sentence, Severity
from lingualeap.playback.controller import PlaybackController
from lingualeap.playback.scheduler import Scheduler, TimerHandle

DEFAULT_ADVANCE_DELAY_SEC = 0.2


class ContinuousSequencer:
    """Plays every sentence of a chunk in order, then stops and rewinds to 0."""

    def __init__(
        self,
        controller: PlaybackController,
        scheduler: Scheduler,
        *,
        notify: Optional[Callable[..., object]] = None,
        on_index_change: Optional[Callable[[int], None]] = None,
        on_reveal: Optional[Callable[[], None]] = None,
        advance_delay_sec: float = DEFAULT_ADVANCE_DELAY_SEC,
        logger: logging.Logger | None = None,
    ) -> None:
        self.controller = controller
        self.scheduler = scheduler
        self.notify = notify
        self.on_index_change = on_index_change
        self.on_reveal = on_reveal
        self.advance_delay_sec = max(0.0, float(advance_delay_sec))
        self.logger = logger

        self.state = SequencerState()
        self._chunk: Sequence[Sentence] = ()
        self._pending: TimerHandle | None = None
        controller.sequence_running = lambda: self.state.is_running

    @property
    def is_running(self) -> bool:
        return self.state.is_running

    @property
    def current_index(self) -> int:
        return self.state.current_index

    def start(self, chunk: Sequence[Sentence]) -> None:
        if not chunk:
            if self.notify is not None:
                self.notify("no_sentences_in_chunk_to_play", Severity.ERROR)
            return

        self._cancel_pending()
        self.controller.stop()
        self._chunk = chunk
        self.state.set_running()
        self._publish_index(0)
        if self.on_reveal is not None:
            self.on_reveal()
        if self.notify is not None:
            self.notify("starting_continuous_play", Severity.INFO)
        log_event(self.logger, logging.INFO, "continuous_play_started", chunk_len=len(chunk))
        self.controller.play(chunk[0], part_of_sequence=True)

    def stop(self) -> None:
        self._cancel_pending()
        self.state.set_stopped()
        self.controller.stop()
        if self.notify is not None:
            self.notify("continuous_play_stopped", Severity.INFO)
        log_event(self.logger, logging.INFO, "continuous_play_stopped")

    def handle_sequence_end(self, request: PlaybackRequest) -> bool:
        """Advance on a sequence-end signal. Returns False when not running."""
        if not self.state.is_running:
            return False

        next_index = self.state.advance()
        if next_index >= len(self._chunk):
            log_event(self.logger, logging.INFO, "continuous_play_end_of_chunk", chunk_len=len(self._chunk))
            self.stop()
            return True

        self._publish_index(next_index)
        self._pending = self.scheduler.call_later(
            self.advance_delay_sec,
            lambda: self._play_index(request, next_index),
        )
        return True

    def _play_index(self, request: PlaybackRequest, index: int) -> None:
        self._pending = None
        if not self.controller.is_current(request) or not self.state.is_running:
            log_event(
                self.logger,
                logging.DEBUG,
                "continuous_advance_skipped",
                sequence_id=request.sequence_id,
                index=index,
            )
            return
        self.controller.play(self._chunk[index], part_of_sequence=True)

    def _publish_index(self, index: int) -> None:
        if self.on_index_change is not None:
            self.on_index_change(index)

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
