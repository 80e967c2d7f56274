from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from lingualeap.app.logging_setup import log_event
from lingualeap.app.state import PlaybackState
from lingualeap.audio.device import AudioDevice, AudioDeviceError
from lingualeap.contracts import ClipKind, PlaybackRequest, Sentence, Severity
from lingualeap.playback.scheduler import Scheduler, TimerHandle

DEFAULT_SETTLE_SEC = 0.05
DEFAULT_CLIP_GAP_SEC = 0.5
DEFAULT_TARGET_TAIL_SEC = 0.5
PLAYBACK_SPEEDS: tuple[float, ...] = (0.5, 0.75, 1.0, 1.25, 1.5)


def resolve_audio_path(src: str, data_dir: str | Path) -> Path:
    """Map "/data/audio/x.wav", "data/audio/x.wav" and "audio/x.wav" to <data_dir>/audio/x.wav."""
    rel = src.strip().replace("\\", "/").lstrip("/")
    if rel.startswith("data/"):
        rel = rel[len("data/"):]
    return Path(data_dir) / rel


class PlaybackController:
    """
    Plays a sentence's French clip, then its reference-language clip, on the
    single audio device.

    Each play() takes a fresh PlaybackRequest. Every timer and device callback
    captures that request and is dropped if a newer one has been issued
    since (stop() also invalidates). That comparison is the only
    cancellation mechanism; in-flight device calls are never interrupted,
    their results are ignored.
    """

    def __init__(
        self,
        device: AudioDevice,
        scheduler: Scheduler,
        *,
        notify: Optional[Callable[..., object]] = None,
        data_dir: str | Path = ".",
        settle_sec: float = DEFAULT_SETTLE_SEC,
        clip_gap_sec: float = DEFAULT_CLIP_GAP_SEC,
        target_tail_sec: float = DEFAULT_TARGET_TAIL_SEC,
        logger: logging.Logger | None = None,
    ) -> None:
        self.device = device
        self.scheduler = scheduler
        self.notify = notify
        self.data_dir = Path(data_dir)
        self.settle_sec = max(0.0, float(settle_sec))
        self.clip_gap_sec = max(0.0, float(clip_gap_sec))
        self.target_tail_sec = max(0.0, float(target_tail_sec))
        self.logger = logger

        self.on_sequence_end: Optional[Callable[[PlaybackRequest], None]] = None
        self.sequence_running: Callable[[], bool] = lambda: False

        self.state = PlaybackState.IDLE
        self.is_playing = False
        self.current_source_type: ClipKind | None = None
        self.playback_rate = 1.0

        self._counter = 0
        self._pending: TimerHandle | None = None
        self._clip_path: Path | None = None

    @property
    def current_request(self) -> PlaybackRequest:
        return PlaybackRequest(sequence_id=self._counter)

    def is_current(self, request: PlaybackRequest) -> bool:
        return request.sequence_id == self._counter

    def play(self, sentence: Sentence, part_of_sequence: bool = False) -> PlaybackRequest | None:
        if part_of_sequence and not self.sequence_running():
            log_event(self.logger, logging.DEBUG, "play_skipped_sequence_stopped", sentence_id=sentence.id)
            return None

        self.stop()
        self._counter += 1
        request = PlaybackRequest(sequence_id=self._counter)
        log_event(
            self.logger,
            logging.INFO,
            "play_requested",
            sequence_id=request.sequence_id,
            sentence_id=sentence.id,
            part_of_sequence=part_of_sequence,
        )

        if not sentence.has_audio():
            self._finish(request)
            return request

        self._pending = self.scheduler.call_later(self.settle_sec, lambda: self._begin(request, sentence))
        return request

    def stop(self) -> None:
        self._counter += 1
        self._cancel_pending()
        if self.device.has_source:
            self.device.pause()
            self.device.reset_position()
            self.device.release()
        self.device.on_ended = None
        self.device.on_error = None
        was_playing = self.is_playing
        self._clear_playing()
        if was_playing:
            log_event(self.logger, logging.INFO, "playback_stopped", sequence_id=self._counter)

    def set_playback_rate(self, rate: float) -> None:
        rate = float(rate)
        if rate not in PLAYBACK_SPEEDS:
            raise ValueError(f"unsupported playback rate: {rate}")
        self.playback_rate = rate
        if not self.device.has_source:
            return
        try:
            self.device.set_rate(rate)
        except AudioDeviceError as e:
            kind = self.current_source_type or ClipKind.SOURCE
            self._on_clip_error(self.current_request, kind, self._clip_path or Path(), str(e))

    def close(self) -> None:
        self.stop()
        self.on_sequence_end = None

    def _begin(self, request: PlaybackRequest, sentence: Sentence) -> None:
        self._pending = None
        if not self._check_current(request, "begin"):
            return
        if sentence.audio_source:
            self._start_clip(
                request,
                ClipKind.SOURCE,
                sentence.audio_source,
                after=lambda: self._after_source(request, sentence),
            )
        else:
            self._start_clip(
                request,
                ClipKind.TARGET,
                str(sentence.audio_target),
                after=lambda: self._after_target_only(request),
            )

    def _after_source(self, request: PlaybackRequest, sentence: Sentence) -> None:
        target = sentence.audio_target
        if not target:
            self._finish(request)
            return
        self._pending = self.scheduler.call_later(
            self.clip_gap_sec,
            lambda: self._play_target(request, target),
        )

    def _play_target(self, request: PlaybackRequest, src: str) -> None:
        self._pending = None
        if not self._check_current(request, "target_delay"):
            return
        self._start_clip(request, ClipKind.TARGET, src, after=lambda: self._finish(request))

    def _after_target_only(self, request: PlaybackRequest) -> None:
        self._pending = self.scheduler.call_later(self.target_tail_sec, lambda: self._finish(request))

    def _start_clip(
        self,
        request: PlaybackRequest,
        kind: ClipKind,
        src: str,
        *,
        after: Callable[[], None],
    ) -> None:
        path = resolve_audio_path(src, self.data_dir)
        self._clip_path = path
        self.device.on_ended = lambda: self._on_clip_ended(request, kind, after)
        self.device.on_error = lambda detail: self._on_clip_error(request, kind, path, detail)
        try:
            self.device.load(str(path))
            self.device.set_rate(self.playback_rate)
            self.device.play()
        except AudioDeviceError as e:
            self._on_clip_error(request, kind, path, str(e))
            return

        self.is_playing = True
        self.current_source_type = kind
        self.state = PlaybackState.PLAYING_SOURCE if kind == ClipKind.SOURCE else PlaybackState.PLAYING_TARGET
        log_event(
            self.logger,
            logging.INFO,
            "clip_started",
            sequence_id=request.sequence_id,
            clip=kind.value,
            path=str(path),
            rate=self.playback_rate,
        )

    def _on_clip_ended(self, request: PlaybackRequest, kind: ClipKind, after: Callable[[], None]) -> None:
        if not self._check_current(request, f"ended_{kind.value}"):
            return
        log_event(self.logger, logging.INFO, "clip_ended", sequence_id=request.sequence_id, clip=kind.value)
        after()

    def _on_clip_error(self, request: PlaybackRequest, kind: ClipKind, path: Path, detail: str) -> None:
        log_event(
            self.logger,
            logging.WARNING,
            "clip_failed",
            sequence_id=request.sequence_id,
            clip=kind.value,
            path=str(path),
            detail=detail,
        )
        if self.notify is not None:
            self.notify("error_playing_audio", Severity.ERROR, source=f"{kind.value} ({path}) - {detail}")
        if not self.is_current(request):
            return
        if self.device.has_source:
            self.device.release()
        self._clear_playing()
        self._finish(request)

    def _finish(self, request: PlaybackRequest) -> None:
        if not self._check_current(request, "finish"):
            return
        self._cancel_pending()
        if self.device.has_source:
            self.device.release()
        self._clear_playing()
        log_event(self.logger, logging.INFO, "sequence_end", sequence_id=request.sequence_id)
        if self.on_sequence_end is not None:
            self.on_sequence_end(request)

    def _check_current(self, request: PlaybackRequest, stage: str) -> bool:
        if self.is_current(request):
            return True
        log_event(
            self.logger,
            logging.DEBUG,
            "stale_callback_ignored",
            stage=stage,
            sequence_id=request.sequence_id,
            active_id=self._counter,
        )
        return False

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _clear_playing(self) -> None:
        self.is_playing = False
        self.current_source_type = None
        self._clip_path = None
        self.state = PlaybackState.IDLE
