from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from lingualeap.audio.device import AudioDevice
from lingualeap.contracts import StudyMode
from lingualeap.data.loader import SentenceLoader
from lingualeap.playback.controller import PlaybackController
from lingualeap.playback.scheduler import Scheduler
from lingualeap.study.session import StudySession
from lingualeap.study.timer import PracticeTimer


@dataclass(frozen=True)
class StudyServices:
    controller: PlaybackController
    session: StudySession
    loader: SentenceLoader
    timer: PracticeTimer


def _ms(value: Any) -> float:
    return max(0, int(value)) / 1000.0


def build_study_services(
    args: Any,
    *,
    device: AudioDevice,
    scheduler: Scheduler,
    notify: Callable[..., object] | None = None,
    logger: logging.Logger | None = None,
) -> StudyServices:
    loader = SentenceLoader(str(args.data_path), notify=notify, logger=logger)
    controller = PlaybackController(
        device,
        scheduler,
        notify=notify,
        data_dir=loader.data_dir,
        settle_sec=_ms(args.settle_ms),
        clip_gap_sec=_ms(args.clip_gap_ms),
        target_tail_sec=_ms(args.target_tail_ms),
        logger=logger,
    )
    controller.set_playback_rate(float(args.playback_speed))
    session = StudySession(
        controller,
        scheduler,
        notify=notify,
        chunk_size=int(args.chunk_size),
        study_mode=StudyMode(str(args.study_mode)),
        ui_language=str(args.ui_language),
        advance_delay_sec=_ms(args.advance_delay_ms),
        logger=logger,
    )
    timer = PracticeTimer(scheduler, int(args.practice_minutes))
    return StudyServices(controller=controller, session=session, loader=loader, timer=timer)


def load_study_data(services: StudyServices, selected_chunk: int = 0) -> bool:
    result = services.session.load(services.loader)
    if result.ok and selected_chunk:
        services.session.select_chunk(int(selected_chunk))
    return result.ok
