from __future__ import annotations

import signal
import sys

from lingualeap.ai.factory import get_llm_client
from lingualeap.ai.flows import explain_grammar
from lingualeap.ai.schemas import ExplainGrammarInput
from lingualeap.app.config import resolve_args, save_user_config
from lingualeap.app.diagnostics import hint_for_exception
from lingualeap.app.logging_setup import setup_app_logger
from lingualeap.app.messages import Notifier
from lingualeap.app.runtime import run_ai_job
from lingualeap.app.services import build_study_services, load_study_data
from lingualeap.audio.device import AudioDeviceError, SoundDeviceAudioDevice
from lingualeap.contracts import Severity, StudyMode
from lingualeap.study.timer import format_time
from lingualeap.ui.bridge import EventBus, drain_event_bus


def main(argv: list[str] | None = None) -> int:
    args = resolve_args(argv)
    logger, log_dir, log_path = setup_app_logger(debug=bool(args.debug))
    logger.info("app_start", extra={"config_path": str(getattr(args, "config", "")), "argv": argv or []})

    if args.list_devices:
        try:
            print(SoundDeviceAudioDevice.list_devices())
        except AudioDeviceError as e:
            print(f"{e}\nHint: {hint_for_exception(str(e))}")
            return 1
        return 0

    from PyQt6 import QtCore, QtWidgets
    from lingualeap.app.main_window_qt import MainWindow
    from lingualeap.ui.qt_scheduler import QtScheduler

    app = QtWidgets.QApplication(sys.argv)
    main_window = MainWindow(ui_language=str(args.ui_language))

    bus = EventBus(maxsize=64)
    scheduler = QtScheduler(app)
    notify = Notifier(main_window.show_notification, ui_language=str(args.ui_language), logger=logger)
    device = SoundDeviceAudioDevice(dispatch=bus.push, device=args.output_device)
    services = build_study_services(args, device=device, scheduler=scheduler, notify=notify, logger=logger)
    session = services.session
    practice = services.timer

    def _render() -> None:
        main_window.render_session(
            sentence=session.current_sentence,
            index=session.current_index,
            chunk_len=len(session.chunk),
            revealed=session.is_answer_revealed,
            busy=session.is_busy,
            looping=session.is_looping,
            speed=session.controller.playback_rate,
            study_mode=session.study_mode,
            chunk_size=session.chunks.chunk_size,
            selected_chunk=session.chunks.selected,
            num_chunks=session.chunks.num_chunks,
        )

    last_chunk: list = []

    def _on_change() -> None:
        nonlocal last_chunk
        if session.chunk is not last_chunk:
            last_chunk = session.chunk
            main_window.set_chunk(session.chunk)
        _render()

    session.on_change = _on_change

    def _persist(**values) -> None:
        for key, value in values.items():
            setattr(args, key, value)
        save_user_config(dict(values), config_path=args.config)
        logger.info("settings_saved", extra={"changed_keys": sorted(values)})

    def _load() -> None:
        while not load_study_data(services, int(args.selected_chunk)):
            detail = session.load_error or ""
            if not main_window.ask_retry_load(detail, hint_for_exception(detail)):
                break
            logger.info("sentence_data_retry", extra={"path": str(args.data_path)})

    def _on_speed(speed: float) -> None:
        session.set_playback_rate(speed)
        _persist(playback_speed=speed)

    def _on_mode(mode: str) -> None:
        session.set_study_mode(StudyMode(mode))
        _persist(study_mode=mode)

    def _on_chunk_size(size: int) -> None:
        session.set_chunk_size(size)
        _persist(chunk_size=session.chunks.chunk_size, selected_chunk=session.chunks.selected)

    def _on_chunk_selected(chunk_num: int) -> None:
        session.select_chunk(chunk_num)
        _persist(selected_chunk=session.chunks.selected)

    def _on_minutes(minutes: int) -> None:
        practice.set_minutes(minutes)
        main_window.set_timer_text(format_time(practice.remaining))
        _persist(practice_minutes=practice.minutes)

    def _on_timer_expired() -> None:
        notify("practice_time_up", Severity.INFO)

    practice.on_tick = lambda remaining: main_window.set_timer_text(format_time(remaining))
    practice.on_expired = _on_timer_expired

    llm_client = None

    def _on_explain(sentence: str) -> None:
        nonlocal llm_client
        if llm_client is None:
            llm_client = get_llm_client(str(args.llm_provider), str(args.llm_model))
        client = llm_client

        def _failed(detail: str) -> None:
            main_window.show_grammar("")
            notify("ai_request_failed", Severity.ERROR, error=detail)

        run_ai_job(
            lambda: explain_grammar(client, ExplainGrammarInput(sentence=sentence), logger=logger),
            dispatch=bus.push,
            on_done=lambda out: main_window.show_grammar(out.explanation),
            on_error=_failed,
            logger=logger,
            name="lingualeap-explain-grammar",
        )

    main_window.play_pause_requested.connect(session.toggle_play_pause)
    main_window.prev_requested.connect(session.prev_sentence)
    main_window.next_requested.connect(session.next_sentence)
    main_window.play_all_requested.connect(session.play_all)
    main_window.reveal_requested.connect(session.reveal_answer)
    main_window.loop_toggled.connect(session.set_looping)
    main_window.speed_changed.connect(_on_speed)
    main_window.study_mode_changed.connect(_on_mode)
    main_window.chunk_size_changed.connect(_on_chunk_size)
    main_window.chunk_selected.connect(_on_chunk_selected)
    main_window.timer_minutes_changed.connect(_on_minutes)
    main_window.timer_start_requested.connect(practice.start)
    main_window.explain_requested.connect(_on_explain)

    timer = QtCore.QTimer()
    timer.timeout.connect(lambda: drain_event_bus(bus, 16))
    timer.start(max(10, int(args.poll_ms)))

    def _on_about_to_quit() -> None:
        logger.info("app_quit")
        timer.stop()
        practice.stop()
        session.close()

    app.aboutToQuit.connect(_on_about_to_quit)
    signal.signal(signal.SIGINT, lambda *_: app.quit())

    main_window.set_minutes(practice.minutes)
    main_window.set_timer_text(format_time(practice.remaining))
    main_window.show()
    _load()
    _on_change()

    print(f"LinguaLeap ready. Logs: {log_path}")
    logger.info("app_ready", extra={"log_dir": str(log_dir)})
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
