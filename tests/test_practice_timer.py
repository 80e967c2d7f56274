from __future__ import annotations

from lingualeap.study.timer import PracticeTimer, format_time


def test_format_time() -> None:
    assert format_time(0) == "00:00"
    assert format_time(65) == "01:05"
    assert format_time(15 * 60) == "15:00"
    assert format_time(-4) == "00:00"


def test_timer_counts_down_and_raises_alert(scheduler) -> None:
    ticks: list[int] = []
    expired: list[bool] = []
    timer = PracticeTimer(scheduler, 1, on_tick=ticks.append, on_expired=lambda: expired.append(True))
    timer.start()
    assert timer.is_running
    scheduler.advance(3.0)
    assert ticks == [59, 58, 57]

    scheduler.advance(57.0)
    assert timer.remaining == 0
    assert not timer.is_running
    assert timer.show_switch_alert
    assert ticks[-1] == 0
    assert expired == [True]
    assert scheduler.pending == 0

    timer.dismiss_alert()
    assert not timer.show_switch_alert


def test_stop_freezes_remaining(scheduler) -> None:
    timer = PracticeTimer(scheduler, 2)
    timer.start()
    scheduler.advance(10.0)
    timer.stop()
    scheduler.advance(30.0)
    assert timer.remaining == 110
    assert not timer.is_running


def test_start_restarts_from_full_duration(scheduler) -> None:
    timer = PracticeTimer(scheduler, 1)
    timer.start()
    scheduler.advance(20.0)
    timer.start()
    assert timer.remaining == 60
    assert scheduler.pending == 1


def test_set_minutes_clamps_and_resets(scheduler) -> None:
    timer = PracticeTimer(scheduler, 15)
    timer.set_minutes(0)
    assert timer.minutes == 1
    assert timer.remaining == 60
