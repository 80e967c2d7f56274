from __future__ import annotations

from pathlib import Path

import pytest

from lingualeap.app.state import PlaybackState
from lingualeap.contracts import ClipKind, Sentence, Severity
from lingualeap.playback.controller import PlaybackController, resolve_audio_path


def _controller(device, scheduler, notify=None) -> tuple[PlaybackController, list]:
    ends: list = []
    ctl = PlaybackController(device, scheduler, notify=notify, data_dir="data")
    ctl.on_sequence_end = ends.append
    return ctl, ends


def _both(i: int = 1) -> Sentence:
    return Sentence(i, f"fr {i}", f"en {i}", audio_source=f"audio/fr/{i}.wav", audio_target=f"audio/en/{i}.wav")


def test_resolve_audio_path_strips_data_prefix() -> None:
    assert resolve_audio_path("/data/audio/fr/1.wav", "d") == Path("d") / "audio/fr/1.wav"
    assert resolve_audio_path("data/audio/fr/1.wav", "d") == Path("d") / "audio/fr/1.wav"
    assert resolve_audio_path("audio\\fr\\1.wav", "d") == Path("d") / "audio/fr/1.wav"


def test_plays_source_then_target_then_signals_end(device, scheduler) -> None:
    ctl, ends = _controller(device, scheduler)
    req = ctl.play(_both())
    assert device.played() == []

    scheduler.advance(0.05)
    assert device.played()[-1].endswith("audio/fr/1.wav")
    assert ctl.state == PlaybackState.PLAYING_SOURCE
    assert ctl.current_source_type == ClipKind.SOURCE
    assert ctl.is_playing

    device.finish_clip()
    scheduler.advance(0.49)
    assert len(device.played()) == 1
    scheduler.advance(0.01)
    assert device.played()[-1].endswith("audio/en/1.wav")
    assert ctl.state == PlaybackState.PLAYING_TARGET

    device.finish_clip()
    assert ends == [req]
    assert not ctl.is_playing
    assert ctl.state == PlaybackState.IDLE
    assert not device.has_source


def test_source_only_ends_after_source_clip(device, scheduler) -> None:
    ctl, ends = _controller(device, scheduler)
    req = ctl.play(Sentence(2, "fr", "en", audio_source="audio/fr/2.wav"))
    scheduler.advance(0.05)
    device.finish_clip()
    assert ends == [req]
    assert len(device.played()) == 1


def test_target_only_waits_tail_before_end(device, scheduler) -> None:
    ctl, ends = _controller(device, scheduler)
    req = ctl.play(Sentence(3, "fr", "en", audio_target="audio/en/3.wav"))
    scheduler.advance(0.05)
    assert device.played()[-1].endswith("audio/en/3.wav")
    assert ctl.current_source_type == ClipKind.TARGET
    device.finish_clip()
    assert ends == []
    scheduler.advance(0.5)
    assert ends == [req]


def test_no_audio_signals_end_without_touching_device(device, scheduler) -> None:
    ctl, ends = _controller(device, scheduler)
    req = ctl.play(Sentence(4, "fr", "en"))
    assert ends == [req]
    assert device.calls == []
    assert scheduler.pending == 0


def test_stop_is_idempotent_and_invalidates_pending_work(device, scheduler) -> None:
    ctl, ends = _controller(device, scheduler)
    ctl.play(_both())
    scheduler.advance(0.05)
    ctl.stop()
    ctl.stop()
    assert not ctl.is_playing
    assert ctl.state == PlaybackState.IDLE
    assert device.on_ended is None
    assert scheduler.pending == 0
    scheduler.advance(5.0)
    assert ends == []
    assert len(device.played()) == 1


def test_stale_completion_from_superseded_request_is_ignored(device, scheduler) -> None:
    ctl, ends = _controller(device, scheduler)
    ctl.play(_both(1))
    scheduler.advance(0.05)
    stale_ended = device.on_ended

    second = ctl.play(_both(2))
    stale_ended()
    scheduler.advance(1.0)
    assert ends == []
    assert device.played()[-1].endswith("audio/fr/2.wav")
    device.finish_clip()
    scheduler.advance(0.5)
    device.finish_clip()
    assert ends == [second]


def test_stop_during_settle_prevents_playback(device, scheduler) -> None:
    ctl, ends = _controller(device, scheduler)
    ctl.play(_both())
    ctl.stop()
    scheduler.advance(1.0)
    assert device.played() == []
    assert ends == []


def test_only_one_clip_plays_at_a_time(device, scheduler) -> None:
    ctl, _ = _controller(device, scheduler)
    ctl.play(_both(1))
    scheduler.advance(0.05)
    ctl.play(_both(2))
    assert not device.playing
    assert ("pause",) in device.calls and ("release",) in device.calls
    scheduler.advance(0.05)
    assert device.playing
    assert device.loaded.endswith("audio/fr/2.wav")


def test_load_failure_notifies_and_signals_end(device, scheduler, notify) -> None:
    device.fail_load.add("fr/1.wav")
    ctl, ends = _controller(device, scheduler, notify)
    req = ctl.play(_both())
    scheduler.advance(0.05)
    assert notify.keys() == ["error_playing_audio"]
    assert notify.calls[0][1] == Severity.ERROR
    assert ends == [req]
    assert not ctl.is_playing


def test_play_rejected_by_device_notifies_and_signals_end(device, scheduler, notify) -> None:
    device.fail_play = True
    ctl, ends = _controller(device, scheduler, notify)
    req = ctl.play(_both())
    scheduler.advance(0.05)
    assert "error_playing_audio" in notify.keys()
    assert ends == [req]
    assert not device.has_source


def test_device_error_mid_clip_ends_sequence(device, scheduler, notify) -> None:
    ctl, ends = _controller(device, scheduler, notify)
    req = ctl.play(_both())
    scheduler.advance(0.05)
    device.fail_clip("stream aborted")
    assert ends == [req]
    assert "stream aborted" in notify.calls[-1][2]["source"]
    scheduler.advance(1.0)
    assert len(device.played()) == 1


def test_stale_error_still_notifies_but_does_not_end(device, scheduler, notify) -> None:
    ctl, ends = _controller(device, scheduler, notify)
    ctl.play(_both(1))
    scheduler.advance(0.05)
    stale_error = device.on_error
    ctl.stop()
    stale_error("late failure")
    assert notify.keys() == ["error_playing_audio"]
    assert ends == []


def test_part_of_sequence_is_noop_when_sequence_not_running(device, scheduler) -> None:
    ctl, ends = _controller(device, scheduler)
    before = ctl.current_request
    assert ctl.play(_both(), part_of_sequence=True) is None
    assert ctl.current_request == before
    assert device.calls == []
    assert ends == []


def test_playback_rate_applies_to_each_clip(device, scheduler) -> None:
    ctl, _ = _controller(device, scheduler)
    ctl.set_playback_rate(0.75)
    ctl.play(_both())
    scheduler.advance(0.05)
    assert ("set_rate", 0.75) in device.calls

    ctl.set_playback_rate(1.5)
    assert device.rate == 1.5


def test_unsupported_playback_rate_is_rejected(device, scheduler) -> None:
    ctl, _ = _controller(device, scheduler)
    with pytest.raises(ValueError):
        ctl.set_playback_rate(2.0)
    assert ctl.playback_rate == 1.0


def test_close_stops_and_detaches_listener(device, scheduler) -> None:
    ctl, ends = _controller(device, scheduler)
    ctl.play(_both())
    scheduler.advance(0.05)
    ctl.close()
    assert ctl.on_sequence_end is None
    assert not device.has_source


def test_rate_change_failure_mid_clip_notifies_and_signals_end(device, scheduler, notify) -> None:
    ctl, ends = _controller(device, scheduler, notify)
    req = ctl.play(_both())
    scheduler.advance(0.05)
    assert device.playing

    device.fail_play = True
    ctl.set_playback_rate(1.25)
    assert ctl.playback_rate == 1.25
    assert notify.keys() == ["error_playing_audio"]
    assert "audio/fr/1.wav" in notify.calls[0][2]["source"]
    assert ends == [req]
    assert not ctl.is_playing
    assert not device.has_source

    scheduler.advance(1.0)
    assert len(device.played()) == 2
