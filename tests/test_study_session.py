from __future__ import annotations

import json
from pathlib import Path

from lingualeap.contracts import Severity, StudyMode
from lingualeap.data.loader import SentenceLoader
from lingualeap.playback.controller import PlaybackController
from lingualeap.study.session import StudySession


def _data(tmp_path: Path, n: int = 12) -> Path:
    records = [
        {
            "id": i,
            "verb": f"v{i}",
            "verbEnglish": f"to v{i}",
            "targetSentence": f"Phrase {i}.",
            "englishSentence": f"Sentence {i}.",
            "audioSrcFr": f"/data/audio/fr/{i}.wav",
        }
        for i in range(n)
    ]
    path = tmp_path / "data.json"
    path.write_text(json.dumps(records), encoding="utf-8")
    return path


def _session(tmp_path, device, scheduler, notify, **kw) -> StudySession:
    ctl = PlaybackController(device, scheduler, notify=notify)
    session = StudySession(ctl, scheduler, notify=notify, chunk_size=5, **kw)
    session.load(SentenceLoader(_data(tmp_path), notify=notify))
    return session


def test_load_applies_first_chunk(tmp_path, device, scheduler, notify) -> None:
    session = _session(tmp_path, device, scheduler, notify)
    assert len(session.sentences) == 12
    assert [s.id for s in session.chunk] == [0, 1, 2, 3, 4]
    assert session.current_index == 0
    assert session.controller.data_dir == tmp_path
    assert notify.calls[-1] == ("chunk_loaded", Severity.INFO, {"chunk_num": 1})


def test_select_and_resize_chunks(tmp_path, device, scheduler, notify) -> None:
    session = _session(tmp_path, device, scheduler, notify)
    session.select_chunk(2)
    assert [s.id for s in session.chunk] == [10, 11]
    assert notify.calls[-1][2] == {"chunk_num": 3}

    session.set_chunk_size(10)
    assert session.chunks.selected == 1
    assert [s.id for s in session.chunk] == [10, 11]


def test_toggle_play_pause_plays_then_stops(tmp_path, device, scheduler, notify) -> None:
    session = _session(tmp_path, device, scheduler, notify)
    session.toggle_play_pause()
    scheduler.advance(0.05)
    assert device.played()[-1].endswith("audio/fr/0.wav")
    assert session.is_busy

    session.toggle_play_pause()
    assert not session.is_busy
    assert not device.has_source


def test_toggle_without_sentences_notifies_error(tmp_path, device, scheduler, notify) -> None:
    path = tmp_path / "empty.json"
    path.write_text("[]", encoding="utf-8")
    ctl = PlaybackController(device, scheduler, notify=notify)
    session = StudySession(ctl, scheduler, notify=notify)
    session.load(SentenceLoader(path, notify=notify))
    session.toggle_play_pause()
    assert notify.calls[-1] == ("no_sentence_to_play", Severity.ERROR, {})
    assert device.calls == []


def test_next_and_prev_stay_in_bounds(tmp_path, device, scheduler, notify) -> None:
    session = _session(tmp_path, device, scheduler, notify)
    session.prev_sentence()
    assert session.current_index == 0
    for _ in range(10):
        session.next_sentence()
    assert session.current_index == 4
    session.prev_sentence()
    assert session.current_index == 3


def test_navigation_stops_playback(tmp_path, device, scheduler, notify) -> None:
    session = _session(tmp_path, device, scheduler, notify)
    session.toggle_play_pause()
    scheduler.advance(0.05)
    session.next_sentence()
    assert not session.controller.is_playing
    scheduler.advance(2.0)
    assert len(device.played()) == 1


def test_active_recall_hides_until_revealed(tmp_path, device, scheduler, notify) -> None:
    session = _session(tmp_path, device, scheduler, notify, study_mode=StudyMode.ACTIVE_RECALL)
    assert not session.is_answer_revealed

    session.reveal_answer()
    assert session.is_answer_revealed
    scheduler.advance(0.05)
    assert device.played()[-1].endswith("audio/fr/0.wav")

    session.next_sentence()
    assert not session.is_answer_revealed


def test_switching_study_mode_resets_reveal(tmp_path, device, scheduler, notify) -> None:
    session = _session(tmp_path, device, scheduler, notify)
    assert session.is_answer_revealed
    session.set_study_mode(StudyMode.ACTIVE_RECALL)
    assert not session.is_answer_revealed
    session.set_study_mode(StudyMode.READ_LISTEN)
    assert session.is_answer_revealed


def test_play_all_walks_chunk_and_tracks_index(tmp_path, device, scheduler, notify) -> None:
    session = _session(tmp_path, device, scheduler, notify, study_mode=StudyMode.ACTIVE_RECALL)
    session.play_all()
    assert session.sequencer.is_running
    assert session.is_answer_revealed

    seen = []
    for _ in range(5):
        scheduler.advance(0.05)
        seen.append(session.current_index)
        device.finish_clip()
        scheduler.advance(0.2)

    assert seen == [0, 1, 2, 3, 4]
    assert not session.sequencer.is_running
    assert "continuous_play_stopped" in notify.keys()


def test_toggle_during_play_all_stops_sequence(tmp_path, device, scheduler, notify) -> None:
    session = _session(tmp_path, device, scheduler, notify)
    session.play_all()
    scheduler.advance(0.05)
    session.toggle_play_pause()
    assert not session.sequencer.is_running
    assert not session.is_busy
    scheduler.advance(5.0)
    assert len(device.played()) == 1


def test_looping_replays_current_sentence(tmp_path, device, scheduler, notify) -> None:
    session = _session(tmp_path, device, scheduler, notify)
    session.set_looping(True)
    session.toggle_play_pause()
    scheduler.advance(0.05)
    device.finish_clip()
    scheduler.advance(0.2)
    scheduler.advance(0.05)
    assert len(device.played()) == 2
    assert device.played()[-1].endswith("audio/fr/0.wav")

    session.set_looping(False)
    device.finish_clip()
    scheduler.advance(1.0)
    assert len(device.played()) == 2


def test_disabling_loop_cancels_pending_replay(tmp_path, device, scheduler, notify) -> None:
    session = _session(tmp_path, device, scheduler, notify)
    session.set_looping(True)
    session.toggle_play_pause()
    scheduler.advance(0.05)
    device.finish_clip()
    session.set_looping(False)
    scheduler.advance(1.0)
    assert len(device.played()) == 1


def test_playback_rate_and_on_change(tmp_path, device, scheduler, notify) -> None:
    session = _session(tmp_path, device, scheduler, notify)
    changes: list[int] = []
    session.on_change = lambda: changes.append(session.current_index)
    session.set_playback_rate(1.25)
    session.next_sentence()
    assert session.controller.playback_rate == 1.25
    assert changes == [0, 1]


def test_close_halts_everything(tmp_path, device, scheduler, notify) -> None:
    session = _session(tmp_path, device, scheduler, notify)
    session.play_all()
    scheduler.advance(0.05)
    session.close()
    assert not session.sequencer.is_running
    assert not device.has_source
    scheduler.advance(5.0)
    assert len(device.played()) == 1


def test_reveal_during_play_all_delay_keeps_sequence_order(tmp_path, device, scheduler, notify) -> None:
    session = _session(tmp_path, device, scheduler, notify, study_mode=StudyMode.ACTIVE_RECALL)
    session.play_all()
    scheduler.advance(0.05)
    device.finish_clip()
    assert not session.controller.is_playing

    session.reveal_answer()
    scheduler.advance(0.2)
    scheduler.advance(0.05)
    assert session.sequencer.is_running
    assert session.current_index == 1
    assert [p.rsplit("/", 1)[-1] for p in device.played()] == ["0.wav", "1.wav"]
