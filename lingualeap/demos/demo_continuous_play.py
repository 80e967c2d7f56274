from __future__ import annotations

import argparse
import asyncio

from lingualeap.app.messages import Notifier
from lingualeap.audio.device import SoundDeviceAudioDevice
from lingualeap.contracts import Severity
from lingualeap.data.loader import SentenceLoader
from lingualeap.playback.controller import PlaybackController
from lingualeap.playback.scheduler import AsyncioScheduler
from lingualeap.study.session import StudySession


def _print_notice(message: str, severity: Severity) -> None:
    print(f"[{severity.value}] {message}")


async def _run(args: argparse.Namespace) -> int:
    scheduler = AsyncioScheduler()
    notify = Notifier(_print_notice)
    device = SoundDeviceAudioDevice(dispatch=scheduler.dispatch, device=args.device)
    controller = PlaybackController(device, scheduler, notify=notify)
    controller.set_playback_rate(args.speed)
    session = StudySession(controller, scheduler, notify=notify, chunk_size=args.chunk_size)

    result = session.load(SentenceLoader(args.data, notify=notify))
    if not result.ok or not session.sentences:
        return 1
    session.select_chunk(args.chunk - 1)

    def _show() -> None:
        s = session.current_sentence
        if s is not None and session.sequencer.is_running:
            print(f"  #{session.current_index + 1} {s.source_text} | {s.target_text}")

    session.on_change = _show
    session.play_all()
    try:
        while session.sequencer.is_running:
            await asyncio.sleep(0.1)
    finally:
        session.close()
    return 0


def main() -> int:
    ap = argparse.ArgumentParser(description="Play one chunk of sentences end to end without the UI.")
    ap.add_argument("--data", default="assets/data/data.json", help="Path to data.json")
    ap.add_argument("--chunk", type=int, default=1, help="1-based chunk number")
    ap.add_argument("--chunk-size", type=int, default=10)
    ap.add_argument("--speed", type=float, default=1.0, help="0.5 | 0.75 | 1.0 | 1.25 | 1.5")
    ap.add_argument("--device", type=int, default=None, help="Output device id (see --list-devices in the app)")
    args = ap.parse_args()
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
