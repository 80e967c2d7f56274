from __future__ import annotations

import contextlib
import wave
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Optional

import numpy as np


class AudioDeviceError(RuntimeError):
    pass


def read_wav_pcm16(path: str | Path) -> tuple[np.ndarray, int]:
    """Decode a PCM16 WAV file into an int16 array shaped (frames, channels)."""
    try:
        with contextlib.closing(wave.open(str(path), "rb")) as wf:
            channels = wf.getnchannels()
            sampwidth = wf.getsampwidth()
            sample_rate = wf.getframerate()
            raw = wf.readframes(wf.getnframes())
    except FileNotFoundError as e:
        raise AudioDeviceError(f"Audio file not found: {path}") from e
    except OSError as e:
        raise AudioDeviceError(f"Cannot read audio file: {path} ({type(e).__name__})") from e
    except (wave.Error, EOFError) as e:
        raise AudioDeviceError(f"Unsupported or corrupt audio file: {path}") from e

    if sampwidth != 2:
        raise AudioDeviceError(f"Only 16-bit PCM WAV is supported (got {sampwidth * 8}-bit): {path}")
    try:
        samples = np.frombuffer(raw, dtype=np.int16).reshape(-1, channels)
    except ValueError as e:
        # truncated data chunk: byte count not a whole number of frames
        raise AudioDeviceError(f"Unsupported or corrupt audio file: {path}") from e
    return samples, sample_rate


class AudioDevice(ABC):
    """
    The single audio output handle the playback core coordinates.

    on_ended / on_error are invoked on the thread that owns playback state,
    never on an audio driver thread.
    """

    def __init__(self) -> None:
        self.on_ended: Optional[Callable[[], None]] = None
        self.on_error: Optional[Callable[[str], None]] = None

    @property
    @abstractmethod
    def has_source(self) -> bool: ...

    @abstractmethod
    def load(self, path: str) -> None: ...

    @abstractmethod
    def set_rate(self, rate: float) -> None: ...

    @abstractmethod
    def play(self) -> None:
        """Start or resume output. Raises AudioDeviceError if playback is rejected."""

    @abstractmethod
    def pause(self) -> None: ...

    @abstractmethod
    def reset_position(self) -> None: ...

    @abstractmethod
    def release(self) -> None: ...


class SoundDeviceAudioDevice(AudioDevice):
    """
    Output device using the `sounddevice` package (PortAudio).

    Playback rate is applied by resampling at the stream level, so pitch
    follows speed.
    """

    def __init__(
        self,
        *,
        dispatch: Callable[[Callable[[], None]], None],
        device: Optional[int] = None,
    ) -> None:
        super().__init__()
        self.dispatch = dispatch
        self.device = device
        self.rate = 1.0
        self._path: Optional[str] = None
        self._samples: Optional[np.ndarray] = None
        self._sample_rate = 0
        self._pos = 0
        self._stream = None
        self._stream_gen = 0
        self._stream_error: Optional[str] = None

    @staticmethod
    def list_devices() -> str:
        sd = _import_sounddevice()
        return str(sd.query_devices())

    @property
    def has_source(self) -> bool:
        return self._samples is not None

    def load(self, path: str) -> None:
        self.release()
        samples, sample_rate = read_wav_pcm16(path)
        self._path = str(path)
        self._samples = samples
        self._sample_rate = sample_rate
        self._pos = 0

    def set_rate(self, rate: float) -> None:
        if rate <= 0:
            raise ValueError("rate must be > 0")
        self.rate = float(rate)
        if self._stream is not None:
            # Restart the stream at the new sample rate from the current position.
            self._close_stream()
            self.play()

    def play(self) -> None:
        if self._samples is None:
            raise AudioDeviceError("No audio source loaded")
        if self._stream is not None:
            return
        sd = _import_sounddevice()

        self._stream_gen += 1
        gen = self._stream_gen
        self._stream_error = None
        samples = self._samples
        channels = int(samples.shape[1])

        def _callback(outdata, frames, time_info, status) -> None:
            del time_info, status
            try:
                chunk = samples[self._pos:self._pos + frames]
                n = len(chunk)
                outdata[:n] = chunk
                self._pos += n
            except Exception as e:
                self._stream_error = f"{type(e).__name__}: {e}"
                raise sd.CallbackAbort from e
            if n < frames:
                outdata[n:] = 0
                raise sd.CallbackStop

        def _finished() -> None:
            if gen != self._stream_gen:
                return
            error = self._stream_error
            if error is not None:
                self.dispatch(lambda: self._emit_error(gen, error))
            else:
                self.dispatch(lambda: self._emit_ended(gen))

        try:
            stream = sd.OutputStream(
                samplerate=max(1, int(round(self._sample_rate * self.rate))),
                channels=channels,
                dtype="int16",
                device=self.device,
                callback=_callback,
                finished_callback=_finished,
            )
            stream.start()
        except Exception as e:
            raise AudioDeviceError(f"Failed to open audio output for {self._path}: {e}") from e
        self._stream = stream

    def pause(self) -> None:
        self._close_stream()

    def reset_position(self) -> None:
        self._pos = 0

    def release(self) -> None:
        self._close_stream()
        self._path = None
        self._samples = None
        self._sample_rate = 0
        self._pos = 0

    def _close_stream(self) -> None:
        stream = self._stream
        self._stream = None
        # Bump first so the finished callback fired by abort() is ignored.
        self._stream_gen += 1
        if stream is None:
            return
        try:
            stream.abort()
        finally:
            stream.close()

    def _emit_ended(self, gen: int) -> None:
        if gen != self._stream_gen:
            return
        self._close_stream()
        if self.on_ended is not None:
            self.on_ended()

    def _emit_error(self, gen: int, detail: str) -> None:
        if gen != self._stream_gen:
            return
        self._close_stream()
        if self.on_error is not None:
            self.on_error(detail)


def _import_sounddevice():
    try:
        import sounddevice as sd
    except ImportError as e:
        raise AudioDeviceError(
            "sounddevice is not installed. Install with: python -m pip install sounddevice"
        ) from e
    except OSError as e:
        raise AudioDeviceError(f"PortAudio library could not be loaded: {e}") from e
    return sd
