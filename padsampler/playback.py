"""
Playback - render a pad's trimmed region to the output device.

Every play() starts an independent Voice; voices only share the mixer,
so overlapping hits of the same pad never cancel each other.
"""

from __future__ import annotations

import logging
import threading
from typing import List, Optional

import numpy as np

from . import settings
from .buffer import SampleBuffer
from .errors import DeviceError
from .pads import PadStore

logger = logging.getLogger(__name__)


# -----------------------------
# Voice Engine (polyphonic mixing)
# -----------------------------
class Voice:
    __slots__ = ("audio", "pos", "gain")

    def __init__(self, audio: np.ndarray, gain: float = 1.0):
        self.audio = audio   # (frames, channels) at the mixer rate
        self.pos = 0
        self.gain = float(gain)

    @property
    def done(self) -> bool:
        return self.pos >= len(self.audio)


def match_channels(frames: np.ndarray, channels: int) -> np.ndarray:
    have = frames.shape[1]
    if have == channels:
        return frames
    if channels == 1:
        return frames.mean(axis=1, keepdims=True)
    # mono is copied to every output; wider layouts wrap around
    return frames[:, np.arange(channels) % have]


class Mixer:
    """
    Output sink that sums voices into blocks.

    Usage:
        mixer = Mixer()
        mixer.start_voice(region, gain=0.8)

        # In the audio callback:
        outdata[:] = mixer.render(frames)
    """

    def __init__(self, sample_rate: int = settings.SR, channels: int = settings.CHANNELS,
                 master: float = settings.MASTER, limiter: float = settings.LIMITER):
        self.sample_rate = sample_rate
        self.channels = channels
        self.master = master
        self.limiter = limiter
        self.voices: List[Voice] = []
        self.lock = threading.Lock()
        self.last_peak = 0.0

    @property
    def is_active(self) -> bool:
        return True

    @property
    def voice_count(self) -> int:
        with self.lock:
            return len(self.voices)

    def start_voice(self, region: SampleBuffer, gain: float = 1.0) -> Voice:
        audio = region.resampled(self.sample_rate).to_frames()
        v = Voice(audio=match_channels(audio, self.channels), gain=gain)
        with self.lock:
            self.voices.append(v)
        return v

    def stop_all(self) -> None:
        with self.lock:
            self.voices = []

    def render(self, frames: int) -> np.ndarray:
        mix = np.zeros((frames, self.channels), dtype=np.float32)

        with self.lock:
            alive = []
            for v in self.voices:
                remaining = len(v.audio) - v.pos
                if remaining <= 0:
                    continue
                take = min(frames, remaining)
                mix[:take] += v.audio[v.pos:v.pos + take] * v.gain
                v.pos += take
                if not v.done:
                    alive.append(v)
            self.voices = alive

        # master + limiter
        mix *= self.master
        np.clip(mix, -self.limiter, self.limiter, out=mix)
        self.last_peak = float(np.max(np.abs(mix))) if len(mix) else 0.0
        return mix


class SoundDeviceOutput:
    """The sound card: a sounddevice OutputStream pulling blocks from a Mixer."""

    def __init__(self, mixer: Optional[Mixer] = None, block: int = settings.BLOCK,
                 latency: str = "low", device=None):
        self.mixer = mixer or Mixer()
        self.block = block
        self.latency = latency
        self.device = device
        self._stream = None

    @property
    def is_active(self) -> bool:
        return self._stream is not None and self._stream.active

    @property
    def last_peak(self) -> float:
        return self.mixer.last_peak

    def start(self) -> None:
        if self._stream is not None:
            return
        try:
            import sounddevice as sd
        except (ImportError, OSError) as e:
            raise DeviceError(f"Audio backend unavailable: {e}") from e

        try:
            stream = sd.OutputStream(
                samplerate=self.mixer.sample_rate,
                channels=self.mixer.channels,
                blocksize=self.block,
                callback=self._callback,
                dtype="float32",
                latency=self.latency,
                device=self.device,
            )
        except (sd.PortAudioError, ValueError) as e:
            raise DeviceError(f"Could not open output device: {e}") from e
        try:
            stream.start()
        except sd.PortAudioError as e:
            stream.close()
            raise DeviceError(f"Could not start output device: {e}") from e
        self._stream = stream
        logger.info("Output started (sr=%d, block=%d)", self.mixer.sample_rate, self.block)

    def stop(self) -> None:
        stream, self._stream = self._stream, None
        if stream is None:
            return
        stream.stop()
        stream.close()
        self.mixer.stop_all()
        logger.info("Output stopped")

    def start_voice(self, region: SampleBuffer, gain: float = 1.0) -> Voice:
        return self.mixer.start_voice(region, gain)

    def stop_all(self) -> None:
        self.mixer.stop_all()

    def _callback(self, outdata, frames, time_info, status):
        if status:
            # keep the callback light
            logger.debug("Output status: %s", status)
        outdata[:] = self.mixer.render(frames)


class PlaybackEngine:
    """
    Plays pads from a PadStore through an output sink.

    The sink is anything with ``is_active`` and ``start_voice(region, gain)``:
    a bare Mixer, a SoundDeviceOutput, or a test double.
    """

    def __init__(self, pads: PadStore, output=None):
        self.pads = pads
        self.output = output

    def attach(self, output) -> None:
        self.output = output

    def detach(self) -> None:
        self.output = None

    @property
    def is_initialized(self) -> bool:
        return self.output is not None and self.output.is_active

    def play(self, index) -> bool:
        pad = self._playable(index)
        if pad is None:
            return False
        with self.pads.lock:
            buffer, start, end, gain = pad.buffer, pad.trim_start, pad.trim_end, pad.gain
        return self.play_buffer(buffer, start, end, gain)

    def play_full(self, index) -> bool:
        """Whole sample, ignoring trim; gain still applies."""
        pad = self._playable(index)
        if pad is None:
            return False
        with self.pads.lock:
            buffer, gain = pad.buffer, pad.gain
        return self.play_buffer(buffer, 0.0, buffer.duration, gain)

    def play_buffer(self, buffer: SampleBuffer, start: float = 0.0, end: Optional[float] = None,
                    gain: float = settings.DEFAULT_GAIN) -> bool:
        if not self.is_initialized:
            logger.warning("Playback requested before the output device is ready")
            return False
        dur = buffer.duration
        if end is None:
            end = dur
        # clamp again: the pad may have been changed behind the store's back
        start = max(0.0, min(float(start), dur))
        end = max(start, min(float(end), dur))
        region = buffer.slice(round(start * buffer.sample_rate), round(end * buffer.sample_rate))
        self.output.start_voice(region, gain)
        logger.debug("Voice started: %.3fs-%.3fs gain=%.2f", start, end, gain)
        return True

    def stop_all(self) -> None:
        if self.output is not None:
            self.output.stop_all()

    def _playable(self, index):
        if not self.is_initialized:
            logger.warning("Playback requested before the output device is ready")
            return None
        pad = self.pads.get(index)
        if pad is None:
            logger.warning("Invalid pad index: %r", index)
            return None
        if not pad.loaded or pad.buffer is None:
            logger.warning("Pad %d is not loaded", index)
            return None
        return pad
