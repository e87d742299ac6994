"""
Decoded audio held by the pads.

A SampleBuffer never changes after it is built: the sample array is
flagged read-only and every derived buffer (slice, mono, resample) is a
fresh copy.
"""

from __future__ import annotations

import io
import os

import numpy as np
import soundfile as sf
from scipy import signal

from .errors import DecodeError


# -----------------------------
# SciPy helpers
# -----------------------------
def resample_to(x: np.ndarray, src_sr: int, dst_sr: int) -> np.ndarray:
    """Resample along the last axis."""
    if src_sr == dst_sr:
        return x.astype(np.float32, copy=False)
    # resample_poly is high quality and fast
    g = np.gcd(src_sr, dst_sr)
    up = dst_sr // g
    down = src_sr // g
    y = signal.resample_poly(x, up, down, axis=-1).astype(np.float32)
    return y


class SampleBuffer:
    __slots__ = ("_data", "_sample_rate")

    def __init__(self, channels, sample_rate: int):
        sample_rate = int(sample_rate)
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")
        data = np.array(channels, dtype=np.float32, copy=True, ndmin=2)
        if data.ndim != 2 or data.shape[0] == 0:
            raise ValueError("a buffer needs at least one channel of equal-length samples")
        data.setflags(write=False)
        object.__setattr__(self, "_data", data)
        object.__setattr__(self, "_sample_rate", sample_rate)

    def __setattr__(self, name, value):
        raise AttributeError(f"SampleBuffer is immutable, cannot set {name!r}")

    def __delattr__(self, name):
        raise AttributeError(f"SampleBuffer is immutable, cannot delete {name!r}")

    @classmethod
    def from_array(cls, data: np.ndarray, sample_rate: int) -> "SampleBuffer":
        """Build from soundfile layout: (frames,) or (frames, channels)."""
        data = np.asarray(data, dtype=np.float32)
        if data.ndim == 1:
            data = data[np.newaxis, :]
        else:
            data = data.T
        return cls(data, sample_rate)

    @classmethod
    def silence(cls, duration: float, sample_rate: int, channels: int = 1) -> "SampleBuffer":
        frames = int(round(duration * sample_rate))
        return cls(np.zeros((channels, frames), dtype=np.float32), sample_rate)

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def channels(self) -> np.ndarray:
        """Read-only (channels, frames) array."""
        return self._data

    @property
    def num_channels(self) -> int:
        return self._data.shape[0]

    @property
    def frame_count(self) -> int:
        return self._data.shape[1]

    @property
    def duration(self) -> float:
        return self.frame_count / float(self.sample_rate)

    def channel(self, i: int) -> np.ndarray:
        return self._data[i]

    def to_frames(self) -> np.ndarray:
        """Writable (frames, channels) copy, the layout soundfile and sounddevice use."""
        return np.ascontiguousarray(self._data.T)

    def slice(self, start_frame: int, end_frame: int) -> "SampleBuffer":
        start = max(0, min(int(start_frame), self.frame_count))
        end = max(start, min(int(end_frame), self.frame_count))
        return SampleBuffer(self._data[:, start:end], self.sample_rate)

    def to_mono(self) -> "SampleBuffer":
        if self.num_channels == 1:
            return self
        return SampleBuffer(self._data.mean(axis=0), self.sample_rate)

    def resampled(self, sample_rate: int) -> "SampleBuffer":
        if sample_rate == self.sample_rate:
            return self
        return SampleBuffer(resample_to(self._data, self.sample_rate, sample_rate), sample_rate)

    def peak(self) -> float:
        if self.frame_count == 0:
            return 0.0
        return float(np.max(np.abs(self._data)))

    def __len__(self) -> int:
        return self.frame_count

    def __repr__(self) -> str:
        return (
            f"SampleBuffer(channels={self.num_channels}, frames={self.frame_count}, "
            f"sample_rate={self.sample_rate}, duration={self.duration:.3f}s)"
        )


# -----------------------------
# Decoding
# -----------------------------
def decode_bytes(data: bytes, format: str | None = None, samplerate: int | None = None,
                 channels: int | None = None, subtype: str | None = None) -> SampleBuffer:
    """Decode an encoded container, or raw PCM when ``format="RAW"``."""
    kwargs = {}
    if format is not None:
        kwargs["format"] = format
    if format is not None and format.upper() == "RAW":
        kwargs.update(samplerate=samplerate, channels=channels, subtype=subtype or "FLOAT")
    try:
        audio, sr = sf.read(io.BytesIO(bytes(data)), dtype="float32", always_2d=True, **kwargs)
    except (RuntimeError, TypeError, ValueError) as e:
        raise DecodeError(f"Could not decode audio: {e}") from e
    return SampleBuffer.from_array(audio, sr)


def load_audio_file(path: str) -> SampleBuffer:
    if not os.path.exists(path):
        raise FileNotFoundError(f"Missing file: {path}")
    try:
        audio, sr = sf.read(path, dtype="float32", always_2d=True)
    except RuntimeError as e:
        raise DecodeError(f"Could not decode {path}: {e}") from e
    return SampleBuffer.from_array(audio, sr)
