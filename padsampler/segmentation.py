"""
Silence-based auto-slicing of a recording into separate sounds.

Only the first channel is scanned. A sample louder than the threshold
starts (or extends) a sound; once the gap since the last loud sample
reaches ``min_silence_duration`` the sound is closed at that last loud
sample. A sound still open at the end of the data runs to the end of
the buffer. Sounds shorter than ``min_sound_duration`` are dropped.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from . import settings
from .buffer import SampleBuffer


@dataclass(frozen=True)
class SoundSegment:
    start: float   # seconds
    end: float

    @property
    def duration(self) -> float:
        return self.end - self.start


def detect_segments(
    buffer: SampleBuffer,
    silence_threshold: float = settings.SILENCE_THRESHOLD,
    min_silence_duration: float = settings.MIN_SILENCE_DURATION,
    min_sound_duration: float = settings.MIN_SOUND_DURATION,
) -> List[SoundSegment]:
    sr = buffer.sample_rate
    n = buffer.frame_count
    if n == 0:
        return []

    loud = np.flatnonzero(np.abs(buffer.channel(0)) > silence_threshold)
    if len(loud) == 0:
        return []

    min_silence_samples = min_silence_duration * sr
    min_sound_samples = min_sound_duration * sr

    # first quiet sample index (relative to the last loud one) that closes a sound
    close_after = max(1, math.ceil(min_silence_samples))

    # a gap between consecutive loud samples splits sounds only if a closing
    # quiet sample fits strictly inside it
    breaks = np.flatnonzero(np.diff(loud) > close_after)
    starts = loud[np.concatenate(([0], breaks + 1))]
    lasts = loud[np.concatenate((breaks, [len(loud) - 1]))]

    segments = []
    for k, (start, last) in enumerate(zip(starts.tolist(), lasts.tolist())):
        trailing = k == len(starts) - 1 and last + close_after > n - 1
        end = n if trailing else last
        length = end - start
        if length <= 0 or length < min_sound_samples:
            continue
        segments.append(SoundSegment(start / sr, end / sr))
    return segments


def split_buffer(buffer: SampleBuffer, segments: Sequence[SoundSegment]) -> List[SampleBuffer]:
    """One new buffer per segment; segments that round to no samples are skipped."""
    sr = buffer.sample_rate
    out = []
    for seg in segments:
        start = max(0, min(int(round(seg.start * sr)), buffer.frame_count))
        end = max(0, min(int(round(seg.end * sr)), buffer.frame_count))
        if end - start <= 0:
            continue
        out.append(buffer.slice(start, end))
    return out
