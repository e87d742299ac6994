"""
Pad Store - 16 fixed sample slots with trim points and gain.

Slots live in a plain list indexed by pad number and are mutated in
place under one lock, so a reader never sees a pad half-updated.
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from numbers import Integral
from typing import List, Optional

from . import settings
from .buffer import SampleBuffer, decode_bytes, load_audio_file
from .errors import InvalidIndex

logger = logging.getLogger(__name__)


def default_pad_name(index: int) -> str:
    return f"Pad {index + 1}"


class Pad:
    __slots__ = ("index", "buffer", "name", "loaded", "trim_start", "trim_end", "gain")

    def __init__(self, index: int):
        self.index = index
        self.empty()

    def empty(self) -> None:
        self.buffer: Optional[SampleBuffer] = None
        self.name = default_pad_name(self.index)
        self.loaded = False
        self.trim_start = 0.0
        self.trim_end = 1.0   # placeholder until something is loaded
        self.gain = settings.DEFAULT_GAIN

    @property
    def duration(self) -> float:
        return self.buffer.duration if self.buffer is not None else 0.0

    def __repr__(self) -> str:
        if not self.loaded:
            return f"Pad({self.index}, empty)"
        return (
            f"Pad({self.index}, {self.name!r}, trim=[{self.trim_start:.3f}, {self.trim_end:.3f}], "
            f"gain={self.gain:.2f})"
        )


@dataclass(frozen=True)
class PadState:
    """Read-only copy of a pad for collaborators outside the engine."""
    index: int
    buffer: Optional[SampleBuffer]
    name: str
    loaded: bool
    trim_start: float
    trim_end: float
    gain: float

    @property
    def duration(self) -> float:
        return self.buffer.duration if self.buffer is not None else 0.0


class PadStore:
    """
    Fixed table of pads.

    Usage:
        store = PadStore()
        store.load(5, buffer, "kick")
        store.set_trim(5, 0.1, 0.8)
        store.set_gain(5, 1.5)
    """

    def __init__(self, size: int = settings.MAX_PADS):
        self.size = size
        self.lock = threading.Lock()
        self._pads: List[Pad] = [Pad(i) for i in range(size)]

    def __len__(self) -> int:
        return self.size

    def is_valid_index(self, index) -> bool:
        return isinstance(index, Integral) and not isinstance(index, bool) and 0 <= index < self.size

    def _pad_or_warn(self, index, op: str) -> Optional[Pad]:
        if not self.is_valid_index(index):
            logger.warning("%s: invalid pad index %r", op, index)
            return None
        return self._pads[index]

    # -----------------------------
    # Read accessors
    # -----------------------------
    def get(self, index) -> Optional[Pad]:
        if not self.is_valid_index(index):
            return None
        return self._pads[index]

    def pads(self) -> List[Pad]:
        return list(self._pads)

    def snapshot(self, index) -> Optional[PadState]:
        with self.lock:
            pad = self.get(index)
            if pad is None:
                return None
            return PadState(pad.index, pad.buffer, pad.name, pad.loaded,
                            pad.trim_start, pad.trim_end, pad.gain)

    def first_empty_index(self) -> int:
        for pad in self._pads:
            if not pad.loaded:
                return pad.index
        return 0

    def loaded_count(self) -> int:
        return sum(1 for pad in self._pads if pad.loaded)

    # -----------------------------
    # Loading
    # -----------------------------
    def load(self, index, buffer: SampleBuffer, name: Optional[str] = None) -> Pad:
        if not self.is_valid_index(index):
            raise InvalidIndex(index)
        with self.lock:
            pad = self._pads[index]
            pad.buffer = buffer
            pad.name = name or default_pad_name(index)
            pad.loaded = True
            pad.trim_start = 0.0
            pad.trim_end = buffer.duration
            pad.gain = settings.DEFAULT_GAIN
        logger.info("Loaded pad %d '%s' (%.2fs)", index, pad.name, buffer.duration)
        return pad

    def load_bytes(self, index, data: bytes, name: Optional[str] = None, **decode_kwargs) -> Pad:
        # decode first: a bad file must not touch the pad
        if not self.is_valid_index(index):
            raise InvalidIndex(index)
        buffer = decode_bytes(data, **decode_kwargs)
        return self.load(index, buffer, name)

    def load_file(self, index, path: str, name: Optional[str] = None) -> Pad:
        if not self.is_valid_index(index):
            raise InvalidIndex(index)
        buffer = load_audio_file(path)
        if not name:
            name = os.path.splitext(os.path.basename(path))[0] or "sound"
        return self.load(index, buffer, name)

    # -----------------------------
    # Trim + gain
    # -----------------------------
    def set_trim(self, index, start: float, end: float) -> None:
        pad = self._pad_or_warn(index, "set_trim")
        if pad is None:
            return
        with self.lock:
            if not pad.loaded or pad.buffer is None:
                logger.debug("set_trim: pad %d is not loaded", index)
                return
            dur = pad.buffer.duration
            start = max(0.0, min(float(start), dur))
            # end is clamped against the already clamped start
            end = max(start, min(float(end), dur))
            pad.trim_start = start
            pad.trim_end = end

    def set_gain(self, index, gain: float) -> None:
        pad = self._pad_or_warn(index, "set_gain")
        if pad is None:
            return
        with self.lock:
            pad.gain = max(settings.MIN_GAIN, min(settings.MAX_GAIN, float(gain)))

    def reset(self, index) -> None:
        pad = self._pad_or_warn(index, "reset")
        if pad is None:
            return
        with self.lock:
            if not pad.loaded or pad.buffer is None:
                return
            pad.trim_start = 0.0
            pad.trim_end = pad.buffer.duration
            pad.gain = settings.DEFAULT_GAIN

    def clear(self, index) -> None:
        if self._pad_or_warn(index, "clear") is None:
            return
        with self.lock:
            self._pads[index].empty()

    def clear_all(self) -> None:
        with self.lock:
            for pad in self._pads:
                pad.empty()
