"""
Sampler - the pad engine as one object.

Owns the Pad Store, Playback Engine and Capture Controller and adds the
recording-panel workflows: keep a take on one pad, or slice it on its
silences and spread the pieces over the pads.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from . import settings
from .buffer import SampleBuffer
from .capture import CaptureController
from .errors import InvalidIndex, NotLoaded
from .pads import PadStore
from .playback import PlaybackEngine
from .segmentation import SoundSegment, detect_segments, split_buffer
from .wav import encode_wav

logger = logging.getLogger(__name__)


class Sampler:
    """
    Usage:
        sampler = Sampler(output=SoundDeviceOutput(), capture_device=SoundDeviceCapture())
        sampler.output.start()
        sampler.pads.load_file(0, "kick.wav")
        sampler.play(0)

        sampler.capture.start_recording()
        take = sampler.capture.stop_recording()
        sampler.split_to_pads(take)
    """

    def __init__(self, output=None, capture_device=None, keymap: Optional[dict] = None):
        self.pads = PadStore()
        self.output = output
        self.playback = PlaybackEngine(self.pads, output)
        self.capture = CaptureController(capture_device)
        self.keymap = dict(settings.KEYBOARD_MAP if keymap is None else keymap)

    def reset(self) -> None:
        """Stop every voice and return all 16 pads to empty."""
        self.playback.stop_all()
        self.capture.cancel_recording()
        self.pads.clear_all()

    # -----------------------------
    # Playback shortcuts
    # -----------------------------
    def play(self, index) -> bool:
        return self.playback.play(index)

    def play_full(self, index) -> bool:
        return self.playback.play_full(index)

    def preview(self, buffer: SampleBuffer, start: float = 0.0, end: Optional[float] = None) -> bool:
        return self.playback.play_buffer(buffer, start, end)

    # -----------------------------
    # Keys
    # -----------------------------
    def pad_for_key(self, key: str) -> Optional[int]:
        return self.keymap.get(key.lower()) if key else None

    def key_for_pad(self, index: int) -> Optional[str]:
        for key, pad in self.keymap.items():
            if pad == index:
                return key.upper()
        return None

    def trigger_key(self, key: str) -> bool:
        index = self.pad_for_key(key)
        if index is None:
            return False
        return self.play(index)

    # -----------------------------
    # Recording workflows
    # -----------------------------
    def analyze(self, buffer: SampleBuffer, silence_threshold: float = settings.SILENCE_THRESHOLD,
                min_silence_duration: float = settings.MIN_SILENCE_DURATION,
                min_sound_duration: float = settings.MIN_SOUND_DURATION) -> List[SoundSegment]:
        segments = detect_segments(buffer, silence_threshold, min_silence_duration, min_sound_duration)
        logger.info("Detected %d segments (threshold %.3f)", len(segments), silence_threshold)
        return segments

    def assign_recording(self, buffer: SampleBuffer, index: Optional[int] = None,
                         name: Optional[str] = None):
        if index is None:
            index = self.pads.first_empty_index()
        return self.pads.load(index, buffer, name or f"Rec {index + 1}")

    def split_to_pads(self, buffer: SampleBuffer, segments: Optional[Sequence[SoundSegment]] = None,
                      start_index: int = 0) -> List[int]:
        """Load one slice per pad from ``start_index`` on; returns the pads filled."""
        if not self.pads.is_valid_index(start_index):
            raise InvalidIndex(start_index)
        if segments is None:
            segments = self.analyze(buffer)
        if not segments:
            logger.warning("No segments detected; adjust the silence threshold or record again")
            return []

        pieces = split_buffer(buffer, segments)
        room = len(self.pads) - start_index
        if len(pieces) > room:
            logger.warning("%d slices found, only %d pads free", len(pieces), room)
        filled = []
        for i, piece in enumerate(pieces[:room]):
            index = start_index + i
            self.pads.load(index, piece, f"Rec {i + 1}")
            filled.append(index)
        return filled

    # -----------------------------
    # Export
    # -----------------------------
    def export_wav(self, index) -> bytes:
        pad = self.pads.get(index)
        if pad is None:
            raise InvalidIndex(index)
        if not pad.loaded or pad.buffer is None:
            raise NotLoaded(index)
        return encode_wav(pad.buffer)
