"""
WAV encoding for export/upload: 16-bit PCM, interleaved, 44-byte header.
"""

from __future__ import annotations

import io

import numpy as np
from scipy.io import wavfile

from .buffer import SampleBuffer


def float_to_pcm16(x: np.ndarray) -> np.ndarray:
    x = np.clip(np.asarray(x, dtype=np.float64), -1.0, 1.0)
    # asymmetric scale so -1.0 hits -32768 and 1.0 hits 32767; astype truncates
    scaled = np.where(x < 0, x * 32768.0, x * 32767.0)
    return scaled.astype(np.int16)


def encode_wav(buffer: SampleBuffer) -> bytes:
    pcm = float_to_pcm16(buffer.to_frames())
    if buffer.num_channels == 1:
        pcm = pcm[:, 0]
    out = io.BytesIO()
    wavfile.write(out, buffer.sample_rate, pcm)
    return out.getvalue()
