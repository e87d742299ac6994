"""
Waveform rendering onto a tkinter-style canvas.
"""

from __future__ import annotations

import numpy as np

from . import settings
from .buffer import SampleBuffer


def peaks(buffer: SampleBuffer, width: int) -> np.ndarray:
    """Absolute peak of the first channel for each pixel column."""
    width = max(0, int(width))
    result = np.zeros(width, dtype=np.float32)
    n = buffer.frame_count
    if n == 0 or width == 0:
        return result
    amp = np.abs(buffer.channel(0))
    edges = np.linspace(0, n, width + 1).astype(int)
    for i in range(width):
        a, b = edges[i], edges[i + 1]
        if b > a:
            result[i] = amp[a:b].max()
    return result


def draw_waveform(canvas, buffer: SampleBuffer, width: int, height: int,
                  color: str = settings.COL_WAVE, tag: str = "wave") -> None:
    canvas.delete(tag)
    canvas.create_rectangle(0, 0, width, height, fill=settings.COL_BG, outline="", tags=tag)
    mid = height // 2
    canvas.create_line(0, mid, width, mid, fill="#0f172a", tags=tag)
    for i, v in enumerate(peaks(buffer, width)):
        y = int(min(1.0, float(v)) * (height * 0.45))
        if y > 0:
            canvas.create_line(i, mid - y, i, mid + y, fill=color, tags=tag)
