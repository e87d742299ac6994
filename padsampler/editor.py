"""
Waveform editor: couples a canvas, its trim bars and the Pad Store.

The editor owns the canvas-side objects (trim bars, redraw loop) and
hands them out through attributes; nothing is registered globally.
"""

from __future__ import annotations

import logging
from typing import Optional

from . import settings
from .pads import PadStore
from .trimbars import TrimBars
from .waveform import draw_waveform

logger = logging.getLogger(__name__)


class RedrawLoop:
    """
    Repeating frame callback on a Tk-style scheduler (``after``/``after_cancel``).

    After ``cancel()`` no further frame runs, even if a tick was already queued.
    """

    def __init__(self, scheduler, frame, interval_ms: int = settings.REDRAW_MS):
        self.scheduler = scheduler
        self.frame = frame
        self.interval_ms = interval_ms
        self._job = None
        self._cancelled = True

    @property
    def running(self) -> bool:
        return not self._cancelled

    def start(self) -> None:
        if not self._cancelled:
            return
        self._cancelled = False
        self._job = self.scheduler.after(self.interval_ms, self._tick)

    def cancel(self) -> None:
        self._cancelled = True
        job, self._job = self._job, None
        if job is not None:
            self.scheduler.after_cancel(job)

    def _tick(self) -> None:
        self._job = None
        if self._cancelled:
            return
        self.frame()
        if not self._cancelled:
            self._job = self.scheduler.after(self.interval_ms, self._tick)


class WaveformEditor:
    """
    Usage:
        editor = WaveformEditor(canvas, store)
        editor.bind()
        editor.show_pad(3)
    """

    def __init__(self, canvas, pads: PadStore, width: Optional[int] = None,
                 height: Optional[int] = None, interval_ms: int = settings.REDRAW_MS):
        self.canvas = canvas
        self.pads = pads
        self.width = int(width or canvas.winfo_width() or settings.WAVE_WIDTH)
        self.height = int(height or canvas.winfo_height() or settings.WAVE_HEIGHT)
        self.interval_ms = interval_ms
        self.trim_bars = TrimBars(self.width, self.height)
        self.loop: Optional[RedrawLoop] = None
        self.pad_index: Optional[int] = None

    def bind(self) -> None:
        self.canvas.bind("<Motion>", self.on_motion)
        self.canvas.bind("<B1-Motion>", self.on_motion)
        self.canvas.bind("<ButtonPress-1>", self.on_press)
        self.canvas.bind("<ButtonRelease-1>", self.on_release)
        self.canvas.bind("<Leave>", self.on_leave)
        self.canvas.bind("<Configure>", self.on_configure)

    def _current_pad(self):
        if self.pad_index is None:
            return None
        pad = self.pads.get(self.pad_index)
        if pad is None or not pad.loaded or pad.buffer is None:
            return None
        return pad

    # -----------------------------
    # Pad <-> bars
    # -----------------------------
    def show_pad(self, index) -> bool:
        self._stop_loop()
        pad = self.pads.get(index)
        if pad is None or not pad.loaded or pad.buffer is None:
            logger.warning("Pad %r not loaded or invalid", index)
            self.pad_index = None
            self._clear_canvas()
            return False

        self.pad_index = index
        draw_waveform(self.canvas, pad.buffer, self.width, self.height)
        self.pull_from_pad()
        self.loop = RedrawLoop(self.canvas, self.redraw, self.interval_ms)
        self.loop.start()
        return True

    def pull_from_pad(self) -> None:
        pad = self._current_pad()
        if pad is None:
            return
        dur = pad.buffer.duration
        start = max(0.0, min(pad.trim_start, dur))
        end = max(start, min(pad.trim_end, dur))
        self.trim_bars.from_seconds(start, end, dur)
        self.redraw()

    def push_to_pad(self) -> None:
        pad = self._current_pad()
        if pad is None:
            return
        start, end = self.trim_bars.to_seconds(pad.buffer.duration)
        self.pads.set_trim(self.pad_index, start, end)

    def trim_seconds(self) -> tuple:
        pad = self._current_pad()
        if pad is None:
            return (0.0, 0.0)
        return self.trim_bars.to_seconds(pad.buffer.duration)

    def trim_info(self) -> str:
        t_in, t_out = self.trim_seconds()
        return f"In: {t_in:.2f}s  Out: {t_out:.2f}s"

    def reset_trim(self) -> None:
        if self.pad_index is None:
            return
        self.pads.reset(self.pad_index)
        self.pull_from_pad()

    # -----------------------------
    # Pointer events
    # -----------------------------
    def on_motion(self, event) -> None:
        if self._current_pad() is None:
            return
        self.trim_bars.move_to(event.x, event.y)

    def on_press(self, event) -> None:
        if self._current_pad() is None:
            return
        self.trim_bars.hit_test(event.x, event.y)
        self.trim_bars.start_drag()

    def on_release(self, _event=None) -> None:
        was_dragging = self.trim_bars.dragging
        self.trim_bars.stop_drag()
        if was_dragging:
            self.push_to_pad()

    def on_leave(self, _event=None) -> None:
        self.trim_bars.stop_drag()

    def on_configure(self, event) -> None:
        width, height = int(event.width), int(event.height)
        if width <= 1 or height <= 1 or (width, height) == (self.width, self.height):
            return
        # bars are re-derived from the pad's seconds so they never hold a stale width
        self.width, self.height = width, height
        self.trim_bars.resize(width, height)
        pad = self._current_pad()
        if pad is not None:
            draw_waveform(self.canvas, pad.buffer, self.width, self.height)
            self.pull_from_pad()

    # -----------------------------
    # Drawing + teardown
    # -----------------------------
    def redraw(self) -> None:
        self.trim_bars.clear(self.canvas)
        self.trim_bars.draw(self.canvas)

    def close(self) -> None:
        self._stop_loop()
        self.pad_index = None
        self._clear_canvas()

    def _stop_loop(self) -> None:
        if self.loop is not None:
            self.loop.cancel()
            self.loop = None

    def _clear_canvas(self) -> None:
        self.canvas.delete("wave")
        self.trim_bars.clear(self.canvas)
