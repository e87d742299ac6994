"""
Microphone capture: Idle -> Recording -> Idle.

Chunks arrive on the device's own thread. Each recording gets a session
number; chunks tagged with an older session are dropped, so a cancelled
or finished take can never leak into the next one.
"""

from __future__ import annotations

import logging
import threading
import time
from functools import partial
from typing import List, Optional

import numpy as np

from . import settings
from .buffer import SampleBuffer, decode_bytes
from .errors import DecodeError, DeviceError, NotInitialized, StateError

logger = logging.getLogger(__name__)

IDLE = "idle"
RECORDING = "recording"


class SoundDeviceCapture:
    """Default input: a sounddevice InputStream handing out raw float32 PCM chunks."""

    format = "RAW"
    subtype = "FLOAT"

    def __init__(self, samplerate: int = settings.SR, channels: int = 1,
                 block: int = settings.BLOCK, device=None):
        self.samplerate = samplerate
        self.channels = channels
        self.block = block
        self.device = device
        self._stream = None

    def open(self, on_chunk) -> None:
        if self._stream is not None:
            raise DeviceError("Capture device is already open")
        try:
            import sounddevice as sd
        except (ImportError, OSError) as e:
            raise DeviceError(f"Audio backend unavailable: {e}") from e

        def callback(indata, frames, time_info, status):
            if status:
                logger.debug("Input status: %s", status)
            on_chunk(indata.astype(np.float32).tobytes())

        try:
            stream = sd.InputStream(
                samplerate=self.samplerate,
                channels=self.channels,
                blocksize=self.block,
                dtype="float32",
                callback=callback,
                device=self.device,
            )
        except (sd.PortAudioError, ValueError) as e:
            raise DeviceError(f"Could not access microphone: {e}") from e
        try:
            stream.start()
        except sd.PortAudioError as e:
            stream.close()
            raise DeviceError(f"Could not start microphone: {e}") from e
        self._stream = stream

    def close(self) -> None:
        stream, self._stream = self._stream, None
        if stream is None:
            return
        stream.stop()
        stream.close()


class CaptureController:
    """
    Usage:
        capture = CaptureController(SoundDeviceCapture())
        capture.start_recording()
        ...
        buffer = capture.stop_recording()
    """

    def __init__(self, device=None, clock=time.monotonic):
        self.device = device
        self.clock = clock
        self.lock = threading.Lock()
        self.state = IDLE
        self._session = 0
        self._chunks: List[bytes] = []
        self._started_at: Optional[float] = None

    @property
    def is_recording(self) -> bool:
        return self.state == RECORDING

    def elapsed(self) -> float:
        started = self._started_at
        if self.state != RECORDING or started is None:
            return 0.0
        return max(0.0, self.clock() - started)

    def start_recording(self) -> None:
        if self.device is None:
            raise NotInitialized("No capture device configured")
        with self.lock:
            if self.state == RECORDING:
                raise StateError("A recording is already in progress")
            self._session += 1
            session = self._session
            self._chunks = []
            self.state = RECORDING
            self._started_at = self.clock()

        try:
            self.device.open(partial(self._on_chunk, session))
        except Exception as e:
            self._abort(session)
            self.device.close()
            logger.warning("Could not start recording: %s", e)
            if isinstance(e, DeviceError):
                raise
            raise DeviceError(f"Could not access microphone: {e}") from e
        logger.info("Recording started")

    def stop_recording(self) -> SampleBuffer:
        with self.lock:
            if self.state != RECORDING:
                raise StateError("No recording in progress")
            chunks = self._chunks
            self._abort_locked()
        self.device.close()
        logger.info("Recording stopped (%d chunks)", len(chunks))

        data = b"".join(chunks)
        if not data:
            raise DecodeError("No audio was captured")
        return decode_bytes(
            data,
            format=getattr(self.device, "format", None),
            samplerate=getattr(self.device, "samplerate", None),
            channels=getattr(self.device, "channels", None),
            subtype=getattr(self.device, "subtype", None),
        )

    def cancel_recording(self) -> None:
        with self.lock:
            if self.state != RECORDING:
                return
            self._abort_locked()
        self.device.close()
        logger.info("Recording cancelled")

    def _on_chunk(self, session: int, chunk: bytes) -> None:
        with self.lock:
            if session == self._session and self.state == RECORDING:
                self._chunks.append(bytes(chunk))

    def _abort(self, session: int) -> None:
        with self.lock:
            if session == self._session:
                self._abort_locked()

    def _abort_locked(self) -> None:
        # bumping the session orphans any chunk still in flight
        self._session += 1
        self._chunks = []
        self.state = IDLE
        self._started_at = None
