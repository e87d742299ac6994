import numpy as np
import pytest

from padsampler.buffer import SampleBuffer
from padsampler.pads import PadStore


def tone(duration, sr=44100, amp=0.5, channels=1):
    frames = int(round(duration * sr))
    # alternating sign keeps |x| constant, so every sample is "loud"
    x = amp * np.where(np.arange(frames) % 2 == 0, 1.0, -1.0)
    return SampleBuffer(np.tile(x, (channels, 1)), sr)


class FakeOutput:
    """Records every voice instead of playing it."""

    def __init__(self, active=True):
        self.is_active = active
        self.voices = []
        self.stopped = 0

    def start_voice(self, region, gain=1.0):
        self.voices.append((region, gain))

    def stop_all(self):
        self.stopped += 1
        self.voices = []


class FakeCaptureDevice:
    format = "RAW"
    subtype = "FLOAT"

    def __init__(self, samplerate=8000, channels=1, fail=None):
        self.samplerate = samplerate
        self.channels = channels
        self.fail = fail
        self.on_chunk = None
        self.opened = 0
        self.closed = 0

    @property
    def is_open(self):
        return self.opened > self.closed

    def open(self, on_chunk):
        self.opened += 1
        if self.fail is not None:
            raise self.fail
        self.on_chunk = on_chunk

    def close(self):
        self.closed += 1

    def feed(self, samples):
        self.on_chunk(np.asarray(samples, dtype=np.float32).tobytes())


class FakeCanvas:
    """Just enough of tkinter.Canvas: items by tag, bindings and an after() queue."""

    def __init__(self, width=900, height=200):
        self.width = width
        self.height = height
        self.items = []
        self.bindings = {}
        self.jobs = {}
        self._next_job = 0

    def winfo_width(self):
        return self.width

    def winfo_height(self):
        return self.height

    def bind(self, sequence, func):
        self.bindings[sequence] = func

    def delete(self, tag):
        self.items = [item for item in self.items if item[1] != tag]

    def _create(self, kind, kwargs):
        self.items.append((kind, kwargs.get("tags"), kwargs))

    def create_rectangle(self, *coords, **kwargs):
        self._create("rectangle", kwargs)

    def create_line(self, *coords, **kwargs):
        self._create("line", kwargs)

    def create_polygon(self, *coords, **kwargs):
        self._create("polygon", kwargs)

    def tagged(self, tag):
        return [item for item in self.items if item[1] == tag]

    def after(self, ms, func):
        self._next_job += 1
        job = f"after#{self._next_job}"
        self.jobs[job] = func
        return job

    def after_cancel(self, job):
        self.jobs.pop(job, None)

    def run_pending(self):
        jobs, self.jobs = self.jobs, {}
        for func in jobs.values():
            func()


class Event:
    def __init__(self, x=0, y=0, width=0, height=0):
        self.x = x
        self.y = y
        self.width = width
        self.height = height


@pytest.fixture
def store():
    return PadStore()


@pytest.fixture
def output():
    return FakeOutput()


@pytest.fixture
def canvas():
    return FakeCanvas()
