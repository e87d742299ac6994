import numpy as np
import pytest

from padsampler.buffer import SampleBuffer
from padsampler.segmentation import SoundSegment, detect_segments, split_buffer

SR = 44100


def bursts(duration, regions, sr=SR, amp=0.5, channels=1):
    """Silence with constant-magnitude noise inside each [start, end) region."""
    x = np.zeros(int(round(duration * sr)), dtype=np.float32)
    for start, end in regions:
        a, b = int(round(start * sr)), int(round(end * sr))
        x[a:b] = amp * np.where(np.arange(b - a) % 2 == 0, 1.0, -1.0)
    return SampleBuffer(np.tile(x, (channels, 1)), sr)


def test_two_sounds_are_found():
    buffer = bursts(3.0, [(0.5, 1.2), (2.0, 2.8)])
    segments = detect_segments(buffer, 0.02, 0.1, 0.05)
    assert len(segments) == 2
    assert segments[0].start == pytest.approx(0.5, abs=1e-3)
    assert segments[0].end == pytest.approx(1.2, abs=1e-3)
    assert segments[1].start == pytest.approx(2.0, abs=1e-3)
    assert segments[1].end == pytest.approx(2.8, abs=1e-3)


def test_detection_is_deterministic():
    buffer = bursts(3.0, [(0.1, 0.4), (1.0, 1.3), (2.2, 2.5)])
    assert detect_segments(buffer) == detect_segments(buffer)


def test_segments_are_ordered_and_disjoint():
    buffer = bursts(4.0, [(0.1, 0.4), (1.0, 1.3), (2.2, 2.5), (3.0, 3.9)])
    segments = detect_segments(buffer)
    assert len(segments) == 4
    for seg in segments:
        assert seg.start < seg.end
    for prev, nxt in zip(segments, segments[1:]):
        assert prev.end <= nxt.start


def test_all_silent_buffer():
    assert detect_segments(SampleBuffer.silence(1.0, SR)) == []


def test_empty_buffer():
    assert detect_segments(SampleBuffer.silence(0.0, SR)) == []


def test_short_gap_does_not_split():
    buffer = bursts(2.0, [(0.5, 1.0), (1.05, 1.5)])
    segments = detect_segments(buffer, 0.02, 0.1, 0.05)
    assert len(segments) == 1
    assert segments[0].start == pytest.approx(0.5, abs=1e-3)
    assert segments[0].end == pytest.approx(1.5, abs=1e-3)


def test_short_sound_is_dropped():
    buffer = bursts(2.0, [(0.5, 0.52), (1.0, 1.5)])
    segments = detect_segments(buffer, 0.02, 0.1, 0.05)
    assert len(segments) == 1
    assert segments[0].start == pytest.approx(1.0, abs=1e-3)


def test_sound_running_to_the_end_ends_at_buffer_end():
    buffer = bursts(2.0, [(0.3, 0.6), (1.5, 2.0)])
    segments = detect_segments(buffer)
    assert segments[-1].end == pytest.approx(2.0)


def test_threshold_is_strict():
    buffer = bursts(1.0, [(0.2, 0.8)], amp=0.02)
    assert detect_segments(buffer, silence_threshold=0.02) == []
    assert len(detect_segments(buffer, silence_threshold=0.01)) == 1


def test_only_first_channel_is_scanned():
    data = np.zeros((2, SR), dtype=np.float32)
    data[1, 1000:20000] = 0.9
    assert detect_segments(SampleBuffer(data, SR)) == []


def test_segment_duration():
    assert SoundSegment(0.5, 1.25).duration == pytest.approx(0.75)


def test_split_buffer_extracts_each_segment():
    buffer = bursts(3.0, [(0.5, 1.2), (2.0, 2.8)], channels=2)
    pieces = split_buffer(buffer, [SoundSegment(0.5, 1.2), SoundSegment(2.0, 2.8)])
    assert [p.frame_count for p in pieces] == [30870, 35280]
    assert all(p.num_channels == 2 for p in pieces)
    assert all(p.sample_rate == SR for p in pieces)
    assert np.allclose(np.abs(pieces[0].channel(1)), 0.5)


def test_split_buffer_drops_empty_segments():
    buffer = bursts(1.0, [(0.1, 0.9)])
    pieces = split_buffer(buffer, [SoundSegment(0.4, 0.4), SoundSegment(5.0, 6.0),
                                   SoundSegment(0.1, 0.2)])
    assert len(pieces) == 1
    assert pieces[0].frame_count == 4410


def test_split_buffer_leaves_source_alone():
    buffer = bursts(1.0, [(0.1, 0.9)])
    before = buffer.channels.copy()
    pieces = split_buffer(buffer, [SoundSegment(0.1, 0.5)])
    assert pieces[0] is not buffer
    assert np.array_equal(buffer.channels, before)
    assert not pieces[0].channels.flags.writeable
