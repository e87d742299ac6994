import numpy as np
import pytest

from padsampler.buffer import SampleBuffer
from padsampler.playback import Mixer, PlaybackEngine, Voice, match_channels

from conftest import FakeOutput, tone


def test_play_loaded_pad_uses_trim_and_gain(store, output):
    engine = PlaybackEngine(store, output)
    store.load(5, tone(3.0), "kick")
    assert engine.play(5)
    region, gain = output.voices[0]
    assert region.duration == pytest.approx(3.0)
    assert gain == 1.0


def test_play_trimmed_region(store, output):
    engine = PlaybackEngine(store, output)
    store.load(0, tone(2.0, sr=1000))
    store.set_trim(0, 0.5, 1.25)
    store.set_gain(0, 0.5)
    engine.play(0)
    region, gain = output.voices[0]
    assert region.frame_count == 750
    assert gain == 0.5


def test_overlapping_plays_start_independent_voices(store, output):
    engine = PlaybackEngine(store, output)
    store.load(1, tone(1.0))
    engine.play(1)
    engine.play(1)
    assert len(output.voices) == 2


@pytest.mark.parametrize("index", [-1, 16, "x"])
def test_play_invalid_index_is_noop(store, output, index):
    engine = PlaybackEngine(store, output)
    assert not engine.play(index)
    assert output.voices == []


def test_play_unloaded_pad_is_noop(store, output):
    engine = PlaybackEngine(store, output)
    assert not engine.play(3)
    assert output.voices == []


def test_play_without_output_is_noop(store):
    store.load(0, tone(0.5))
    engine = PlaybackEngine(store)
    assert not engine.is_initialized
    assert not engine.play(0)


def test_play_with_inactive_output_is_noop(store):
    store.load(0, tone(0.5))
    output = FakeOutput(active=False)
    engine = PlaybackEngine(store, output)
    assert not engine.play(0)
    assert output.voices == []


def test_attach_and_detach(store, output):
    store.load(0, tone(0.5))
    engine = PlaybackEngine(store)
    engine.attach(output)
    assert engine.play(0)
    engine.detach()
    assert not engine.play(0)


def test_play_full_ignores_trim(store, output):
    engine = PlaybackEngine(store, output)
    store.load(0, tone(2.0, sr=1000))
    store.set_trim(0, 0.5, 0.6)
    store.set_gain(0, 1.5)
    engine.play_full(0)
    region, gain = output.voices[0]
    assert region.frame_count == 2000
    assert gain == 1.5


def test_play_buffer_clamps_bounds(store, output):
    engine = PlaybackEngine(store, output)
    buffer = tone(1.0, sr=1000)
    engine.play_buffer(buffer, -3.0, 9.0)
    assert output.voices[0][0].frame_count == 1000


def test_stop_all(store, output):
    engine = PlaybackEngine(store, output)
    engine.stop_all()
    assert output.stopped == 1


def test_match_channels():
    mono = np.ones((4, 1), dtype=np.float32)
    assert match_channels(mono, 2).shape == (4, 2)
    stereo = np.stack([np.zeros(4), np.ones(4)], axis=1).astype(np.float32)
    down = match_channels(stereo, 1)
    assert down.shape == (4, 1)
    assert np.allclose(down, 0.5)


def test_voice_done():
    v = Voice(np.zeros((3, 2), dtype=np.float32))
    assert not v.done
    v.pos = 3
    assert v.done


def test_mixer_sums_voices_with_master_and_limiter():
    mixer = Mixer(sample_rate=1000, channels=1, master=1.0, limiter=0.9)
    region = SampleBuffer(np.full(10, 0.3), 1000)
    mixer.start_voice(region, gain=1.0)
    mixer.start_voice(region, gain=1.0)
    block = mixer.render(4)
    assert block.shape == (4, 1)
    assert np.allclose(block, 0.6)

    mixer.start_voice(region, gain=2.0)
    block = mixer.render(4)
    # 0.6 + 0.6 clips at the limiter
    assert np.allclose(block, 0.9)
    assert mixer.last_peak == pytest.approx(0.9)


def test_mixer_drops_finished_voices():
    mixer = Mixer(sample_rate=1000, channels=2, master=0.5)
    mixer.start_voice(SampleBuffer(np.full(6, 0.4), 1000))
    first = mixer.render(4)
    assert np.allclose(first, 0.2)
    assert mixer.voice_count == 1
    second = mixer.render(4)
    assert np.allclose(second[:2], 0.2)
    assert np.allclose(second[2:], 0.0)
    assert mixer.voice_count == 0


def test_mixer_resamples_to_its_rate():
    mixer = Mixer(sample_rate=2000, channels=1)
    voice = mixer.start_voice(SampleBuffer(np.zeros(100), 1000))
    assert len(voice.audio) == 200


def test_mixer_is_a_valid_sink(store):
    mixer = Mixer(sample_rate=1000, channels=1)
    engine = PlaybackEngine(store, mixer)
    store.load(0, tone(0.1, sr=1000))
    assert engine.play(0)
    assert mixer.voice_count == 1
    engine.stop_all()
    assert mixer.voice_count == 0
