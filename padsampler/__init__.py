"""
padsampler - 16-pad sampler engine.

Quick Start:
    from padsampler import Sampler, SoundDeviceOutput, load_audio_file

    sampler = Sampler(output=SoundDeviceOutput())
    sampler.output.start()
    sampler.pads.load(0, load_audio_file("kick.wav"), "kick")
    sampler.play(0)
"""

from .buffer import SampleBuffer, decode_bytes, load_audio_file
from .capture import CaptureController, SoundDeviceCapture
from .errors import (
    DecodeError,
    DeviceError,
    InvalidIndex,
    NotInitialized,
    NotLoaded,
    PadSamplerError,
    StateError,
)
from .pads import Pad, PadState, PadStore
from .playback import Mixer, PlaybackEngine, SoundDeviceOutput
from .sampler import Sampler
from .segmentation import SoundSegment, detect_segments, split_buffer
from .trimbars import TrimBars, pixel_to_seconds, seconds_to_pixel
from .wav import encode_wav

__all__ = [
    'SampleBuffer', 'decode_bytes', 'load_audio_file',
    'CaptureController', 'SoundDeviceCapture',
    'PadSamplerError', 'InvalidIndex', 'NotLoaded', 'NotInitialized',
    'DeviceError', 'DecodeError', 'StateError',
    'Pad', 'PadState', 'PadStore',
    'Mixer', 'PlaybackEngine', 'SoundDeviceOutput',
    'Sampler',
    'SoundSegment', 'detect_segments', 'split_buffer',
    'TrimBars', 'pixel_to_seconds', 'seconds_to_pixel',
    'encode_wav',
]
