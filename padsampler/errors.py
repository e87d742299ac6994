"""Failures reported by the pad engine.

None of these are fatal: callers either get a no-op (with a logged
warning) or one of these exceptions, and shared state is left as it was.
"""


class PadSamplerError(Exception):
    pass


class InvalidIndex(PadSamplerError):
    def __init__(self, index):
        super().__init__(f"Invalid pad index: {index}")
        self.index = index


class NotLoaded(PadSamplerError):
    def __init__(self, index):
        super().__init__(f"Pad {index} is not loaded")
        self.index = index


class NotInitialized(PadSamplerError):
    pass


class DeviceError(PadSamplerError):
    pass


class DecodeError(PadSamplerError):
    pass


class StateError(PadSamplerError):
    pass
