import os

# -----------------------------
# Audio settings
# -----------------------------
SR = 44100           # output sample rate
BLOCK = 256          # lower = lower latency; try 512 if crackling
CHANNELS = 2
MASTER = 0.90        # master volume
LIMITER = 0.98       # hard limiter (prevents clipping)

LOG_LEVEL = os.environ.get("LOG_LEVEL", "WARNING")

# -----------------------------
# Pads
# -----------------------------
MAX_PADS = 16
DEFAULT_GAIN = 1.0
MIN_GAIN = 0.0
MAX_GAIN = 2.0

# -----------------------------
# Silence detection
# -----------------------------
SILENCE_THRESHOLD = 0.02
MIN_SILENCE_DURATION = 0.1   # seconds of quiet that end a sound
MIN_SOUND_DURATION = 0.05    # shorter sounds are discarded

# -----------------------------
# Waveform + trim bars
# -----------------------------
WAVE_WIDTH = 900
WAVE_HEIGHT = 200
REDRAW_MS = 16

HIT_RADIUS = 25      # px, pointer distance that selects a bar
HANDLE_Y = 18        # px, vertical centre of the bar handle
HANDLE_W = 20
HANDLE_H = 36

COL_BG = "#0b0f1a"
COL_WAVE = "#667eea"
COL_BAR = "#00ff00"
COL_BAR_SELECTED = "#ff6b6b"
COL_SHADE = "gray50"

# -----------------------------
# Key Mapping
# -----------------------------
# 4x4 grid, pad 0 bottom-left
KEYBOARD_MAP = {
    "a": 0, "s": 1, "d": 2, "f": 3,
    "q": 4, "w": 5, "e": 6, "r": 7,
    "z": 8, "x": 9, "c": 10, "v": 11,
    "t": 12, "y": 13, "u": 14, "i": 15,
}
