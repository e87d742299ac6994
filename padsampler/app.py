import os
import logging
import tkinter as tk
from tkinter import filedialog, messagebox

from . import settings
from .capture import SoundDeviceCapture
from .editor import WaveformEditor
from .errors import PadSamplerError
from .logging_setup import configure_logging
from .playback import SoundDeviceOutput
from .sampler import Sampler

logger = logging.getLogger(__name__)

AUDIO_EXTS = (".wav", ".flac", ".mp3", ".ogg", ".aiff", ".aif")

# Neon studio theme
COL_BG = "#0b0f1a"
COL_PANEL = "#101827"
COL_ACCENT = "#39ff14"
COL_TEXT = "#e6f1ff"
COL_MUTED = "#7a8aa0"
COL_WARN = "#ff2e63"


def short_name(name: str, max_len: int = 12) -> str:
    name = name.replace("_", " ").strip()
    if len(name) > max_len:
        return name[: max_len - 1].strip() + "…"
    return name


def grid_order(size: int = 4) -> list:
    """Pad indices row by row from the top; pad 0 sits bottom-left."""
    return [row * size + col for row in range(size - 1, -1, -1) for col in range(size)]


def build_ui(sampler: Sampler):
    root = tk.Tk()
    root.title("padsampler")
    root.configure(bg=COL_BG)

    status_var = tk.StringVar(value="Ready. Load a sound or record one.")
    rec_var = tk.StringVar(value="REC: off")
    pad_var = tk.StringVar(value="No pad selected")
    gain_var = tk.DoubleVar(value=settings.DEFAULT_GAIN)
    threshold_var = tk.DoubleVar(value=settings.SILENCE_THRESHOLD)
    take = {"buffer": None, "segments": []}
    selected = {"index": None}

    # Top status bar
    top = tk.Frame(root, bg=COL_BG)
    top.pack(fill="x", padx=10, pady=8)
    tk.Label(top, textvariable=pad_var, font=("Arial", 13), bg=COL_BG, fg=COL_TEXT).pack(side="left")
    rec_label = tk.Label(top, textvariable=rec_var, font=("Arial", 11), bg=COL_BG, fg=COL_TEXT)
    rec_label.pack(side="right", padx=12)

    body = tk.Frame(root, bg=COL_BG)
    body.pack(fill="both", expand=True, padx=10)

    pads_frame = tk.Frame(body, bg=COL_PANEL)
    pads_frame.pack(side="left", fill="y", padx=(0, 8), pady=4)

    right = tk.Frame(body, bg=COL_BG)
    right.pack(side="left", fill="both", expand=True)

    wave_canvas = tk.Canvas(right, width=settings.WAVE_WIDTH, height=settings.WAVE_HEIGHT,
                            bg=COL_PANEL, highlightthickness=0, cursor="hand2")
    wave_canvas.pack(fill="x", pady=4)
    editor = WaveformEditor(wave_canvas, sampler.pads, settings.WAVE_WIDTH, settings.WAVE_HEIGHT)
    editor.bind()
    trim_info = tk.StringVar(value=editor.trim_info())
    tk.Label(right, textvariable=trim_info, anchor="w", bg=COL_BG, fg=COL_MUTED).pack(fill="x")

    def update_trim_info():
        trim_info.set(editor.trim_info())

    wave_canvas.bind("<ButtonRelease-1>", lambda e: update_trim_info(), add="+")

    def report(title: str, e: Exception):
        logger.warning("%s: %s", title, e)
        messagebox.showerror(title, str(e))

    # -----------------------------
    # Pads
    # -----------------------------
    pad_buttons = {}

    def update_pad_button(index: int):
        pad = sampler.pads.get(index)
        key = sampler.key_for_pad(index) or "--"
        btn = pad_buttons[index]
        name = short_name(pad.name) if pad.loaded else "(empty)"
        color = COL_ACCENT if pad.loaded else COL_MUTED
        relief = "sunken" if selected["index"] == index else "raised"
        btn.config(text=f"{key}\n{name}", bg=color, activebackground=color, relief=relief)

    def refresh_pads():
        for index in pad_buttons:
            update_pad_button(index)

    def select_pad(index: int):
        selected["index"] = index
        pad = sampler.pads.get(index)
        if pad.loaded:
            pad_var.set(f"{pad.name}  ({pad.duration:.2f}s)")
            gain_var.set(pad.gain)
            editor.show_pad(index)
        else:
            pad_var.set(f"{pad.name} (empty)")
            editor.close()
        update_trim_info()
        refresh_pads()

    def hit_pad(index: int):
        select_pad(index)
        sampler.play(index)

    for pos, index in enumerate(grid_order()):
        btn = tk.Button(pads_frame, width=12, height=4, font=("Arial", 9, "bold"), fg=COL_BG,
                        command=lambda i=index: hit_pad(i))
        btn.grid(row=pos // 4, column=pos % 4, padx=6, pady=6, sticky="nsew")
        pad_buttons[index] = btn

    # -----------------------------
    # Edit controls
    # -----------------------------
    edit = tk.Frame(right, bg=COL_BG)
    edit.pack(fill="x", pady=4)

    def load_sample_file():
        index = selected["index"]
        if index is None:
            index = sampler.pads.first_empty_index()
        path = filedialog.askopenfilename(
            title="Load sample", filetypes=[("Audio", " ".join("*" + e for e in AUDIO_EXTS))]
        )
        if not path:
            return
        try:
            sampler.pads.load_file(index, path)
        except (PadSamplerError, OSError) as e:
            report("Load error", e)
            return
        select_pad(index)
        status_var.set(f"Loaded {os.path.basename(path)} on pad {index + 1}")

    def with_pad(fn):
        def run():
            if selected["index"] is not None:
                fn(selected["index"])
        return run

    def reset_trim(_index):
        editor.reset_trim()
        update_trim_info()
        gain_var.set(settings.DEFAULT_GAIN)

    def clear_pad(index):
        sampler.pads.clear(index)
        select_pad(index)

    def export_pad(index):
        path = filedialog.asksaveasfilename(defaultextension=".wav", filetypes=[("WAV", "*.wav")])
        if not path:
            return
        try:
            with open(path, "wb") as f:
                f.write(sampler.export_wav(index))
        except (PadSamplerError, OSError) as e:
            report("Export error", e)
            return
        status_var.set(f"Exported: {path}")

    def on_gain(_value):
        if selected["index"] is not None:
            sampler.pads.set_gain(selected["index"], gain_var.get())

    tk.Button(edit, text="Load...", command=load_sample_file).pack(side="left", padx=2)
    tk.Button(edit, text="Play", command=with_pad(sampler.play)).pack(side="left", padx=2)
    tk.Button(edit, text="Play full", command=with_pad(sampler.play_full)).pack(side="left", padx=2)
    tk.Button(edit, text="Reset trim", command=with_pad(reset_trim)).pack(side="left", padx=2)
    tk.Button(edit, text="Clear", command=with_pad(clear_pad)).pack(side="left", padx=2)
    tk.Button(edit, text="Export WAV", command=with_pad(export_pad)).pack(side="left", padx=2)
    tk.Scale(edit, from_=settings.MIN_GAIN, to=settings.MAX_GAIN, resolution=0.05, orient="horizontal",
             label="Gain", variable=gain_var, command=on_gain, bg=COL_BG, fg=COL_TEXT,
             highlightthickness=0).pack(side="left", padx=8)

    # -----------------------------
    # Recording
    # -----------------------------
    rec = tk.Frame(right, bg=COL_BG)
    rec.pack(fill="x", pady=4)

    def toggle_record():
        if sampler.capture.is_recording:
            try:
                take["buffer"] = sampler.capture.stop_recording()
            except PadSamplerError as e:
                report("Recording", e)
                return
            analyze()
            status_var.set(f"Take: {take['buffer'].duration:.2f}s, {len(take['segments'])} sounds found")
        else:
            try:
                sampler.capture.start_recording()
            except PadSamplerError as e:
                report("Recording", e)
                return
            take["buffer"] = None
            take["segments"] = []
            status_var.set("Recording... press Stop to finish.")

    def preview_take():
        if take["buffer"] is not None:
            sampler.preview(take["buffer"])

    def cancel_record():
        sampler.capture.cancel_recording()
        status_var.set("Recording cancelled.")

    def analyze(*_):
        if take["buffer"] is None:
            return
        take["segments"] = sampler.analyze(take["buffer"], float(threshold_var.get()))
        status_var.set(f"{len(take['segments'])} sounds found")

    def keep_take():
        if take["buffer"] is None:
            return
        pad = sampler.assign_recording(take["buffer"], selected["index"])
        select_pad(pad.index)

    def split_take():
        if take["buffer"] is None:
            return
        filled = sampler.split_to_pads(take["buffer"], take["segments"])
        if not filled:
            messagebox.showinfo(
                "Split", "No segments detected. Try adjusting the silence threshold or record again."
            )
            return
        select_pad(filled[0])
        status_var.set(f"Split into {len(filled)} pads")

    tk.Button(rec, text="Rec / Stop", command=toggle_record).pack(side="left", padx=2)
    tk.Button(rec, text="Cancel", command=cancel_record).pack(side="left", padx=2)
    tk.Button(rec, text="Preview take", command=preview_take).pack(side="left", padx=2)
    tk.Button(rec, text="Keep on pad", command=keep_take).pack(side="left", padx=2)
    tk.Button(rec, text="Split to pads", command=split_take).pack(side="left", padx=2)
    tk.Scale(rec, from_=0.001, to=0.2, resolution=0.001, orient="horizontal", label="Silence",
             variable=threshold_var, command=analyze, bg=COL_BG, fg=COL_TEXT,
             highlightthickness=0).pack(side="left", padx=8)

    tk.Label(root, textvariable=status_var, anchor="w", bg=COL_PANEL, fg=COL_TEXT).pack(fill="x", side="bottom")

    # -----------------------------
    # Status loop + keys
    # -----------------------------
    def update_status():
        if sampler.capture.is_recording:
            rec_var.set(f"REC: {sampler.capture.elapsed():.1f}s")
            rec_label.config(fg=COL_WARN)
        else:
            rec_var.set("REC: off")
            rec_label.config(fg=COL_TEXT)
        root.after(100, update_status)
    update_status()

    pressed = set()

    def on_key(event):
        k = event.keysym.lower()
        if k == "escape":
            root.destroy()
            return
        if k == "space":
            toggle_record()
            return
        if k in pressed:
            return
        index = sampler.pad_for_key(k)
        if index is not None:
            pressed.add(k)
            hit_pad(index)

    def on_key_up(event):
        pressed.discard(event.keysym.lower())

    root.bind("<KeyPress>", on_key)
    root.bind("<KeyRelease>", on_key_up)
    root.protocol("WM_DELETE_WINDOW", lambda: (editor.close(), root.destroy()))

    refresh_pads()
    return root


# -----------------------------
# Main
# -----------------------------
def main():
    configure_logging()
    output = SoundDeviceOutput()
    sampler = Sampler(output=output, capture_device=SoundDeviceCapture())
    try:
        output.start()
    except PadSamplerError as e:
        logger.error("%s", e)
        return 1

    try:
        root = build_ui(sampler)
        root.mainloop()
    finally:
        sampler.capture.cancel_recording()
        output.stop()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
