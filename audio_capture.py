import logging
import queue
import threading

import numpy as np
import sounddevice as sd

log = logging.getLogger(__name__)

FFT_SIZE = 256          # -> 128 frequency bins
MIN_DB = -100.0
MAX_DB = -30.0
SMOOTHING = 0.8

CUES = {
    # name: (start Hz, end Hz, seconds)
    "eat": (660.0, 990.0, 0.12),
    "pop": (880.0, 440.0, 0.08),
    "place": (520.0, 520.0, 0.06),
    "win": (523.0, 1046.0, 0.35),
    "level": (440.0, 880.0, 0.25),
}


def byte_frequency_data(samples, prev_mag=None, fft_size=FFT_SIZE, smoothing=SMOOTHING):
    """
    Mono samples -> (uint8 bins of length fft_size/2, smoothed magnitudes).
    Blackman window, time smoothing, dB range mapped onto 0..255.
    """
    x = np.zeros(fft_size, dtype=np.float32)
    s = np.asarray(samples, dtype=np.float32).reshape(-1)[-fft_size:]
    x[fft_size - len(s):] = s

    mag = np.abs(np.fft.rfft(x * np.blackman(fft_size)))[: fft_size // 2] / fft_size
    if prev_mag is not None and prev_mag.shape == mag.shape:
        mag = smoothing * prev_mag + (1.0 - smoothing) * mag

    db = 20.0 * np.log10(mag + 1e-12)
    scaled = (db - MIN_DB) / (MAX_DB - MIN_DB) * 255.0
    return np.clip(scaled, 0, 255).astype(np.uint8), mag


class AudioCapture:
    """
    Microphone -> latest frequency-bin snapshot.

    The worker thread owns the input stream; readers only ever see the most
    recent completed snapshot (never wait for a new one).
    status: "idle" | "active" | "error"
    """

    def __init__(self, sample_rate=44100, fft_size=FFT_SIZE, device=None):
        self.sample_rate = int(sample_rate)
        self.fft_size = int(fft_size)
        self.device = device

        self.status = "idle"
        self.error = ""

        self._audio_q = queue.Queue(maxsize=32)
        self._stop = threading.Event()
        self._thread = None
        self._lock = threading.Lock()
        self._bins = None

    def start(self):
        if self._thread and self._thread.is_alive():
            return

        self._stop.clear()

        def callback(indata, frames, t, status):
            if status:
                return
            try:
                self._audio_q.put_nowait(indata[:, 0].copy())
            except queue.Full:
                pass

        def worker():
            mag = None
            try:
                with sd.InputStream(
                    samplerate=self.sample_rate,
                    blocksize=self.fft_size,
                    channels=1,
                    dtype="float32",
                    device=self.device,
                    callback=callback,
                ):
                    self.status = "active"
                    log.info("Audio capture started (%d Hz, %d bins)", self.sample_rate, self.fft_size // 2)
                    while not self._stop.is_set():
                        try:
                            block = self._audio_q.get(timeout=0.2)
                        except queue.Empty:
                            continue
                        bins, mag = byte_frequency_data(block, mag, self.fft_size)
                        with self._lock:
                            self._bins = bins
            except Exception as e:
                self.status = "error"
                self.error = f"{type(e).__name__}: {e}"
                log.warning("Audio capture unavailable: %s", self.error)
                return

            self.status = "idle"

        self._thread = threading.Thread(target=worker, daemon=True)
        self._thread.start()

    def stop(self, timeout=1.0):
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        with self._lock:
            self._bins = None

    def latest(self):
        with self._lock:
            return None if self._bins is None else self._bins.copy()


def cue_tone(name, sample_rate=44100, volume=0.2):
    f0, f1, secs = CUES.get(name, CUES["place"])
    n = max(1, int(sample_rate * secs))
    freq = np.linspace(f0, f1, n)
    phase = 2.0 * np.pi * np.cumsum(freq) / sample_rate
    env = np.minimum(1.0, np.linspace(6.0, 0.0, n))
    return (np.sin(phase) * env * volume).astype(np.float32)


def play_cue(name, sample_rate=44100):
    try:
        sd.play(cue_tone(name, sample_rate), sample_rate, blocking=False)
    except Exception as e:
        log.warning("Could not play cue %r: %s", name, e)
