# audio.py
# Frequency-bin snapshot -> three scalar bands (level, bass, high).
from __future__ import annotations

from dataclasses import dataclass

import numpy as np

BIN_MAX = 255.0
BASS_FRACTION = 0.1
HIGH_START = 0.5


@dataclass(frozen=True)
class AudioBands:
    level: float = 0.0
    bass: float = 0.0
    high: float = 0.0


SILENT = AudioBands()


def _clamp01(x: float) -> float:
    return 0.0 if x < 0.0 else 1.0 if x > 1.0 else x


class AudioSignalProcessor:
    """
    bass  = mean of the lowest 10% of bins
    high  = mean of the upper half
    level = mean of everything
    All normalized by the max byte value.
    """

    def __init__(self):
        self._scratch = np.zeros(0, dtype=np.float32)
        self.bands = SILENT

    def update(self, bins) -> AudioBands:
        if bins is None:
            self.bands = SILENT
            return self.bands

        data = np.asarray(bins).reshape(-1)
        n = data.shape[0]
        if n == 0:
            self.bands = SILENT
            return self.bands

        if self._scratch.shape[0] != n:
            self._scratch = np.zeros(n, dtype=np.float32)
        buf = self._scratch
        buf[:] = data
        np.nan_to_num(buf, copy=False, nan=0.0, posinf=BIN_MAX, neginf=0.0)

        bass_len = max(1, int(n * BASS_FRACTION))
        high_start = min(n - 1, int(n * HIGH_START))

        level = float(buf.mean()) / BIN_MAX
        bass = float(buf[:bass_len].mean()) / BIN_MAX
        high = float(buf[high_start:].mean()) / BIN_MAX

        self.bands = AudioBands(level=_clamp01(level), bass=_clamp01(bass), high=_clamp01(high))
        return self.bands
