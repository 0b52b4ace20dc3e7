import numpy as np
import pytest

try:
    import audio_capture
except (ImportError, OSError):
    pytest.skip("sounddevice / PortAudio not available", allow_module_level=True)


def test_silence_maps_to_zero_bins():
    bins, mag = audio_capture.byte_frequency_data(np.zeros(256, dtype=np.float32))
    assert bins.shape == (128,)
    assert bins.dtype == np.uint8
    assert int(bins.max()) == 0
    assert mag.shape == (128,)


def test_sine_peaks_at_its_bin():
    n = np.arange(256)
    x = np.sin(2.0 * np.pi * 16 * n / 256).astype(np.float32)
    bins, _ = audio_capture.byte_frequency_data(x)
    assert int(np.argmax(bins)) == 16
    assert bins[16] == 255


def test_short_block_is_zero_padded():
    bins, _ = audio_capture.byte_frequency_data(np.zeros(10, dtype=np.float32))
    assert bins.shape == (128,)


def test_cue_tone_is_bounded():
    tone = audio_capture.cue_tone("eat", sample_rate=8000, volume=0.2)
    assert tone.dtype == np.float32
    assert len(tone) == int(8000 * audio_capture.CUES["eat"][2])
    assert float(np.abs(tone).max()) <= 0.2 + 1e-6


def test_unknown_cue_falls_back():
    assert len(audio_capture.cue_tone("nope", sample_rate=8000)) > 0
