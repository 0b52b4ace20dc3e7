import pytest

from predictor import HandFilter, KalmanFilter1D


def test_first_measurement_seeds_estimate():
    f = KalmanFilter1D(q=0.01, r=0.05)
    assert f.update(0.7) == 0.7
    assert f.estimate == 0.7


def test_constant_measurement_converges():
    f = KalmanFilter1D(q=0.01, r=0.05, estimate=0.0)
    for _ in range(50):
        f.update(1.0)
    assert f.estimate == pytest.approx(1.0, abs=1e-6)


def test_error_shrinks_toward_steady_state():
    f = KalmanFilter1D(q=0.01, r=0.05, estimate=0.0, error=1.0)
    f.update(0.0)
    first = f.error
    for _ in range(30):
        f.update(0.0)
    assert f.error < first
    assert f.error > 0.0


def test_smoother_filter_lags_more():
    fast = KalmanFilter1D(q=0.05, r=0.01, estimate=0.0)
    slow = KalmanFilter1D(q=0.001, r=0.5, estimate=0.0)
    for _ in range(5):
        fast.update(1.0)
        slow.update(1.0)
    assert fast.estimate > slow.estimate


def test_reset_restores_initial_state():
    f = KalmanFilter1D(q=0.01, r=0.05, estimate=0.25)
    f.update(1.0)
    f.reset()
    assert f.estimate == 0.25
    assert f.error == 1.0


def test_hand_filter_clamps_outputs():
    h = HandFilter()
    x, y, z, t = h.update(3.0, -2.0, 5.0, 1.5)
    assert (x, y, z, t) == (1.0, -1.0, 1.0, 1.0)
