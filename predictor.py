# predictor.py
from __future__ import annotations

from dataclasses import dataclass


def _clamp01(x: float) -> float:
    return 0.0 if x < 0.0 else 1.0 if x > 1.0 else x


def _clamp11(x: float) -> float:
    return -1.0 if x < -1.0 else 1.0 if x > 1.0 else x


@dataclass
class _State:
    x: float = 0.0
    p: float = 1.0
    init: bool = False


class KalmanFilter1D:
    """
    Scalar recursive estimator (random-walk model).
    - q: process noise. Higher tracks faster but passes more jitter.
    - r: measurement noise. Higher smooths more but lags.

    If no initial estimate is given the first measurement seeds it.
    """

    def __init__(self, q: float = 0.01, r: float = 0.05, estimate: float | None = None, error: float = 1.0):
        self.q = float(q)
        self.r = float(r)
        self._x0 = estimate
        self._p0 = float(error)
        self.s = _State()
        self.reset()

    def reset(self) -> None:
        self.s = _State(p=self._p0)
        if self._x0 is not None:
            self.s.x = float(self._x0)
            self.s.init = True

    @property
    def estimate(self) -> float:
        return self.s.x

    @property
    def error(self) -> float:
        return self.s.p

    def gain(self) -> float:
        p = self.s.p + self.q
        return p / (p + self.r)

    def update(self, z: float) -> float:
        z = float(z)
        if not self.s.init:
            self.s.x = z
            self.s.init = True
            return self.s.x

        # Predict
        self.s.p += self.q

        # Correct
        k = self.s.p / (self.s.p + self.r)
        self.s.x += k * (z - self.s.x)
        self.s.p *= (1.0 - k)
        return self.s.x


class HandFilter:
    """Four independent estimators for one tracked hand: x, y, z, tension."""

    def __init__(self, xy=(0.01, 0.05), z=(0.002, 0.1), tension=(0.05, 0.08)):
        self.fx = KalmanFilter1D(*xy)
        self.fy = KalmanFilter1D(*xy)
        self.fz = KalmanFilter1D(*z)
        self.ft = KalmanFilter1D(*tension)

    def update(self, x: float, y: float, z: float, tension: float) -> tuple[float, float, float, float]:
        return (
            _clamp11(self.fx.update(x)),
            _clamp11(self.fy.update(y)),
            _clamp11(self.fz.update(z)),
            _clamp01(self.ft.update(tension)),
        )
