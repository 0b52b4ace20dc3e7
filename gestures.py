# gestures.py
# Raw hand landmarks -> smoothed control points (position + grip tension).
from __future__ import annotations

from dataclasses import dataclass
import logging
import math

from params import _pget
from predictor import HandFilter, _clamp01, _clamp11

log = logging.getLogger(__name__)

WRIST = 0
THUMB_TIP = 4
INDEX_BASE = 5
INDEX_TIP = 8
MIDDLE_BASE = 9
MIDDLE_TIP = 12
RING_TIP = 16
PINKY_TIP = 20

FINGERTIPS = (THUMB_TIP, INDEX_TIP, MIDDLE_TIP, RING_TIP, PINKY_TIP)
NUM_LANDMARKS = 21


@dataclass(frozen=True)
class ControlPoint:
    x: float                 # [-1, 1], mirrored screen space
    y: float                 # [-1, 1], up is positive
    z: float = 0.0           # [-1, 1], toward the camera is positive
    tension: float = 0.0     # 0 open .. 1 closed fist
    active: bool = True
    id: str | None = None


def _as_hands_list(hand_result):
    if hand_result is None:
        return []
    if isinstance(hand_result, dict) and isinstance(hand_result.get("hands"), list):
        return hand_result["hands"]
    if isinstance(hand_result, (list, tuple)):
        return list(hand_result)
    return []


def _get_landmarks(hand):
    if hand is None:
        return None
    if isinstance(hand, dict):
        return hand.get("landmarks", hand.get("landmarks_px", None))
    lms = getattr(hand, "landmarks", None)
    if lms is not None:
        return lms
    if isinstance(hand, (list, tuple)):
        return hand
    return None


def _get_handedness(hand):
    if isinstance(hand, dict):
        label = hand.get("handedness")
    else:
        label = getattr(hand, "handedness", None)
    return str(label) if label else None


def _dist(a, b) -> float:
    return math.hypot(float(a[0]) - float(b[0]), float(a[1]) - float(b[1]))


def _valid(lms) -> bool:
    try:
        if lms is None or len(lms) < NUM_LANDMARKS:
            return False
        for lm in lms:
            if len(lm) < 2 or not (math.isfinite(lm[0]) and math.isfinite(lm[1])):
                return False
    except (TypeError, ValueError):
        return False
    return True


def palm_width(lms) -> float:
    return _dist(lms[WRIST], lms[INDEX_BASE])


def grip_tension(lms, open_ratio: float = 2.2, closed_ratio: float = 0.7) -> float:
    """Average fingertip-to-wrist distance over palm width, inverted to 0 open .. 1 fist."""
    palm = palm_width(lms) or 1.0
    avg_tip = sum(_dist(lms[WRIST], lms[i]) for i in FINGERTIPS) / len(FINGERTIPS)
    ratio = avg_tip / palm
    span = (open_ratio - closed_ratio) or 1e-6
    return _clamp01(1.0 - (ratio - closed_ratio) / span)


def pinch_tension(lms, open_dist: float = 0.15, pinch_range: float = 0.12) -> float:
    d = _dist(lms[THUMB_TIP], lms[INDEX_TIP])
    return _clamp01((open_dist - d) / (pinch_range or 1e-6))


def pointer_point(x: float, y: float, pressed: bool, inside: bool = True) -> ControlPoint:
    """Mouse fallback: one point, full tension while the button is down."""
    return ControlPoint(
        x=_clamp11(float(x)),
        y=_clamp11(float(y)),
        z=0.0,
        tension=1.0 if pressed else 0.0,
        active=bool(inside),
        id="mouse",
    )


class GestureSignalProcessor:
    """
    Per-frame hand landmarks -> list[ControlPoint].

    Each hand id keeps its own x/y/z/tension filters. Ids missing from a frame
    lose their filters, so a hand that comes back starts fresh.
    """

    def __init__(self, params=None):
        p = params if params is not None else {}
        self.tension_mode = str(_pget(p, "tension_mode", "grip"))
        self.open_ratio = float(_pget(p, "open_ratio", 2.2))
        self.closed_ratio = float(_pget(p, "closed_ratio", 0.7))
        self.pinch_open_dist = float(_pget(p, "pinch_open_dist", 0.15))
        self.pinch_range = float(_pget(p, "pinch_range", 0.12))
        self.depth_ref_palm = float(_pget(p, "depth_ref_palm", 0.12))
        self.depth_gain = float(_pget(p, "depth_gain", 1.5))

        self._xy = (float(_pget(p, "filter_xy_q", 0.01)), float(_pget(p, "filter_xy_r", 0.05)))
        self._z = (float(_pget(p, "filter_z_q", 0.002)), float(_pget(p, "filter_z_r", 0.1)))
        self._t = (float(_pget(p, "filter_tension_q", 0.05)), float(_pget(p, "filter_tension_r", 0.08)))

        self.filters: dict[str, HandFilter] = {}
        self._last_error = None

    def reset(self) -> None:
        self.filters.clear()

    # ---------- measurement ----------

    def tension(self, lms) -> float:
        if self.tension_mode == "pinch":
            return pinch_tension(lms, self.pinch_open_dist, self.pinch_range)
        return grip_tension(lms, self.open_ratio, self.closed_ratio)

    def depth(self, lms) -> float:
        ref = self.depth_ref_palm or 1e-6
        return _clamp11((palm_width(lms) - ref) / ref * self.depth_gain)

    def anchor(self, lms) -> tuple[float, float]:
        """Palm point: middle base for grip, wrist/middle-base midpoint for pinch."""
        mid = lms[MIDDLE_BASE]
        if self.tension_mode == "pinch":
            wrist = lms[WRIST]
            return (float(wrist[0]) + float(mid[0])) * 0.5, (float(wrist[1]) + float(mid[1])) * 0.5
        return float(mid[0]), float(mid[1])

    def measure(self, lms) -> tuple[float, float, float, float]:
        px, py = self.anchor(lms)
        x = _clamp11((0.5 - px) * 2.0)
        y = _clamp11((0.5 - py) * 2.0)
        return x, y, self.depth(lms), self.tension(lms)

    # ---------- public API ----------

    def update(self, raw_hands) -> list[ControlPoint]:
        hands = _as_hands_list(raw_hands)
        if not hands:
            self.filters.clear()
            return []

        points = []
        seen = set()
        for i, hand in enumerate(hands):
            lms = _get_landmarks(hand)
            if not _valid(lms):
                log.warning("Skipping malformed hand %d (landmarks=%s)", i, None if lms is None else len(lms))
                continue

            hid = _get_handedness(hand)
            if hid is None or hid in seen:
                hid = f"hand{i}"
            seen.add(hid)

            filt = self.filters.get(hid)
            if filt is None:
                filt = HandFilter(xy=self._xy, z=self._z, tension=self._t)
                self.filters[hid] = filt

            x, y, z, t = filt.update(*self.measure(lms))
            points.append(ControlPoint(x=x, y=y, z=z, tension=t, active=True, id=hid))

        for stale in [k for k in self.filters if k not in seen]:
            del self.filters[stale]

        return points

    def process(self, detector, frame) -> list[ControlPoint]:
        """Run the detector on a frame; any failure counts as 'no hands' for this frame."""
        try:
            result = detector.process(frame)
        except Exception as e:
            msg = f"{type(e).__name__}: {e}"
            if msg != self._last_error:
                log.warning("Hand detection failed, treating frame as empty: %s", msg)
            else:
                log.debug("Hand detection failed again: %s", msg)
            self._last_error = msg
            return self.update(None)

        self._last_error = None
        return self.update(result)
