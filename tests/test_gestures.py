import pytest

from gestures import (
    ControlPoint,
    GestureSignalProcessor,
    grip_tension,
    pinch_tension,
    pointer_point,
)


def make_hand(tip_dist, cx=0.5, wrist_y=0.8, palm=0.1):
    """Upright hand: wrist at the bottom, all fingertips straight above it."""
    lms = [(cx, wrist_y, 0.0)] * 21
    lms = list(lms)
    lms[5] = (cx, wrist_y - palm, 0.0)
    lms[9] = (cx, wrist_y - palm, 0.0)
    for i in (4, 8, 12, 16, 20):
        lms[i] = (cx, wrist_y - tip_dist, 0.0)
    return lms


def frame(*hands):
    return {"hands": [{"landmarks": lms, "handedness": label} for label, lms in hands]}


def test_grip_tension_open_and_fist():
    assert grip_tension(make_hand(0.25)) == 0.0
    assert grip_tension(make_hand(0.05)) == 1.0
    mid = grip_tension(make_hand(0.145))
    assert 0.0 < mid < 1.0


def test_grip_thresholds_are_configurable():
    lms = make_hand(0.15)
    assert grip_tension(lms, open_ratio=1.2, closed_ratio=0.4) == 0.0
    assert grip_tension(lms, open_ratio=4.0, closed_ratio=2.0) == 1.0


def test_pinch_tension():
    lms = make_hand(0.25)
    assert pinch_tension(lms) == 1.0
    lms[4] = (0.2, 0.2, 0.0)
    assert pinch_tension(lms) == 0.0


def test_position_is_mirrored():
    proc = GestureSignalProcessor()
    (pt,) = proc.update(frame(("Left", make_hand(0.25, cx=0.2))))
    # raw u=0.2 (left of the image) is the user's right side of the screen
    assert pt.x == pytest.approx(0.6)
    assert pt.y == pytest.approx(-0.4)
    assert pt.id == "Left"
    assert pt.active


def test_no_hands_clears_filters():
    proc = GestureSignalProcessor()
    proc.update(frame(("Left", make_hand(0.25))))
    assert "Left" in proc.filters
    assert proc.update({"hands": []}) == []
    assert proc.filters == {}


def test_missing_hand_loses_its_filter():
    proc = GestureSignalProcessor()
    proc.update(frame(("Left", make_hand(0.25)), ("Right", make_hand(0.25))))
    proc.update(frame(("Right", make_hand(0.25))))
    assert set(proc.filters) == {"Right"}


def test_reappearing_hand_starts_fresh():
    proc = GestureSignalProcessor()
    for _ in range(10):
        proc.update(frame(("Left", make_hand(0.25, cx=0.5))))
    proc.update(None)
    (pt,) = proc.update(frame(("Left", make_hand(0.25, cx=0.2))))
    assert pt.x == pytest.approx(0.6)


def test_duplicate_or_missing_labels_get_slot_ids():
    proc = GestureSignalProcessor()
    pts = proc.update(frame(("Left", make_hand(0.25)), ("Left", make_hand(0.05)), (None, make_hand(0.1))))
    assert [p.id for p in pts] == ["Left", "hand1", "hand2"]


def test_malformed_hand_is_skipped():
    proc = GestureSignalProcessor()
    bad = [(0.5, 0.5, 0.0)] * 5
    pts = proc.update(frame(("Left", bad), ("Right", make_hand(0.25))))
    assert [p.id for p in pts] == ["Right"]


class _BrokenDetector:
    def process(self, frame):
        raise RuntimeError("model blew up")


class _OneHand:
    def process(self, frame):
        return frame


def test_detector_failure_counts_as_no_hands():
    proc = GestureSignalProcessor()
    proc.update(frame(("Left", make_hand(0.25))))
    assert proc.process(_BrokenDetector(), object()) == []
    assert proc.filters == {}
    # next good frame works again
    pts = proc.process(_OneHand(), frame(("Left", make_hand(0.05))))
    assert len(pts) == 1
    assert pts[0].tension == 1.0


def test_tension_is_smoothed():
    proc = GestureSignalProcessor()
    proc.update(frame(("Left", make_hand(0.25))))
    (pt,) = proc.update(frame(("Left", make_hand(0.05))))
    assert 0.0 < pt.tension < 1.0


def test_depth_tracks_palm_size():
    proc = GestureSignalProcessor({"depth_ref_palm": 0.1, "depth_gain": 1.0})
    near = proc.depth(make_hand(0.25, palm=0.15))
    ref = proc.depth(make_hand(0.25, palm=0.1))
    far = proc.depth(make_hand(0.25, palm=0.05))
    assert far < ref < near
    assert ref == pytest.approx(0.0)


def test_pinch_mode_uses_thumb_and_index():
    proc = GestureSignalProcessor({"tension_mode": "pinch"})
    lms = make_hand(0.25)
    assert proc.tension(lms) == 1.0


def test_pinch_mode_anchors_between_wrist_and_middle_base():
    lms = make_hand(0.25, cx=0.3, wrist_y=0.9, palm=0.4)
    gx, gy, _, _ = GestureSignalProcessor().measure(lms)
    px, py, _, _ = GestureSignalProcessor({"tension_mode": "pinch"}).measure(lms)
    assert (gx, gy) == pytest.approx((0.4, 0.0))
    assert (px, py) == pytest.approx((0.4, -0.4))


def test_pointer_fallback_is_clamped():
    pt = pointer_point(3.0, -2.0, pressed=True)
    assert isinstance(pt, ControlPoint)
    assert (pt.x, pt.y, pt.tension) == (1.0, -1.0, 1.0)
    assert pt.id == "mouse"
    assert pointer_point(0.0, 0.0, pressed=False).tension == 0.0
    assert not pointer_point(0.0, 0.0, pressed=False, inside=False).active
