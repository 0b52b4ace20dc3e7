import numpy as np
import pytest

import shapes
from audio import AudioBands
from gestures import ControlPoint
from modes import create_mode_state
from session import SwarmSession
from swarm import SwarmEngine


def mean_error(eng):
    return float(np.linalg.norm(eng.targets - eng.pos, axis=1).mean())


def test_speed_never_exceeds_cap():
    eng = SwarmEngine({"num_particles": 2000, "stiffness": 500.0, "max_speed": 5.0, "seed": 0})
    rng = np.random.default_rng(1)
    eng.set_targets(rng.normal(scale=50.0, size=(2000, 3)))
    thunder = create_mode_state("thunder", 2000, {}, seed=0)
    thunder.on_enter(eng.targets)

    pts = [ControlPoint(0.2, 0.1, tension=0.1)]
    loud = AudioBands(level=1.0, bass=1.0, high=1.0)
    for i, dt in enumerate(np.linspace(0.001, 0.1, 60)):
        eng.step(dt, pts, loud, thunder if i % 2 else None)
        speed = np.linalg.norm(eng.vel, axis=1)
        assert speed.max() <= 5.0 * (1.0 + 1e-5)


def test_dt_is_clamped():
    eng = SwarmEngine({"num_particles": 100, "dt_max": 0.1})
    eng.step(5.0)
    assert eng.time == pytest.approx(0.1)
    eng.step(0.0)
    eng.step(float("nan"))
    eng.step(-1.0)
    assert eng.time == pytest.approx(0.1)


def test_converges_to_constant_targets():
    eng = SwarmEngine({"num_particles": 3000, "flow_amplitude": 0.0, "centering": 0.0, "seed": 0})
    eng.set_targets(shapes.generate_targets("cosmos", 3000, seed=1))

    errors = [mean_error(eng)]
    for i in range(1, 626):
        eng.step(0.016)
        if i % 25 == 0:
            errors.append(mean_error(eng))

    for a, b in zip(errors, errors[1:]):
        assert b <= a + 1e-5
    assert errors[-1] < 0.05 * errors[0]


def test_idle_sphere_stays_on_its_shell():
    s = SwarmSession({"num_particles": 6000, "mode": "idle", "seed": 0})
    for _ in range(313):
        s.frame(0.016)
    r = np.linalg.norm(s.engine.pos, axis=1)
    assert r.min() >= shapes.SPHERE_RADIUS - 1.0
    assert r.max() <= shapes.SPHERE_RADIUS + 1.0


def _hold(session, point, seconds, dt=0.016):
    session.hands.publish([point])
    for _ in range(int(round(seconds / dt))):
        session.frame(dt)


def test_closed_grip_pulls_swarm_in():
    s = SwarmSession({"num_particles": 6000, "mode": "sphere", "seed": 0})
    near = np.linalg.norm(s.engine.pos, axis=1) < s.engine.radius
    assert near.any()

    def spread():
        return float(np.linalg.norm(s.engine.pos[near], axis=1).mean())

    d0 = spread()
    grip = ControlPoint(0.0, 0.0, 0.0, tension=0.95, id="Right")
    _hold(s, grip, 1.0)
    d1 = spread()
    _hold(s, grip, 1.0)
    d2 = spread()
    assert d1 < d0
    assert d2 < d0


def test_open_hand_pushes_swarm_out():
    s = SwarmSession({"num_particles": 3000, "mode": "sphere", "seed": 0})
    d0 = float(np.linalg.norm(s.engine.pos, axis=1).mean())
    _hold(s, ControlPoint(0.0, 0.0, 0.0, tension=0.0, id="Right"), 2.0)
    d1 = float(np.linalg.norm(s.engine.pos, axis=1).mean())
    assert d1 > d0


def test_out_of_range_points_are_clamped():
    eng = SwarmEngine({"num_particles": 10})
    w = eng.point_world(ControlPoint(50.0, -50.0, 9.0))
    assert tuple(w) == (eng.half_w, -eng.half_h, eng.view_depth)


def test_set_targets_morphs_softly():
    eng = SwarmEngine({"num_particles": 100, "seed": 0})
    eng.vel[:] = 2.0
    before = eng.pos.copy()
    eng.set_targets(np.zeros((100, 3)))
    assert np.array_equal(eng.pos, before)
    assert np.all(eng.vel == 1.0)
    with pytest.raises(ValueError):
        eng.set_targets(np.zeros((99, 3)))


def test_audio_level_scales_point_size():
    eng = SwarmEngine({"num_particles": 100, "particle_size": 0.1})
    eng.step(0.016, audio=AudioBands(level=0.4))
    assert eng.size_multiplier == pytest.approx(2.0)
    assert eng.point_size() == pytest.approx(0.2)
    eng.step(0.016)
    assert eng.size_multiplier == 1.0


def test_colors_and_flat_outputs():
    eng = SwarmEngine({"num_particles": 500, "base_color": "#ffffff", "seed": 0})
    eng.step(0.016)
    col = eng.colors_flat()
    assert eng.positions_flat().shape == (1500,)
    assert col.shape == (1500,)
    assert col.min() >= 0.35 - 1e-6
    assert col.max() <= 1.0 + 1e-6
    # nearer particles (positive z) are brighter
    far = eng.pos[:, 2].argmin()
    near = eng.pos[:, 2].argmax()
    assert eng.col[near, 0] > eng.col[far, 0]


def test_mode_colours_are_applied():
    eng = SwarmEngine({"num_particles": 600, "seed": 0})
    fog = create_mode_state("spelling", 600, {}, seed=0)
    fog.on_enter(eng.targets)
    eng.step(0.016, mode_state=fog)
    assert eng.col.max() < 0.3
