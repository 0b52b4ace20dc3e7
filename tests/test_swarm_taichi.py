import numpy as np
import pytest

pytest.importorskip("taichi")

from gestures import ControlPoint  # noqa: E402
from modes import create_mode_state  # noqa: E402
from swarm_taichi import SwarmEngineTaichi  # noqa: E402


def test_taichi_step_respects_speed_cap():
    eng = SwarmEngineTaichi({"num_particles": 800, "stiffness": 300.0, "max_speed": 4.0, "seed": 0})
    eng.set_targets(np.random.default_rng(1).normal(scale=30.0, size=(800, 3)))
    state = create_mode_state("vortex", 800, {}, seed=0)
    state.on_enter(eng.targets)

    for _ in range(20):
        eng.step(0.05, [ControlPoint(0.1, 0.1, tension=0.2)], None, state)
        assert np.linalg.norm(eng.vel, axis=1).max() <= 4.0 * (1.0 + 1e-4)
    assert np.all(np.isfinite(eng.pos))


def test_taichi_matches_numpy_direction():
    eng = SwarmEngineTaichi({"num_particles": 500, "flow_amplitude": 0.0, "centering": 0.0, "seed": 0})
    eng.set_targets(np.zeros((500, 3)))
    r0 = np.linalg.norm(eng.pos, axis=1).mean()
    for _ in range(30):
        eng.step(0.016)
    assert np.linalg.norm(eng.pos, axis=1).mean() < r0
