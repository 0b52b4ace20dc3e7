import numpy as np

from gestures import ControlPoint
from modes import HudSignal, TURN_WIN
from renderer import SwarmRenderer
from swarm import SwarmEngine


def test_origin_projects_to_centre():
    r = SwarmRenderer(320, 240)
    xs, ys, depth, vis = r.project(np.zeros((1, 3), dtype=np.float32))
    assert vis[0]
    assert (xs[0], ys[0]) == (160.0, 120.0)
    assert depth[0] == r.cam_z


def test_behind_camera_is_hidden():
    r = SwarmRenderer(320, 240)
    _, _, _, vis = r.project(np.array([[0.0, 0.0, 20.0]], dtype=np.float32))
    assert not vis[0]


def test_render_draws_particles():
    eng = SwarmEngine({"num_particles": 2000, "seed": 0})
    eng.step(0.016)
    r = SwarmRenderer(320, 240)
    img = r.render(eng)
    assert img.shape == (240, 320, 3)
    assert img.dtype == np.uint8
    assert img.max() > 0


def test_hud_overlay():
    r = SwarmRenderer(320, 240)
    img = np.zeros((240, 320, 3), dtype=np.uint8)
    r.draw_hud(img, HudSignal("turn", TURN_WIN, "TIC TAC TOE"), "tic_tac_toe",
               status={"camera": "error", "audio": "active"}, fps=60.0,
               points=[ControlPoint(0.0, 0.0, tension=0.5)])
    assert img.max() > 0
    assert r._hud_line(HudSignal("score", 3, "SCORE")) == "SCORE: 3"
    assert r._hud_line(HudSignal("turn", TURN_WIN)) == "YOU WIN"
