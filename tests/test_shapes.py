import numpy as np
import pytest

import shapes


@pytest.mark.parametrize("mode", shapes.known_modes())
def test_every_mode_fills_the_buffer(mode):
    pts = shapes.generate_targets(mode, 1500, seed=1)
    assert pts.shape == (1500, 3)
    assert pts.dtype == np.float32
    assert np.all(np.isfinite(pts))


def test_unknown_mode_is_sphere():
    pts = shapes.generate_targets("not-a-mode", 2000, seed=0)
    r = np.linalg.norm(pts, axis=1)
    assert np.allclose(r, shapes.SPHERE_RADIUS, atol=1e-3)


def test_same_seed_same_targets():
    a = shapes.generate_targets("love", 1000, seed=7)
    b = shapes.generate_targets("love", 1000, seed=7)
    assert np.array_equal(a, b)


def test_glyph_pixels_are_recycled():
    pix = shapes.glyph_pixels("A")
    assert 0 < len(pix) < 20000
    pts = shapes.generate_targets("text:A", 20000, seed=0)
    assert pts.shape == (20000, 3)
    lim = shapes.GLYPH_EXTENT + 0.2
    assert np.all(np.abs(pts[:, :2]) <= lim)


def test_empty_glyph_falls_back_to_ball():
    assert shapes.glyph_pixels("").shape == (0, 2)
    pts = shapes.generate_targets("text: ", 500, seed=0)
    assert np.all(np.linalg.norm(pts, axis=1) <= 2.0 + 1e-4)


def test_text_aliases():
    assert np.array_equal(
        shapes.generate_targets("spelling", 800, seed=2),
        shapes.generate_targets("text:A", 800, seed=2),
    )


def test_zero_particles():
    assert shapes.generate_targets("vortex", 0).shape == (0, 3)


def test_board_and_card_layout():
    assert shapes.board_cell_center(4) == (0.0, 0.0)
    assert shapes.board_cell_center(0) == (-shapes.CELL_PITCH, shapes.CELL_PITCH)
    assert shapes.board_cell_center(8) == (shapes.CELL_PITCH, -shapes.CELL_PITCH)
    xs = {shapes.memory_card_center(c)[0] for c in range(12)}
    ys = {shapes.memory_card_center(c)[1] for c in range(12)}
    assert len(xs) == 4 and len(ys) == 3
