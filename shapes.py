# shapes.py
# Target formations: mode name -> (N,3) float32 array of destination points.
# Pure functions of (mode, count, seed); unknown modes fall back to a sphere.

from __future__ import annotations

import math

import cv2
import numpy as np

SPHERE_RADIUS = 5.0
GLYPH_CANVAS = 256
GLYPH_EXTENT = 5.0   # glyph bitmap maps to [-5, 5] world units

TOPOLOGIES = ("love", "nature", "cosmos", "festive", "fireball", "thunder", "tornado", "vortex")
LEARNING = ("magic_reveal", "balloon_pop")
ARCADE = ("snake", "tic_tac_toe", "memory")
EXTRA = ("hearts", "flowers", "saturn", "fireworks", "lightning", "wind", "water", "sphere", "ball")

# Card layout shared with the memory game (4 x 3 grid)
MEMORY_COLS = 4
MEMORY_ROWS = 3
MEMORY_PITCH = 3.5
MEMORY_HALF_W = 1.2
MEMORY_HALF_H = 1.5

# Tic-tac-toe board: lines at +-2, board spans [-5, 5]
BOARD_LINE = 2.0
BOARD_HALF = 5.0
CELL_PITCH = 3.5


def random_on_sphere(rng, n: int, radius) -> np.ndarray:
    u = rng.random(n)
    v = rng.random(n)
    theta = 2.0 * math.pi * u
    phi = np.arccos(2.0 * v - 1.0)
    sp = np.sin(phi)
    r = np.asarray(radius, dtype=np.float64)
    return np.stack([r * sp * np.cos(theta), r * sp * np.sin(theta), r * np.cos(phi)], axis=1)


def random_in_sphere(rng, n: int, radius) -> np.ndarray:
    # cube-root radius keeps the ball volume uniform
    r = np.cbrt(rng.random(n)) * radius
    return random_on_sphere(rng, n, r)


def memory_card_center(card: int) -> tuple[float, float]:
    col = card % MEMORY_COLS
    row = card // MEMORY_COLS
    return ((col - 1.5) * MEMORY_PITCH, (row - 1) * MEMORY_PITCH)


def board_cell_center(cell: int) -> tuple[float, float]:
    """Cell 0 is top-left, 8 is bottom-right."""
    row, col = divmod(cell, 3)
    return ((col - 1) * CELL_PITCH, (1 - row) * CELL_PITCH)


def glyph_pixels(text: str, size: int = GLYPH_CANVAS, step: int = 2) -> np.ndarray:
    """
    Rasterize text into a size x size bitmap and return the lit pixels as
    world-space (x, y) pairs, row-major, sampled every `step` pixels.
    """
    if not text or not text.strip():
        return np.zeros((0, 2), dtype=np.float32)

    canvas = np.zeros((size, size), dtype=np.uint8)
    font = cv2.FONT_HERSHEY_DUPLEX

    (w1, h1), _ = cv2.getTextSize(text, font, 1.0, 1)
    scale = min(size * 0.7 / max(h1, 1), size * 0.86 / max(w1, 1))
    thick = max(2, int(round(scale * 2.5)))
    (w, h), _ = cv2.getTextSize(text, font, scale, thick)
    org = ((size - w) // 2, (size + h) // 2)
    cv2.putText(canvas, text, org, font, scale, 255, thick, cv2.LINE_AA)

    lit = canvas[::step, ::step] > 128
    ys, xs = np.nonzero(lit)
    half = size * 0.5
    px = (xs * step - half) / half * GLYPH_EXTENT
    py = -(ys * step - half) / half * GLYPH_EXTENT
    return np.stack([px, py], axis=1).astype(np.float32)


def _text(rng, n, text):
    pix = glyph_pixels(text)
    if len(pix) == 0:
        return random_in_sphere(rng, n, 2.0)
    # recycle the pixel list when there are more particles than lit pixels
    p = pix[np.arange(n) % len(pix)]
    out = np.empty((n, 3), dtype=np.float64)
    out[:, 0] = p[:, 0] + (rng.random(n) - 0.5) * 0.15
    out[:, 1] = p[:, 1] + (rng.random(n) - 0.5) * 0.15
    out[:, 2] = (rng.random(n) - 0.5) * 0.5
    return out


def _love(rng, n):
    t = rng.random(n) * 2.0 * math.pi
    x = 16.0 * np.sin(t) ** 3
    y = 13.0 * np.cos(t) - 5.0 * np.cos(2 * t) - 2.0 * np.cos(3 * t) - np.cos(4 * t)
    z = (rng.random(n) - 0.5) * 5.0
    return np.stack([x, y, z], axis=1) * 0.3


def _hearts(rng, n):
    t = rng.random(n) * 2.0 * math.pi
    spread = 1.0 - rng.random(n) ** 6  # denser core
    x = 16.0 * np.sin(t) ** 3 * 0.25
    y = (13.0 * np.cos(t) - 5.0 * np.cos(2 * t) - 2.0 * np.cos(3 * t) - np.cos(4 * t)) * 0.25
    z = (rng.random(n) - 0.5) * 3.0 * spread
    return np.stack([x, y, z], axis=1) + random_in_sphere(rng, n, 0.2)


def _nature(rng, n):
    i = np.arange(n, dtype=np.float64)
    r = 0.2 * np.sqrt(i)
    theta = i * 137.5
    out = np.stack([r * np.cos(theta), r * np.sin(theta), np.sin(r * 0.5) * 2.0], axis=1)
    # outer points would leave the view; fold them into the core
    far = r > 10.0
    if np.any(far):
        out[far] = random_in_sphere(rng, int(far.sum()), 1.0)
    return out


def _flowers(rng, n):
    i = np.arange(n, dtype=np.float64)
    r = 0.1 * np.sqrt(i)
    theta = np.radians(i * 137.508)
    petal = np.sin(theta * 5.0)
    out = np.stack([r * np.cos(theta), r * np.sin(theta), r ** 2 * 0.1 * petal], axis=1)
    far = r >= 6.0
    if np.any(far):
        out[far] = random_in_sphere(rng, int(far.sum()), 1.0)
    return out


def _cosmos(rng, n):
    radius = rng.random(n) * 8.0
    spin = radius * 3.5
    angle = rng.random(n) * 2.0 * math.pi
    x = np.cos(angle + spin) * radius
    z = np.sin(angle + spin) * radius
    y = (rng.random(n) - 0.5) * (1.0 - radius / 8.0) * 4.0
    return np.stack([x, y, z], axis=1)


def _saturn(rng, n):
    out = np.empty((n, 3), dtype=np.float64)
    planet = int(n * 0.4)
    out[:planet] = random_on_sphere(rng, planet, 2.5) * (0.9 + rng.random((planet, 1)) * 0.2)

    m = n - planet
    angle = rng.random(m) * 2.0 * math.pi
    radius = 3.5 + rng.random(m) * 3.5
    ring = np.stack([np.cos(angle) * radius, (rng.random(m) - 0.5) * 0.1, np.sin(angle) * radius], axis=1)

    # tilt 0.4 rad about the (1,0,1) axis (Rodrigues)
    k = np.array([1.0, 0.0, 1.0]) / math.sqrt(2.0)
    c, s = math.cos(0.4), math.sin(0.4)
    ring = ring * c + np.cross(k, ring) * s + np.outer(ring @ k, k) * (1.0 - c)
    out[planet:] = ring
    return out


def _festive(rng, n):
    burst = np.minimum(np.arange(n) // max(1, n // 5), 4)
    angle = burst / 5.0 * 2.0 * math.pi
    p = random_in_sphere(rng, n, 4.0)
    p[:, 0] += np.cos(angle) * 6.0
    p[:, 1] += np.sin(angle) * 6.0
    return p


def _fireworks(rng, n):
    out = random_on_sphere(rng, n, rng.random(n) * 6.0)
    streak = np.arange(n) % 20 == 0
    if np.any(streak):
        d = out[streak]
        norm = np.linalg.norm(d, axis=1, keepdims=True) + 1e-9
        out[streak] = d / norm * (rng.random((int(streak.sum()), 1)) * 8.0)
    return out


def _fireball(rng, n):
    theta = rng.random(n) * 2.0 * math.pi
    h = (rng.random(n) - 0.5) * 10.0
    return np.stack([np.cos(theta) * 4.0, h, np.sin(theta) * 4.0], axis=1)


def _twisted_ball(rng, n):
    r = 3.0 + rng.random(n)
    p = random_on_sphere(rng, n, r)
    twist = p[:, 1] * 0.5
    x = p[:, 0] * np.cos(twist) - p[:, 2] * np.sin(twist)
    z = p[:, 0] * np.sin(twist) + p[:, 2] * np.cos(twist)
    p[:, 0] = x
    p[:, 2] = z
    return p


def _tornado(rng, n):
    theta = rng.random(n) * 2.0 * math.pi
    h = (rng.random(n) - 0.5) * 10.0
    r = (h + 5.0) * 0.6
    return np.stack([np.cos(theta) * r, h, np.sin(theta) * r], axis=1)


def _wind(rng, n):
    t = rng.random(n)
    radius = 0.5 + t * 4.0
    angle = t * 20.0 + rng.random(n) * 2.0 * math.pi
    return np.stack([np.cos(angle) * radius, -5.0 + t * 10.0, np.sin(angle) * radius], axis=1)


def _thunder(rng, n):
    return (rng.random((n, 3)) - 0.5) * np.array([12.0, 12.0, 2.0])


def _lightning(rng, n):
    bolt = np.arange(n) % 5
    t = rng.random(n)
    x = (bolt - 2) * 3.0 + (rng.random(n) - 0.5) * 1.5
    z = (rng.random(n) - 0.5) * 1.5
    return np.stack([x, 6.0 - t * 12.0, z], axis=1)


def _water(rng, n):
    x = (rng.random(n) - 0.5) * 12.0
    z = (rng.random(n) - 0.5) * 6.0
    y = np.sin(x * 0.8) * np.cos(z * 0.8) * 1.5
    return np.stack([x, y, z], axis=1)


def _cube(rng, n):
    s = 3.5
    d = rng.random((n, 3)) - 0.5
    m = np.max(np.abs(d), axis=1, keepdims=True) + 1e-9
    return d / m * s


def _balloon(rng, n):
    return random_on_sphere(rng, n, 2.5)


def _tic_tac_toe(rng, n):
    line = np.arange(n) % 4
    along = (rng.random(n) - 0.5) * 2.0 * BOARD_HALF
    fixed = np.where(line % 2 == 0, -BOARD_LINE, BOARD_LINE)
    vertical = line < 2
    x = np.where(vertical, fixed, along)
    y = np.where(vertical, along, fixed)
    z = (rng.random(n) - 0.5) * 0.5
    return np.stack([x, y, z], axis=1)


def _memory(rng, n):
    card = np.arange(n) % (MEMORY_COLS * MEMORY_ROWS)
    cx = (card % MEMORY_COLS - 1.5) * MEMORY_PITCH
    cy = (card // MEMORY_COLS - 1) * MEMORY_PITCH
    x = cx + (rng.random(n) - 0.5) * 2.0 * MEMORY_HALF_W
    y = cy + (rng.random(n) - 0.5) * 2.0 * MEMORY_HALF_H
    return np.stack([x, y, np.zeros(n)], axis=1)


def _snake(rng, n):
    seg = np.arange(n, dtype=np.float64) / max(1, n)
    return np.stack([seg * 20.0 - 10.0, np.sin(seg * 10.0) * 2.0, np.zeros(n)], axis=1)


def _sphere(rng, n):
    return random_on_sphere(rng, n, SPHERE_RADIUS)


def _ball(rng, n):
    return random_in_sphere(rng, n, SPHERE_RADIUS)


_GENERATORS = {
    "love": _love,
    "hearts": _hearts,
    "nature": _nature,
    "flowers": _flowers,
    "cosmos": _cosmos,
    "vortex": _cosmos,
    "saturn": _saturn,
    "festive": _festive,
    "fireworks": _fireworks,
    "fireball": _fireball,
    "twisted": _twisted_ball,
    "tornado": _tornado,
    "wind": _wind,
    "thunder": _thunder,
    "lightning": _lightning,
    "water": _water,
    "magic_reveal": _cube,
    "balloon_pop": _balloon,
    "tic_tac_toe": _tic_tac_toe,
    "memory": _memory,
    "snake": _snake,
    "sphere": _sphere,
    "idle": _sphere,
    "ball": _ball,
}

_TEXT_ALIASES = {"spelling": "A", "counting": "1"}


def known_modes() -> tuple[str, ...]:
    return tuple(_GENERATORS) + tuple(_TEXT_ALIASES)


def generate_targets(mode: str, count: int, seed=None) -> np.ndarray:
    rng = np.random.default_rng(seed)
    n = int(count)
    mode = (mode or "").strip()

    if mode.startswith("text:"):
        pts = _text(rng, n, mode[5:])
    elif mode in _TEXT_ALIASES:
        pts = _text(rng, n, _TEXT_ALIASES[mode])
    else:
        pts = _GENERATORS.get(mode, _sphere)(rng, n)

    return np.ascontiguousarray(pts, dtype=np.float32)
