# modes.py
# One state object per active mode. Game logic lives entirely in which target
# each particle is pulled toward and which colour it gets.
#
# Engine-facing hooks (called once per frame, never per particle):
#   stiffness()            scalar or (N,) array
#   damping                velocity multiplier per 1/60 s
#   interaction            "field" | "attract" | "off"
#   interaction_anchors()  (k,3) world points for "attract"
#   apply_forces(...)      extra velocity contributions
#   write_colors(...)      per-particle colour overrides

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
import logging
import math
import string

import numpy as np

import shapes
from params import _pget

log = logging.getLogger(__name__)

TURN_PLAYER = 0
TURN_AI = 1
TURN_WIN = 2
TURN_LOSE = 3
TURN_DRAW = 4

WIN_LINES = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),
    (0, 3, 6), (1, 4, 7), (2, 5, 8),
    (0, 4, 8), (2, 4, 6),
)

ALPHABET = string.ascii_uppercase

# 12 card / balloon colours (rgb 0..1)
PALETTE = np.array([
    (0.94, 0.27, 0.27), (0.98, 0.45, 0.09), (0.92, 0.70, 0.03), (0.13, 0.77, 0.37),
    (0.02, 0.71, 0.83), (0.23, 0.51, 0.96), (0.66, 0.33, 0.97), (0.93, 0.28, 0.60),
    (0.55, 0.90, 0.35), (1.00, 0.60, 0.75), (0.40, 0.95, 0.90), (0.95, 0.95, 0.60),
], dtype=np.float32)

GOLD = np.array([1.0, 0.84, 0.2], dtype=np.float32)
WHITE = np.array([1.0, 1.0, 1.0], dtype=np.float32)
FOG = np.array([0.16, 0.18, 0.22], dtype=np.float32)


@dataclass(frozen=True)
class HudSignal:
    kind: str            # "topology" | "score" | "turn" | "level" | "reveal"
    value: int = 0
    label: str = ""
    cue: str | None = None


def _first_active(points):
    for p in points or ():
        if p.active:
            return p
    return None


class ModeState:
    """Plain topology: targets come from the shape generator and never move."""

    interaction = "field"

    def __init__(self, mode: str, count: int, params=None, seed=None):
        p = params if params is not None else {}
        self.mode = mode
        self.count = int(count)
        self.params = p
        self.seed = seed
        self.rng = np.random.default_rng(seed)

        self.base_stiffness = float(_pget(p, "stiffness", 2.5))
        self.damping = float(_pget(p, "damping", 0.92))
        self.half_w = float(_pget(p, "view_half_width", 8.0))
        self.half_h = float(_pget(p, "view_half_height", 6.0))

        self.formation = None
        self.targets = None

    # ---------- lifecycle ----------

    def formation_mode(self) -> str:
        return self.mode

    def on_enter(self, targets: np.ndarray) -> None:
        """Reset mode-local state and write the full formation into the shared buffer."""
        self.rng = np.random.default_rng(self.seed)
        self.formation = shapes.generate_targets(self.formation_mode(), self.count, self.seed)
        self.targets = targets
        self.targets[:] = self.formation
        self.reset()
        log.debug("Entered mode %s (%d particles)", self.mode, self.count)

    def reset(self) -> None:
        pass

    def on_frame(self, points, dt: float, elapsed: float) -> HudSignal:
        return HudSignal("topology", 0, self.mode)

    # ---------- engine hooks ----------

    def stiffness(self):
        return self.base_stiffness

    def interaction_anchors(self) -> np.ndarray:
        return np.zeros((0, 3), dtype=np.float32)

    def apply_forces(self, engine, points, audio, dt: float, elapsed: float) -> None:
        pass

    def write_colors(self, colors: np.ndarray, base_rgb: np.ndarray) -> None:
        pass

    # ---------- helpers ----------

    def to_world(self, p) -> np.ndarray:
        return np.array([p.x * self.half_w, p.y * self.half_h, 0.0], dtype=np.float32)


class ShapeMode(ModeState):
    """Topologies with their own flavour of motion (vortex spin, thunder jitter)."""

    def __init__(self, mode, count, params=None, seed=None):
        super().__init__(mode, count, params, seed)
        if mode in ("thunder", "lightning"):
            self.damping = 0.6

    def apply_forces(self, engine, points, audio, dt, elapsed):
        high_tension = max((p.tension for p in points or () if p.active), default=0.0)
        pos = engine.pos
        vel = engine.vel

        if self.mode in ("vortex", "tornado", "wind"):
            dist = np.sqrt(pos[:, 0] ** 2 + pos[:, 2] ** 2) + 0.1
            spin = (4.0 + high_tension * 12.0) * dt
            vel[:, 0] -= pos[:, 2] * spin / dist
            vel[:, 2] += pos[:, 0] * spin / dist

        elif self.mode in ("thunder", "lightning"):
            excitation = (audio.level if audio is not None else 0.0) * 5.0
            jitter = (0.2 + high_tension * 3.0 + excitation) * min(1.0, dt * 60.0)
            vel += (engine.rng.random(vel.shape, dtype=np.float32) - 0.5) * jitter


class SnakeMode(ModeState):
    """
    Head chases the first active point (idle Lissajous path otherwise); the
    trail records the head every few frames and grows with the score. The last
    block of particles is the food.
    """

    def __init__(self, mode, count, params=None, seed=None):
        super().__init__(mode, count, params, seed)
        p = self.params
        self.trail_interval = float(_pget(p, "snake_trail_interval", 0.05))
        self.trail_base = int(_pget(p, "snake_trail_base", 12))
        self.trail_growth = int(_pget(p, "snake_trail_growth", 4))
        self.eat_radius = float(_pget(p, "snake_eat_radius", 0.9))
        self.follow = float(_pget(p, "snake_follow", 6.0))

        self.food_n = max(1, min(int(_pget(p, "snake_food_count", 200)), self.count // 10))
        self.body_n = self.count - self.food_n

        self.head = np.zeros(3, dtype=np.float32)
        self.dir = np.array([1.0, 0.0, 0.0], dtype=np.float32)
        self.trail = deque()
        self.score = 0
        self.food = np.zeros(3, dtype=np.float32)
        self._timer = 0.0

        self._body_offsets = None
        self._food_offsets = None
        self._stiff = None

    def reset(self):
        self.head = np.zeros(3, dtype=np.float32)
        self.dir = np.array([1.0, 0.0, 0.0], dtype=np.float32)
        self.trail = deque()
        self.score = 0
        self._timer = 0.0
        self.food = self._random_food()

        self._body_offsets = shapes.random_in_sphere(self.rng, self.body_n, 0.25).astype(np.float32)
        self._food_offsets = shapes.random_in_sphere(self.rng, self.food_n, 0.35).astype(np.float32)

        # head is tight, the tail drags
        frac = np.arange(self.body_n, dtype=np.float32) / max(1, self.body_n)
        self._stiff = np.empty(self.count, dtype=np.float32)
        self._stiff[:self.body_n] = 2.0 + 10.0 * (1.0 - frac) ** 4
        self._stiff[self.body_n:] = 4.0

    def _random_food(self) -> np.ndarray:
        x = (self.rng.random() * 2.0 - 1.0) * self.half_w * 0.8
        y = (self.rng.random() * 2.0 - 1.0) * self.half_h * 0.8
        return np.array([x, y, 0.0], dtype=np.float32)

    def max_trail(self) -> int:
        return self.trail_base + self.score * self.trail_growth

    def on_frame(self, points, dt, elapsed):
        cue = None
        lead = _first_active(points)
        if lead is not None:
            goal = self.to_world(lead)
        else:
            goal = np.array([
                math.sin(elapsed * 0.6) * self.half_w * 0.7,
                math.sin(elapsed * 1.3) * self.half_h * 0.6,
                0.0,
            ], dtype=np.float32)

        a = 1.0 - math.exp(-self.follow * max(0.0, dt))
        step = (goal - self.head) * a
        n = float(np.linalg.norm(step))
        if n > 1e-6:
            self.dir = step / n
        self.head = self.head + step

        self._timer += dt
        if self._timer >= self.trail_interval:
            self._timer -= self.trail_interval
            self.trail.appendleft(self.head.copy())
        while len(self.trail) > self.max_trail():
            self.trail.pop()

        if float(np.linalg.norm(self.head[:2] - self.food[:2])) < self.eat_radius:
            self.score += 1
            self.food = self._random_food()
            cue = "eat"

        self._write_targets()
        return HudSignal("score", self.score, "SCORE", cue)

    def _write_targets(self):
        if self.trail:
            path = np.asarray(self.trail, dtype=np.float32)
        else:
            path = self.head[None, :]
        seg = (np.arange(self.body_n) * len(path)) // max(1, self.body_n)
        self.targets[:self.body_n] = path[seg] + self._body_offsets
        self.targets[self.body_n:] = self.food + self._food_offsets

    def stiffness(self):
        return self._stiff

    def write_colors(self, colors, base_rgb):
        head_n = max(1, self.body_n // 30)
        colors[:head_n] = WHITE
        colors[self.body_n:] = GOLD


class TicTacToeMode(ModeState):
    """
    Player is X, the AI is O. Hover selects a cell, a fist places a mark.
    Particles: board lines, then 9 equal groups that draw X / O or park on the lines.
    """

    interaction = "attract"

    def __init__(self, mode, count, params=None, seed=None):
        super().__init__(mode, count, params, seed)
        p = self.params
        self.place_tension = float(_pget(p, "ttt_place_tension", 0.9))
        self.debounce = float(_pget(p, "ttt_debounce", 1.0))
        self.ai_delay = float(_pget(p, "ttt_ai_delay", 0.8))

        self.group_n = max(1, self.count // 18)
        self.line_n = self.count - 9 * self.group_n

        self.board = [None] * 9
        self.turn = TURN_PLAYER
        self.selection = None
        self.last_move_time = None
        self.winner = None
        self.win_line = None
        self._ai_wait = 0.0
        self._x_shape = None
        self._o_shape = None

    def formation_mode(self):
        return "tic_tac_toe"

    def reset(self):
        self.board = [None] * 9
        self.turn = TURN_PLAYER
        self.selection = None
        self.last_move_time = None
        self.winner = None
        self.win_line = None
        self._ai_wait = 0.0

        m = self.group_n
        t = np.linspace(-1.0, 1.0, m, dtype=np.float32) * 1.1
        sign = np.where(np.arange(m) % 2 == 0, 1.0, -1.0).astype(np.float32)
        z = ((self.rng.random(m) - 0.5) * 0.3).astype(np.float32)
        self._x_shape = np.stack([t, t * sign, z], axis=1)
        ang = np.linspace(0.0, 2.0 * math.pi, m, endpoint=False, dtype=np.float32)
        self._o_shape = np.stack([np.cos(ang) * 1.1, np.sin(ang) * 1.1, z], axis=1)

    # ---------- rules ----------

    @staticmethod
    def cell_at(x: float, y: float) -> int:
        col = 0 if x < -1.0 / 3.0 else (1 if x < 1.0 / 3.0 else 2)
        row = 0 if y > 1.0 / 3.0 else (1 if y > -1.0 / 3.0 else 2)
        return row * 3 + col

    def _check_winner(self):
        for line in WIN_LINES:
            a, b, c = (self.board[i] for i in line)
            if a is not None and a == b == c:
                self.winner = a
                self.win_line = line
                self.turn = TURN_WIN if a == "X" else TURN_LOSE
                return
        if all(c is not None for c in self.board):
            self.winner = "draw"
            self.turn = TURN_DRAW

    def place(self, cell: int, mark: str) -> bool:
        """Put a mark if the game is live and the cell is free."""
        if self.winner is not None or not (0 <= cell < 9) or self.board[cell] is not None:
            return False
        self.board[cell] = mark
        self._check_winner()
        return True

    @property
    def terminal(self) -> bool:
        return self.winner is not None

    def on_frame(self, points, dt, elapsed):
        cue = None
        lead = _first_active(points)
        if lead is not None:
            self.selection = self.cell_at(lead.x, lead.y)

        if self.winner is None:
            if self.turn == TURN_PLAYER:
                ready = self.last_move_time is None or (elapsed - self.last_move_time) >= self.debounce
                if (lead is not None and lead.tension > self.place_tension and ready
                        and self.place(self.selection, "X")):
                    self.last_move_time = elapsed
                    cue = "place"
                    if self.winner is None:
                        self.turn = TURN_AI
                        self._ai_wait = 0.0
            elif self.turn == TURN_AI:
                self._ai_wait += dt
                if self._ai_wait >= self.ai_delay:
                    empty = [i for i, c in enumerate(self.board) if c is None]
                    if empty:
                        self.place(int(self.rng.choice(empty)), "O")
                        self.last_move_time = elapsed
                        cue = "place"
                    if self.winner is None:
                        self.turn = TURN_PLAYER

            if self.winner is not None:
                cue = "win" if self.winner == "X" else cue

        self._write_targets()
        return HudSignal("turn", self.turn, "TIC TAC TOE", cue)

    def _group(self, cell):
        s = self.line_n + cell * self.group_n
        return slice(s, s + self.group_n)

    def _write_targets(self):
        for cell, mark in enumerate(self.board):
            g = self._group(cell)
            if mark is None:
                self.targets[g] = self.formation[g]
            else:
                cx, cy = shapes.board_cell_center(cell)
                shape = self._x_shape if mark == "X" else self._o_shape
                self.targets[g] = shape + np.array([cx, cy, 0.0], dtype=np.float32)

    def interaction_anchors(self):
        if self.selection is None:
            return np.zeros((0, 3), dtype=np.float32)
        cx, cy = shapes.board_cell_center(self.selection)
        return np.array([[cx, cy, 0.0]], dtype=np.float32)

    def write_colors(self, colors, base_rgb):
        colors[:self.line_n] *= 0.6
        for cell, mark in enumerate(self.board):
            if mark is None:
                continue
            g = self._group(cell)
            if self.win_line is not None and cell in self.win_line:
                colors[g] = GOLD
            else:
                colors[g] = PALETTE[4] if mark == "X" else PALETTE[1]


class MemoryMode(ModeState):
    """
    Simon-style loop on the 4x3 card grid: watch the highlighted sequence,
    then hover each card in order. A finished sequence grows by one card.
    """

    ZONES = shapes.MEMORY_COLS * shapes.MEMORY_ROWS

    def __init__(self, mode, count, params=None, seed=None):
        super().__init__(mode, count, params, seed)
        p = self.params
        self.show_time = float(_pget(p, "memory_show_time", 0.8))
        self.hold_time = float(_pget(p, "memory_hold_time", 0.5))
        self.input_timeout = float(_pget(p, "memory_input_timeout", 6.0))

        self.card_of = np.arange(self.count) % self.ZONES
        self.sequence = []
        self.phase = "show"
        self.step = 0
        self.timer = 0.0
        self.active_zone = None
        self.hovered = None
        self._hold = 0.0
        self._wrong = 0.0
        self._release = None

    def formation_mode(self):
        return "memory"

    def reset(self):
        self.sequence = [int(self.rng.integers(self.ZONES))]
        self._restart_show()

    @property
    def level(self) -> int:
        return len(self.sequence) - 1

    def _restart_show(self, pause=0.0):
        self.phase = "show"
        self.step = 0
        self.timer = -pause
        self.active_zone = None
        self._hold = 0.0
        self._wrong = 0.0
        self._release = None

    def zone_at(self, p):
        if p is None:
            return None
        w = self.to_world(p)
        for card in range(self.ZONES):
            cx, cy = shapes.memory_card_center(card)
            if abs(w[0] - cx) < shapes.MEMORY_HALF_W + 0.3 and abs(w[1] - cy) < shapes.MEMORY_HALF_H + 0.3:
                return card
        return None

    def on_frame(self, points, dt, elapsed):
        cue = None
        self.hovered = self.zone_at(_first_active(points))
        self.timer += dt

        if self.phase == "show":
            idx = int(self.timer // self.show_time) if self.timer >= 0.0 else -1
            if idx < 0:
                self.active_zone = None
            elif idx < len(self.sequence):
                self.active_zone = self.sequence[idx]
            else:
                self.phase = "input"
                self.timer = 0.0
                self.active_zone = None
        else:
            self.active_zone = self.hovered
            expected = self.sequence[self.step]

            if self.hovered != self._release:
                self._release = None

            if self.hovered is not None and self.hovered == expected and self._release is None:
                self._hold += dt
                self._wrong = 0.0
                if self._hold >= self.hold_time:
                    self.step += 1
                    self._hold = 0.0
                    self.timer = 0.0
                    self._release = self.hovered
                    cue = "place"
                    if self.step >= len(self.sequence):
                        self.sequence.append(int(self.rng.integers(self.ZONES)))
                        self._restart_show(pause=0.5)
                        cue = "level"
            elif self.hovered is not None and self._release is None:
                self._hold = 0.0
                self._wrong += dt
                if self._wrong >= self.hold_time:
                    self._restart_show(pause=0.5)
            else:
                self._hold = 0.0
                self._wrong = 0.0

            if self.phase == "input" and self.timer > self.input_timeout:
                self._restart_show()

        self._write_targets(elapsed)
        return HudSignal("level", self.level, "BRAIN SEQUENCE", cue)

    def _write_targets(self, elapsed):
        self.targets[:] = self.formation
        if self.hovered is None:
            return
        # hovered card spins around its vertical axis
        mask = self.card_of == self.hovered
        cx, _ = shapes.memory_card_center(self.hovered)
        angle = elapsed * 5.0
        lx = self.formation[mask, 0] - cx
        self.targets[mask, 0] = cx + lx * math.cos(angle)
        self.targets[mask, 2] = lx * math.sin(angle)

    def write_colors(self, colors, base_rgb):
        colors[:] = PALETTE[self.card_of] * 0.25
        if self.active_zone is not None:
            mask = self.card_of == self.active_zone
            colors[mask] = PALETTE[self.active_zone]


class BalloonPopMode(ModeState):
    """
    Level L shows min(L, balloon_max) balloons. Pinch inside a balloon to pop
    it; once every balloon of the level is popped the next level starts after
    a short delay.
    """

    interaction = "off"

    def __init__(self, mode, count, params=None, seed=None):
        super().__init__(mode, count, params, seed)
        p = self.params
        self.pinch_tension = float(_pget(p, "balloon_pinch_tension", 0.8))
        self.radius = float(_pget(p, "balloon_radius", 1.6))
        self.max_balloons = int(_pget(p, "balloon_max", 5))
        self.level_delay = float(_pget(p, "balloon_level_delay", 1.5))

        self.level = 1
        self.popped = np.zeros(1, dtype=bool)
        self.centers = np.zeros((1, 3), dtype=np.float32)
        self.group = np.zeros(self.count, dtype=np.int64)
        self.timer = 0.0
        self._unit = None
        self._stiff = np.zeros(self.count, dtype=np.float32)
        self._burst = []

    def formation_mode(self):
        return "balloon_pop"

    def reset(self):
        self.level = 1
        self.timer = 0.0
        self._unit = shapes.random_on_sphere(self.rng, self.count, 1.0).astype(np.float32)
        self._layout()

    @property
    def balloon_count(self) -> int:
        return max(1, min(self.level, self.max_balloons))

    def _layout(self):
        n = self.balloon_count
        spacing = min(3.8, (2.0 * self.half_w - 2.0 * self.radius) / max(1, n - 1)) if n > 1 else 0.0
        b = np.arange(n, dtype=np.float32)
        self.centers = np.zeros((n, 3), dtype=np.float32)
        self.centers[:, 0] = (b - (n - 1) / 2.0) * spacing
        self.centers[:, 1] = np.where(b % 2 == 0, 0.6, -0.6) if n > 1 else 0.0
        self.popped = np.zeros(n, dtype=bool)
        self.group = np.arange(self.count) % n
        self._burst = []
        self.targets[:] = self.centers[self.group] + self._unit * self.radius

    @property
    def all_popped(self) -> bool:
        return bool(np.all(self.popped))

    def on_frame(self, points, dt, elapsed):
        cue = None
        if self.all_popped:
            self.timer += dt
            if self.timer >= self.level_delay:
                self.level += 1
                self.timer = 0.0
                self._layout()
                cue = "level"
        else:
            for p in points or ():
                if not p.active or p.tension <= self.pinch_tension:
                    continue
                w = self.to_world(p)
                d = np.linalg.norm(self.centers[:, :2] - w[:2], axis=1)
                hit = (d < self.radius) & ~self.popped
                if np.any(hit):
                    self.popped |= hit
                    self._burst.extend(int(i) for i in np.nonzero(hit)[0])
                    cue = "pop"

        return HudSignal("level", self.level, "BALLOON POP", cue)

    def stiffness(self):
        self._stiff[:] = np.where(self.popped[self.group], 0.0, 3.0)
        return self._stiff

    def apply_forces(self, engine, points, audio, dt, elapsed):
        flying = self.popped[self.group]
        if not np.any(flying):
            return
        vel = engine.vel
        if self._burst:
            for b in self._burst:
                m = self.group == b
                out = engine.pos[m] - self.centers[b]
                out /= (np.linalg.norm(out, axis=1, keepdims=True) + 1e-6)
                vel[m] += out * 6.0
            self._burst = []

        k = int(flying.sum())
        vel[flying, 1] -= 9.8 * dt
        vel[flying, 0] += (engine.rng.random(k, dtype=np.float32) - 0.5) * 20.0 * dt
        vel[flying, 2] += (engine.rng.random(k, dtype=np.float32) - 0.5) * 20.0 * dt

    def write_colors(self, colors, base_rgb):
        colors[:] = PALETTE[self.group % len(PALETTE)]
        colors[self.popped[self.group]] *= 0.5


class FogRevealMode(ModeState):
    """
    A letter hidden in fog. Hidden particles wander; sweeping a hand over the
    letter reveals the particles underneath. The session advances to the next
    letter once enough of it is revealed.
    """

    interaction = "off"

    def __init__(self, mode, count, params=None, seed=None):
        super().__init__(mode, count, params, seed)
        p = self.params
        self.radius = float(_pget(p, "fog_radius", 1.5))
        self.stride = max(1, int(_pget(p, "fog_stride", 4)))

        self.index = 0
        self.revealed = np.zeros(self.count, dtype=bool)
        self._phase = np.arange(self.count, dtype=np.float32)
        self._offset = 0
        self._wander = np.zeros((self.count, 3), dtype=np.float32)
        self._stiff = np.zeros(self.count, dtype=np.float32)

    @property
    def letter(self) -> str:
        return ALPHABET[self.index % len(ALPHABET)]

    def formation_mode(self):
        return f"text:{self.letter}"

    def reset(self):
        self.index = 0
        self.revealed[:] = False
        self._offset = 0

    @property
    def reveal_ratio(self) -> float:
        return float(self.revealed.mean()) if self.count else 0.0

    def advance(self) -> str:
        self.index = (self.index + 1) % len(ALPHABET)
        self.formation = shapes.generate_targets(self.formation_mode(), self.count, self.seed)
        self.revealed[:] = False
        self._offset = 0
        log.debug("Fog reveal advanced to %s", self.letter)
        return self.letter

    def on_frame(self, points, dt, elapsed):
        # only a rotating stride of particles is tested each frame
        sl = slice(self._offset, None, self.stride)
        self._offset = (self._offset + 1) % self.stride
        r2 = self.radius * self.radius
        for p in points or ():
            if not p.active:
                continue
            w = self.to_world(p)
            f = self.formation[sl]
            d2 = (f[:, 0] - w[0]) ** 2 + (f[:, 1] - w[1]) ** 2
            self.revealed[sl] |= d2 < r2

        self._write_targets(elapsed)
        return HudSignal("reveal", self.index, self.letter)

    def _write_targets(self, t):
        ph = self._phase
        np.sin(t + ph, out=self._wander[:, 0])
        np.cos(t * 0.5 + ph, out=self._wander[:, 1])
        np.sin(t * 0.3 + ph, out=self._wander[:, 2])
        self._wander *= np.array([10.0, 10.0, 5.0], dtype=np.float32)
        self.targets[:] = np.where(self.revealed[:, None], self.formation, self._wander)

    def stiffness(self):
        self._stiff[:] = np.where(self.revealed, 4.0, 0.5)
        return self._stiff

    def write_colors(self, colors, base_rgb):
        colors[~self.revealed] = FOG


_MODES = {
    "snake": SnakeMode,
    "tic_tac_toe": TicTacToeMode,
    "memory": MemoryMode,
    "balloon_pop": BalloonPopMode,
    "counting": BalloonPopMode,
    "magic_reveal": FogRevealMode,
    "fog_reveal": FogRevealMode,
    "spelling": FogRevealMode,
}

GAME_MODES = tuple(_MODES)


def create_mode_state(mode: str, count: int, params=None, seed=None) -> ModeState:
    cls = _MODES.get(mode, ShapeMode)
    return cls(mode, count, params, seed)
