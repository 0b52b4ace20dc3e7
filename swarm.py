"""
Swarm of N particles steered toward a target formation.

State (float32, fixed N for the whole session):
- pos, vel, col: Nx3
- targets: Nx3, rewritten by the active mode

Per frame forces, accumulated into vel then integrated (forward Euler):
- spring toward target
- ambient flow field (sin/cos of position and time)
- control points: attract on a closed grip, push + swirl on an open hand
- idle centering when nobody is interacting
- bass kick jitter
- whatever the active mode adds
"""

from __future__ import annotations

import logging

import numpy as np

import shapes
from audio import SILENT
from params import _pget, hex_to_rgb
from predictor import _clamp01, _clamp11

log = logging.getLogger(__name__)


class SwarmEngine:
    def __init__(self, params=None, seed=None):
        p = params if params is not None else {}
        self.params = p

        self.n = int(_pget(p, "num_particles", 10000))
        if seed is None:
            seed = _pget(p, "seed", None)
        self.rng = np.random.default_rng(seed)

        self.dt_max = float(_pget(p, "dt_max", 0.1))
        self.stiffness = float(_pget(p, "stiffness", 2.5))
        self.damping = float(_pget(p, "damping", 0.92))
        self.max_speed = float(_pget(p, "max_speed", 18.0))
        self.flow_amplitude = float(_pget(p, "flow_amplitude", 0.35))
        self.centering = float(_pget(p, "centering", 0.05))
        self.audio_jitter = float(_pget(p, "audio_jitter", 6.0))
        self.depth_fade = float(_pget(p, "depth_fade", 0.06))

        self.half_w = float(_pget(p, "view_half_width", 8.0))
        self.half_h = float(_pget(p, "view_half_height", 6.0))
        self.view_depth = float(_pget(p, "view_depth", 4.0))
        self.radius = float(_pget(p, "interaction_radius", 7.75))
        self.attract_strength = float(_pget(p, "attract_strength", 60.0))
        self.repel_strength = float(_pget(p, "repel_strength", 20.0))
        self.curl_strength = float(_pget(p, "curl_strength", 12.0))
        self.attract_tension = float(_pget(p, "attract_tension", 0.5))
        self.select_strength = float(_pget(p, "select_strength", 40.0))

        self.base_rgb = np.array(hex_to_rgb(_pget(p, "base_color", "#06b6d4")), dtype=np.float32)
        self.particle_size = float(_pget(p, "particle_size", 0.12))
        self.size_multiplier = 1.0
        self.time = 0.0

        n = self.n
        # spawn as the idle sphere
        self.pos = shapes.generate_targets("sphere", n, seed)
        self.vel = np.zeros((n, 3), dtype=np.float32)
        self.col = np.empty((n, 3), dtype=np.float32)
        self.col[:] = self.base_rgb
        self.targets = self.pos.copy()

        # scratch, reused every frame
        self._d = np.zeros((n, 3), dtype=np.float32)
        self._dist = np.zeros(n, dtype=np.float32)
        self._w = np.zeros(n, dtype=np.float32)
        self._speed = np.zeros(n, dtype=np.float32)
        self._fade = np.zeros(n, dtype=np.float32)

    # ---------- inputs ----------

    def set_targets(self, targets) -> None:
        """Swap in a new formation. Positions stay put; velocities are halved so the morph is soft."""
        t = np.asarray(targets, dtype=np.float32)
        if t.shape != self.targets.shape:
            raise ValueError(f"targets must be {self.targets.shape}, got {t.shape}")
        self.targets[:] = t
        self.morph()

    def morph(self) -> None:
        self.vel *= 0.5

    def set_color(self, color) -> None:
        self.base_rgb[:] = hex_to_rgb(color)

    def point_world(self, cp) -> np.ndarray:
        """Control point ([-1,1] screen space) -> world coords. Out-of-range values are clamped."""
        return np.array([
            _clamp11(float(cp.x)) * self.half_w,
            _clamp11(float(cp.y)) * self.half_h,
            _clamp11(float(cp.z)) * self.view_depth,
        ], dtype=np.float32)

    # ---------- main loop ----------

    def step(self, dt, points=None, audio=None, mode_state=None) -> None:
        dt = float(dt)
        if not np.isfinite(dt) or dt <= 0.0:
            return
        dt = min(dt, self.dt_max)
        self.time += dt

        active = [cp for cp in (points or ()) if cp.active]
        audio = audio if audio is not None else SILENT

        stiffness = mode_state.stiffness() if mode_state is not None else self.stiffness
        damping = mode_state.damping if mode_state is not None else self.damping
        interaction = mode_state.interaction if mode_state is not None else "field"

        self._spring(stiffness, dt)
        self._flow(dt)

        if active:
            if interaction == "field":
                for cp in active:
                    self._field(self.point_world(cp), _clamp01(float(cp.tension)), dt)
            elif interaction == "attract":
                for anchor in mode_state.interaction_anchors():
                    self._pull(anchor, self.select_strength, dt)
        elif self.centering > 0.0:
            self.vel -= self.pos * (self.centering * dt)

        self._audio(audio)

        if mode_state is not None:
            mode_state.apply_forces(self, active, audio, dt, self.time)

        self.vel *= damping ** (dt * 60.0)
        self._clamp_speed()

        self.pos += self.vel * dt

        self._colors(mode_state)

    # ---------- forces ----------

    def _spring(self, stiffness, dt):
        np.subtract(self.targets, self.pos, out=self._d)
        if np.ndim(stiffness) == 0:
            self._d *= float(stiffness) * dt
        else:
            self._d *= (np.asarray(stiffness, dtype=np.float32) * dt)[:, None]
        self.vel += self._d

    def _flow(self, dt):
        if self.flow_amplitude <= 0.0:
            return
        t = self.time
        x, y, z = self.pos[:, 0], self.pos[:, 1], self.pos[:, 2]
        a = self.flow_amplitude * dt
        self.vel[:, 0] += np.sin(y * 0.5 + t) * np.cos(z * 0.3 + t * 0.7) * a
        self.vel[:, 1] += np.cos(x * 0.5 - t * 0.8) * np.sin(z * 0.4 + t * 0.5) * a
        self.vel[:, 2] += np.sin(x * 0.3 + y * 0.3 + t * 0.6) * a

    def _falloff(self, center):
        """Fill _d (pos - center), _dist and _w = (1 - d/R)^2 inside R, 0 outside."""
        np.subtract(self.pos, center, out=self._d)
        np.sqrt(np.einsum("ij,ij->i", self._d, self._d), out=self._dist)
        np.subtract(1.0, self._dist / self.radius, out=self._w)
        np.clip(self._w, 0.0, 1.0, out=self._w)
        self._w *= self._w
        return self._w > 0.0

    def _field(self, center, tension, dt):
        inside = self._falloff(center)
        if not np.any(inside):
            return

        dist = self._dist[inside][:, None] + 1e-6
        dirn = self._d[inside] / dist
        w = self._w[inside][:, None] * dt

        if tension > self.attract_tension:
            self.vel[inside] -= dirn * (self.attract_strength * w)
        else:
            # push outward and swirl around the view axis
            swirl = np.zeros_like(dirn)
            swirl[:, 0] = -dirn[:, 1]
            swirl[:, 1] = dirn[:, 0]
            self.vel[inside] += dirn * (self.repel_strength * w) + swirl * (self.curl_strength * w)

    def _pull(self, anchor, strength, dt):
        inside = self._falloff(np.asarray(anchor, dtype=np.float32))
        if not np.any(inside):
            return
        dirn = self._d[inside] / (self._dist[inside][:, None] + 1e-6)
        self.vel[inside] -= dirn * (strength * self._w[inside][:, None] * dt)

    def _audio(self, audio):
        self.size_multiplier = 1.0 + float(audio.level) * 2.5
        if audio.bass <= 0.0 or self.audio_jitter <= 0.0:
            return
        kick = float(audio.bass) * self.audio_jitter
        self.vel += (self.rng.random((self.n, 3), dtype=np.float32) - 0.5) * kick

    def _clamp_speed(self):
        np.sqrt(np.einsum("ij,ij->i", self.vel, self.vel), out=self._speed)
        too_fast = self._speed > self.max_speed
        if np.any(too_fast):
            self.vel[too_fast] *= (self.max_speed / self._speed[too_fast])[:, None]

    def _colors(self, mode_state):
        self.col[:] = self.base_rgb
        if mode_state is not None:
            mode_state.write_colors(self.col, self.base_rgb)
        np.multiply(self.pos[:, 2], self.depth_fade, out=self._fade)
        self._fade += 1.0
        np.clip(self._fade, 0.35, 1.0, out=self._fade)
        self.col *= self._fade[:, None]

    # ---------- outputs ----------

    def positions_flat(self) -> np.ndarray:
        return self.pos.reshape(-1)

    def colors_flat(self) -> np.ndarray:
        return self.col.reshape(-1)

    def point_size(self) -> float:
        return self.particle_size * self.size_multiplier
