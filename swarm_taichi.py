# swarm_taichi.py
# Same swarm, base forces + integration in Taichi kernels.
# Mode forces and colours stay in numpy (once per frame, vectorized).
# pyright: reportInvalidTypeForm=false

import numpy as np
import taichi as ti

from audio import SILENT
from predictor import _clamp01
from swarm import SwarmEngine

MAX_POINTS = 4

_TAICHI_READY = False


def ensure_ti():
    global _TAICHI_READY
    if _TAICHI_READY:
        return
    try:
        ti.init(arch=ti.cuda, device_memory_fraction=0.5)
        print("✅ Taichi CUDA (swarm)")
    except Exception:
        ti.init(arch=ti.cpu)
        print("⚠️ Taichi CPU fallback (swarm)")
    _TAICHI_READY = True


@ti.data_oriented
class SwarmEngineTaichi(SwarmEngine):
    """
    Drop-in for SwarmEngine. numpy arrays (pos/vel/col/targets) remain the
    source of truth between frames; fields are scratch copies for the kernels.
    """

    def __init__(self, params=None, seed=None):
        super().__init__(params, seed)
        ensure_ti()

        n = self.n
        self.f_pos = ti.Vector.field(3, dtype=ti.f32, shape=n)
        self.f_vel = ti.Vector.field(3, dtype=ti.f32, shape=n)
        self.f_tgt = ti.Vector.field(3, dtype=ti.f32, shape=n)
        self.f_stiff = ti.field(dtype=ti.f32, shape=n)
        self.f_noise = ti.Vector.field(3, dtype=ti.f32, shape=n)

        # control points: xyz, strength, kind (0 attract, 1 push + swirl)
        self.f_pt = ti.Vector.field(3, dtype=ti.f32, shape=MAX_POINTS)
        self.f_pt_strength = ti.field(dtype=ti.f32, shape=MAX_POINTS)
        self.f_pt_kind = ti.field(dtype=ti.i32, shape=MAX_POINTS)

        self._stiff_buf = np.zeros(n, dtype=np.float32)

    # ========================= kernels =========================

    @ti.kernel
    def _forces_kernel(
        self,
        dt: ti.f32,
        t: ti.f32,
        flow: ti.f32,
        n_pts: ti.i32,
        radius: ti.f32,
        curl: ti.f32,
        centering: ti.f32,
        kick: ti.f32,
    ):
        for i in self.f_pos:
            p = self.f_pos[i]
            v = self.f_vel[i]

            # spring
            v += (self.f_tgt[i] - p) * self.f_stiff[i] * dt

            # flow field
            v[0] += ti.sin(p[1] * 0.5 + t) * ti.cos(p[2] * 0.3 + t * 0.7) * flow * dt
            v[1] += ti.cos(p[0] * 0.5 - t * 0.8) * ti.sin(p[2] * 0.4 + t * 0.5) * flow * dt
            v[2] += ti.sin(p[0] * 0.3 + p[1] * 0.3 + t * 0.6) * flow * dt

            # control points
            for k in range(n_pts):
                d = p - self.f_pt[k]
                dist = d.norm() + 1e-6
                if dist < radius:
                    w = (1.0 - dist / radius) ** 2 * dt
                    dirn = d / dist
                    if self.f_pt_kind[k] == 0:
                        v -= dirn * self.f_pt_strength[k] * w
                    else:
                        v += dirn * self.f_pt_strength[k] * w
                        v[0] += -dirn[1] * curl * w
                        v[1] += dirn[0] * curl * w

            if n_pts == 0:
                v -= p * centering * dt

            v += (self.f_noise[i] - 0.5) * kick
            self.f_vel[i] = v

    @ti.kernel
    def _integrate_kernel(self, dt: ti.f32, damp: ti.f32, max_speed: ti.f32):
        for i in self.f_pos:
            v = self.f_vel[i] * damp
            s = v.norm()
            if s > max_speed:
                v *= max_speed / s
            self.f_vel[i] = v
            self.f_pos[i] += v * dt

    # ========================= step =========================

    def _load_points(self, active, interaction, mode_state):
        pts = []
        if active:
            if interaction == "field":
                for cp in active[:MAX_POINTS]:
                    closed = _clamp01(float(cp.tension)) > self.attract_tension
                    strength = self.attract_strength if closed else self.repel_strength
                    pts.append((self.point_world(cp), strength, 0 if closed else 1))
            elif interaction == "attract":
                for anchor in mode_state.interaction_anchors()[:MAX_POINTS]:
                    pts.append((anchor, self.select_strength, 0))
        for k, (xyz, strength, kind) in enumerate(pts):
            self.f_pt[k] = ti.Vector([float(xyz[0]), float(xyz[1]), float(xyz[2])])
            self.f_pt_strength[k] = float(strength)
            self.f_pt_kind[k] = int(kind)
        return len(pts), bool(active)

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

        self._stiff_buf[:] = stiffness
        n_pts, any_active = self._load_points(active, interaction, mode_state)

        self.size_multiplier = 1.0 + float(audio.level) * 2.5
        kick = float(audio.bass) * self.audio_jitter
        if kick > 0.0:
            self.f_noise.from_numpy(self.rng.random((self.n, 3), dtype=np.float32))
        else:
            self.f_noise.fill(0.5)

        self.f_pos.from_numpy(self.pos)
        self.f_vel.from_numpy(self.vel)
        self.f_tgt.from_numpy(self.targets)
        self.f_stiff.from_numpy(self._stiff_buf)

        # "attract" with no anchors still counts as interacting (no centering)
        centering = 0.0 if any_active else self.centering
        self._forces_kernel(dt, self.time, self.flow_amplitude, n_pts, self.radius,
                            self.curl_strength, centering, kick)

        if mode_state is not None:
            self.vel[:] = self.f_vel.to_numpy()
            mode_state.apply_forces(self, active, audio, dt, self.time)
            self.f_vel.from_numpy(self.vel)

        self._integrate_kernel(dt, float(damping ** (dt * 60.0)), self.max_speed)

        self.pos[:] = self.f_pos.to_numpy()
        self.vel[:] = self.f_vel.to_numpy()
        self._colors(mode_state)
