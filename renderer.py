from __future__ import annotations
import math
import numpy as np
import cv2

from modes import TURN_AI, TURN_DRAW, TURN_LOSE, TURN_PLAYER, TURN_WIN

TURN_TEXT = {
    TURN_PLAYER: "YOUR TURN",
    TURN_AI: "AI THINKING",
    TURN_WIN: "YOU WIN",
    TURN_LOSE: "AI WINS",
    TURN_DRAW: "DRAW",
}


class SwarmRenderer:
    """Pinhole projection of the swarm + additive glow, with a small HUD on top."""

    def __init__(self, width: int = 960, height: int = 720, fov_deg: float = 45.0, cam_z: float = 15.0):
        self.width = int(width)
        self.height = int(height)
        self.fov_deg = float(fov_deg)
        self.cam_z = float(cam_z)
        self.glow = True

        self.font = cv2.FONT_HERSHEY_SIMPLEX
        self.col_text = (255, 245, 220)
        self.col_shadow = (0, 0, 0)
        self.col_warn = (60, 170, 255)
        self.panel_col = (30, 24, 18)
        self.panel_edge = (200, 170, 90)
        self.panel_alpha = 0.55

        self._acc = np.zeros((self.height * self.width, 3), dtype=np.float32)

    @property
    def focal(self) -> float:
        return (self.height * 0.5) / math.tan(math.radians(self.fov_deg) * 0.5)

    def project(self, pos):
        """World Nx3 -> pixel xs, ys, camera depth, visible mask."""
        depth = self.cam_z - pos[:, 2]
        visible = depth > 0.1
        inv = self.focal / np.maximum(depth, 0.1)
        xs = self.width * 0.5 + pos[:, 0] * inv
        ys = self.height * 0.5 - pos[:, 1] * inv
        visible &= (xs >= 0) & (xs < self.width) & (ys >= 0) & (ys < self.height)
        return xs, ys, depth, visible

    def render(self, engine, background=None):
        xs, ys, depth, vis = self.project(engine.pos)

        self._acc.fill(0.0)
        idx = ys[vis].astype(np.int64) * self.width + xs[vis].astype(np.int64)
        np.add.at(self._acc, idx, engine.col[vis][:, ::-1])  # rgb -> bgr

        img = self._acc.reshape(self.height, self.width, 3)

        # point size in pixels at the scene centre
        size_px = engine.point_size() * self.focal / self.cam_z
        if size_px > 1.0:
            k = int(size_px) | 1
            img = cv2.dilate(img, cv2.getStructuringElement(cv2.MORPH_ELLIPSE, (k, k)))
        if self.glow:
            img = img + cv2.GaussianBlur(img, (0, 0), max(1.0, size_px * 1.5)) * 0.6

        out = np.clip(img * 255.0, 0, 255).astype(np.uint8)

        if background is not None:
            bg = cv2.resize(background, (self.width, self.height))
            out = cv2.add((bg * 0.35).astype(np.uint8), out)
        return out

    # ---------- HUD ----------

    def draw_hud(self, frame, hud, mode, status=None, fps=None, points=()):
        self._panel(frame, 8, 8, 300, 74)
        self._text(frame, str(mode).upper().replace("_", " "), (18, 34), 0.7)
        self._text(frame, self._hud_line(hud), (18, 64), 0.6)

        for p in points:
            if not p.active:
                continue
            u = int((p.x * 0.5 + 0.5) * self.width)
            v = int((0.5 - p.y * 0.5) * self.height)
            r = int(10 + 18 * (1.0 - p.tension))
            cv2.circle(frame, (u, v), r, self.panel_edge, 1, cv2.LINE_AA)

        y = self.height - 14
        if fps is not None:
            self._text(frame, f"FPS: {fps:5.1f}", (12, y), 0.6)
        for name, state in (status or {}).items():
            if state == "error":
                y -= 26
                self._text(frame, f"{name} unavailable", (12, y), 0.55, self.col_warn)
        return frame

    def _hud_line(self, hud) -> str:
        if hud.kind == "score":
            return f"{hud.label or 'SCORE'}: {hud.value}"
        if hud.kind == "turn":
            return TURN_TEXT.get(hud.value, "")
        if hud.kind == "level":
            return f"{hud.label}  LEVEL {hud.value}".strip()
        if hud.kind == "reveal":
            return f"FIND THE LETTER ({hud.value + 1}/26)"
        return hud.label

    def _panel(self, frame, x, y, w, h):
        x0 = max(0, int(x))
        y0 = max(0, int(y))
        x1 = min(frame.shape[1], int(x + w))
        y1 = min(frame.shape[0], int(y + h))
        if x1 <= x0 or y1 <= y0:
            return
        overlay = frame.copy()
        cv2.rectangle(overlay, (x0, y0), (x1, y1), self.panel_col, -1)
        cv2.addWeighted(overlay, self.panel_alpha, frame, 1.0 - self.panel_alpha, 0, frame)
        cv2.rectangle(frame, (x0, y0), (x1, y1), self.panel_edge, 1, cv2.LINE_AA)

    def _text(self, frame, s, org, scale, color=None):
        thick = 1 if scale < 0.9 else 2
        cv2.putText(frame, s, (org[0] + 1, org[1] + 1), self.font, scale, self.col_shadow, thick + 1, cv2.LINE_AA)
        cv2.putText(frame, s, org, self.font, scale, color or self.col_text, thick, cv2.LINE_AA)
