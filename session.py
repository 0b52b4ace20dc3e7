# session.py
# Wires gestures + audio + mode + engine for one session.
#
# Two cadences:
#   capture thread   camera frame -> control points -> LatestValue
#   frame loop       read latest points/audio -> mode.on_frame -> engine.step
# The frame loop never waits on capture; it always takes the newest snapshot.

from __future__ import annotations

import logging
import threading
import time

from audio import AudioSignalProcessor
from gestures import GestureSignalProcessor, pointer_point
from modes import FogRevealMode, HudSignal, create_mode_state
from params import _pget
from swarm import SwarmEngine

log = logging.getLogger(__name__)


class LatestValue:
    """Last-value-wins slot shared between two threads. Readers never block on writers."""

    def __init__(self, value=None):
        self._lock = threading.Lock()
        self._value = value
        self.version = 0

    def publish(self, value) -> None:
        with self._lock:
            self._value = value
            self.version += 1

    def read(self):
        with self._lock:
            return self._value


class SwarmSession:
    """
    One running swarm.

      s = SwarmSession(params, detector=Hands(), audio=AudioCapture())
      s.start_capture(read_frame)   # optional, camera thread
      s.start_audio()               # optional
      s.run(on_frame)               # blocks until stop()

    stop() tears both loops down together: the shared event ends the capture
    thread and the frame loop at their next frame boundary, then the audio
    stream and the detector are released (capture first, detector last).
    """

    def __init__(self, params=None, detector=None, audio=None, engine=None):
        self.params = params if params is not None else {}
        self.detector = detector
        self.audio = audio

        self.gestures = GestureSignalProcessor(self.params)
        self.audio_bands = AudioSignalProcessor()
        self.engine = engine if engine is not None else SwarmEngine(self.params)
        self.seed = _pget(self.params, "seed", None)
        self.fog_advance_ratio = float(_pget(self.params, "fog_advance_ratio", 0.85))

        self.hands = LatestValue([])
        self.camera_frame = LatestValue(None)
        self.pointer = LatestValue(None)
        self.on_cue = None

        self.mode = None
        self.mode_state = None
        self.hud = HudSignal("topology")
        self.elapsed = 0.0

        self._camera_status = "off"
        self._stop = threading.Event()
        self._teardown = threading.Lock()
        self._closed = False
        self._thread = None
        self._worker_running = False
        self._close_on_exit = False

        self.set_mode(_pget(self.params, "mode", "vortex"))

    # ---------- mode ----------

    def set_mode(self, mode: str) -> None:
        """Rebuild the mode from scratch and morph the swarm to its formation."""
        state = create_mode_state(mode, self.engine.n, self.params, self.seed)
        state.on_enter(self.engine.targets)
        self.engine.morph()
        self.mode = mode
        self.mode_state = state
        self.hud = HudSignal("topology", 0, mode)
        log.info("Mode -> %s (%s)", mode, type(state).__name__)

    def reset(self) -> None:
        self.set_mode(self.mode)

    # ---------- inputs ----------

    def set_pointer(self, x, y, pressed=False, inside=True) -> None:
        self.pointer.publish(pointer_point(x, y, pressed, inside))

    def clear_pointer(self) -> None:
        self.pointer.publish(None)

    def current_points(self):
        points = self.hands.read()
        if points:
            return points
        ptr = self.pointer.read()
        if ptr is not None and ptr.active:
            return [ptr]
        return []

    @property
    def status(self) -> dict:
        return {
            "camera": self._camera_status,
            "audio": getattr(self.audio, "status", "off") if self.audio is not None else "off",
        }

    @property
    def running(self) -> bool:
        return not self._stop.is_set()

    # ---------- frame ----------

    def frame(self, dt: float) -> HudSignal:
        dt = max(0.0, min(float(dt), self.engine.dt_max))
        self.elapsed += dt

        points = self.current_points()

        bins = None
        if self.audio is not None and getattr(self.audio, "status", None) == "active":
            bins = self.audio.latest()
        bands = self.audio_bands.update(bins)

        state = self.mode_state
        hud = state.on_frame(points, dt, self.elapsed)

        if isinstance(state, FogRevealMode) and state.reveal_ratio >= self.fog_advance_ratio:
            state.advance()
            hud = HudSignal("reveal", state.index, state.letter, "level")

        self.engine.step(dt, points, bands, state)

        if hud.cue and self.on_cue is not None:
            self.on_cue(hud.cue)

        self.hud = hud
        return hud

    # ---------- loops ----------

    def start_capture(self, capture_frame) -> None:
        """
        capture_frame() -> BGR frame, or None when the camera is gone.
        Runs the detector on its own thread and publishes control points.
        """
        if self.detector is None:
            self._camera_status = "error"
            log.warning("No hand detector, camera input disabled")
            return
        if self._thread and self._thread.is_alive():
            return

        def worker():
            self._camera_status = "active"
            try:
                while not self._stop.is_set():
                    try:
                        frame = capture_frame()
                    except Exception as e:
                        log.warning("Camera read failed: %s: %s", type(e).__name__, e)
                        frame = None
                    if self._stop.is_set():
                        break
                    if frame is None:
                        self._camera_status = "error"
                        self.hands.publish([])
                        return
                    self.camera_frame.publish(frame)
                    points = self.gestures.process(self.detector, frame)
                    # stop() may have cleared hands while the detector ran
                    if self._stop.is_set():
                        break
                    self.hands.publish(points)
                self._camera_status = "off"
            finally:
                with self._teardown:
                    self._worker_running = False
                    close_now = self._close_on_exit
                if close_now:
                    self._close_detector()

        self._worker_running = True
        self._thread = threading.Thread(target=worker, daemon=True)
        self._thread.start()

    def start_audio(self) -> None:
        if self.audio is not None:
            self.audio.start()

    def run(self, frame_callback=None, clock=time.perf_counter, max_frames=None) -> None:
        """
        Frame loop. frame_callback(session, hud) is called after every step;
        returning False ends the loop. Always tears down on exit.
        """
        prev = clock()
        frames = 0
        try:
            while self.running:
                now = clock()
                hud = self.frame(now - prev)
                prev = now
                frames += 1
                if frame_callback is not None and frame_callback(self, hud) is False:
                    break
                if max_frames is not None and frames >= max_frames:
                    break
        finally:
            self.stop()

    def stop(self, timeout=1.0) -> None:
        with self._teardown:
            if self._closed:
                return
            self._closed = True

        self._stop.set()

        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None

        if self.audio is not None:
            self.audio.stop()

        # a capture read that outlives the join hands the detector to the worker
        with self._teardown:
            deferred = self._worker_running
            self._close_on_exit = deferred
        if deferred:
            log.warning("Capture thread still busy, detector closes when it exits")
        else:
            self._close_detector()

        self.hands.publish([])
        log.info("Session stopped")

    def _close_detector(self) -> None:
        close = getattr(self.detector, "close", None)
        if callable(close):
            close()
