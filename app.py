# app.py - gesture swarm
import argparse
import logging
import time

import cv2

import shapes
from params import Params
from renderer import SwarmRenderer
from session import SwarmSession

WINDOW_NAME = "Gesture Swarm"

MODES = shapes.TOPOLOGIES + shapes.LEARNING + ("spelling", "counting") + shapes.ARCADE


def open_camera(max_index=6):
    for i in range(max_index):
        cap = cv2.VideoCapture(i)
        if cap.isOpened():
            ok, _ = cap.read()
            if ok:
                print(f"✅ Using camera index: {i}")
                return cap
        cap.release()
    raise RuntimeError(f"❌ No working camera found (0–{max_index-1}).")


def parse_args(argv=None):
    ap = argparse.ArgumentParser(description="Hand-steered particle swarm")
    ap.add_argument("--particles", type=int, help="particle count (fixed for the session)")
    ap.add_argument("--mode", help=f"start mode, one of: {', '.join(MODES)}")
    ap.add_argument("--color", help="base colour, e.g. '#06b6d4'")
    ap.add_argument("--size", type=float, help="base particle size")
    ap.add_argument("--open-ratio", type=float, help="fingertip/palm ratio for an open hand")
    ap.add_argument("--closed-ratio", type=float, help="fingertip/palm ratio for a fist")
    ap.add_argument("--tension-mode", choices=("grip", "pinch"))
    ap.add_argument("--no-audio", action="store_true", help="disable microphone + cues")
    ap.add_argument("--camera", type=int, default=None, help="camera index (default: first working)")
    ap.add_argument("--backend", choices=("numpy", "taichi"), default="numpy")
    ap.add_argument("--seed", type=int)
    ap.add_argument("-v", "--verbose", action="store_true")
    return ap.parse_args(argv)


def build_params(args) -> Params:
    p = Params()
    overrides = {
        "num_particles": args.particles,
        "mode": args.mode,
        "base_color": args.color,
        "particle_size": args.size,
        "open_ratio": args.open_ratio,
        "closed_ratio": args.closed_ratio,
        "tension_mode": args.tension_mode,
        "seed": args.seed,
    }
    for key, value in overrides.items():
        if value is not None:
            setattr(p, key, value)
    return p


def _init_engine(params, backend):
    if backend == "taichi":
        try:
            from swarm_taichi import SwarmEngineTaichi
            return SwarmEngineTaichi(params)
        except ImportError:
            print("⚠️  Taichi not installed - using numpy backend")
    from swarm import SwarmEngine
    return SwarmEngine(params)


def _init_hands():
    try:
        from hands import Hands
        hands = Hands()
        print("✅ MediaPipe hands ready")
        return hands
    except ImportError:
        print("⚠️  mediapipe not installed - mouse control only")
        return None
    except Exception as e:
        print(f"⚠️  Hand tracker init failed: {e}")
        return None


def _init_audio(enabled):
    if not enabled:
        return None, None
    try:
        from audio_capture import AudioCapture, play_cue
        return AudioCapture(), play_cue
    except ImportError:
        print("⚠️  sounddevice not installed - audio disabled")
        return None, None


def _open_capture(index):
    if index is None:
        return open_camera()
    cap = cv2.VideoCapture(index)
    if not cap.isOpened():
        raise RuntimeError(f"❌ Camera {index} could not be opened.")
    print(f"✅ Using camera index: {index}")
    return cap


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    params = build_params(args)

    engine = _init_engine(params, args.backend)
    detector = _init_hands()
    audio, play_cue = _init_audio(not args.no_audio)

    session = SwarmSession(params, detector=detector, audio=audio, engine=engine)
    if play_cue is not None:
        session.on_cue = play_cue

    cap = None
    if detector is not None:
        try:
            cap = _open_capture(args.camera)
        except RuntimeError as e:
            print(f"⚠️  {e} - mouse control only")

    if cap is not None:
        def read_frame():
            ok, frame = cap.read()
            return frame if ok else None
        session.start_capture(read_frame)

    session.start_audio()

    renderer = SwarmRenderer()

    def on_mouse(event, x, y, flags, _):
        if event == cv2.EVENT_MOUSELEAVE:
            session.clear_pointer()
            return
        nx = x / float(renderer.width) * 2.0 - 1.0
        ny = 1.0 - y / float(renderer.height) * 2.0
        pressed = bool(flags & cv2.EVENT_FLAG_LBUTTON)
        session.set_pointer(nx, ny, pressed, inside=True)

    cv2.namedWindow(WINDOW_NAME, cv2.WINDOW_NORMAL)
    cv2.resizeWindow(WINDOW_NAME, renderer.width, renderer.height)
    cv2.setMouseCallback(WINDOW_NAME, on_mouse)

    print("\n" + "="*60)
    print("✨ GESTURE SWARM")
    print("="*60)
    print("\n📋 CONTROLS:")
    print("   Open hand - push + swirl | Fist - pull")
    print("   Mouse: hover to steer, hold left button to pull")
    print("   N / P - Next / previous mode")
    print("   1-9 - Jump to mode")
    print("   R - Reset mode")
    print("   ESC - Exit")
    print("\n🎛️  MODES:")
    for i, m in enumerate(MODES):
        print(f"   {i + 1:>2}. {m}")
    print("\n" + "="*60 + "\n")

    state = {"fps": 0.0, "last": time.perf_counter()}

    def on_frame(s, hud):
        now = time.perf_counter()
        dt = max(1e-6, now - state["last"])
        state["last"] = now
        fps = 1.0 / dt
        state["fps"] = fps if state["fps"] == 0 else 0.9 * state["fps"] + 0.1 * fps

        bg = s.camera_frame.read()
        if bg is not None:
            bg = cv2.flip(bg, 1)
        img = renderer.render(s.engine, background=bg)
        renderer.draw_hud(img, hud, s.mode, s.status, state["fps"], s.current_points())
        cv2.imshow(WINDOW_NAME, img)

        key = cv2.waitKey(1) & 0xFF
        if key == 27:
            return False
        if key in (ord("n"), ord("N"), ord("p"), ord("P")):
            step = 1 if key in (ord("n"), ord("N")) else -1
            i = MODES.index(s.mode) if s.mode in MODES else 0
            s.set_mode(MODES[(i + step) % len(MODES)])
        elif ord("1") <= key <= ord("9"):
            i = key - ord("1")
            if i < len(MODES):
                s.set_mode(MODES[i])
        elif key in (ord("r"), ord("R")):
            s.reset()
        return True

    try:
        session.run(on_frame)
    except KeyboardInterrupt:
        pass
    finally:
        session.stop()
        if cap is not None:
            cap.release()
        cv2.destroyAllWindows()

    print("\n✅ Gesture swarm shutdown complete")


if __name__ == "__main__":
    main()
