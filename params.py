from __future__ import annotations


class Params:
    """
    All tunable knobs live here so you don't hunt through code.
    """
    def __init__(self):
        # Particle count (fixed for the whole session)
        self.num_particles = 10000
        self.seed = 0

        # Start mode + visuals
        self.mode = "vortex"
        self.base_color = "#06b6d4"
        self.particle_size = 0.12   # base point size (world units)

        # Physics
        self.dt_max = 0.1           # clamp dt on frame stalls (s)
        self.stiffness = 2.5        # spring toward target
        self.damping = 0.92         # velocity multiplier per 1/60 s
        self.max_speed = 18.0       # clamp speed (world units / s)
        self.flow_amplitude = 0.35  # ambient sine/cos flow field
        self.centering = 0.05       # idle pull toward origin (no input)
        self.audio_jitter = 6.0     # bass kick perturbation
        self.depth_fade = 0.06      # colour fade per unit of -z

        # Hand interaction
        self.view_half_width = 8.0  # control point x=1 maps to this world x
        self.view_half_height = 6.0
        self.view_depth = 4.0       # control point z=1 maps to this world z
        self.interaction_radius = 7.75
        self.attract_strength = 60.0
        self.repel_strength = 20.0
        self.curl_strength = 12.0
        self.attract_tension = 0.5  # tension above this => pull, below => push + swirl
        self.select_strength = 40.0 # tic-tac-toe selection pull

        # Gesture -> tension
        # "grip": fingertip/wrist ratio over palm width
        # "pinch": thumb-index distance
        self.tension_mode = "grip"
        self.open_ratio = 2.2
        self.closed_ratio = 0.7
        self.pinch_open_dist = 0.15
        self.pinch_range = 0.12
        self.depth_ref_palm = 0.12  # palm width (normalized) treated as z=0
        self.depth_gain = 1.5

        # Recursive filter tuning (process noise q, measurement noise r)
        self.filter_xy_q = 0.01
        self.filter_xy_r = 0.05
        self.filter_z_q = 0.002
        self.filter_z_r = 0.1
        self.filter_tension_q = 0.05
        self.filter_tension_r = 0.08

        # Snake
        self.snake_food_count = 200
        self.snake_trail_interval = 0.05
        self.snake_trail_base = 12
        self.snake_trail_growth = 4
        self.snake_eat_radius = 0.9
        self.snake_follow = 6.0     # head lerp rate toward the pointer (1/s)

        # Tic-tac-toe
        self.ttt_place_tension = 0.9
        self.ttt_debounce = 1.0
        self.ttt_ai_delay = 0.8

        # Memory
        self.memory_show_time = 0.8
        self.memory_hold_time = 0.5
        self.memory_input_timeout = 6.0

        # Balloon pop
        self.balloon_pinch_tension = 0.8
        self.balloon_radius = 1.6
        self.balloon_max = 5
        self.balloon_level_delay = 1.5

        # Fog reveal
        self.fog_radius = 1.5
        self.fog_stride = 4
        self.fog_advance_ratio = 0.85


def _pget(p, key, default=None):
    if isinstance(p, dict):
        return p.get(key, default)
    return getattr(p, key, default)


def hex_to_rgb(color) -> tuple[float, float, float]:
    """'#06b6d4' / '06b6d4' / (r,g,b) 0..255 or 0..1 -> floats in 0..1."""
    if isinstance(color, str):
        s = color.strip().lstrip("#")
        if len(s) == 3:
            s = "".join(ch * 2 for ch in s)
        if len(s) != 6:
            raise ValueError(f"bad colour: {color!r}")
        return (int(s[0:2], 16) / 255.0, int(s[2:4], 16) / 255.0, int(s[4:6], 16) / 255.0)
    r, g, b = (float(c) for c in color)
    if max(r, g, b) > 1.0:
        r, g, b = r / 255.0, g / 255.0, b / 255.0
    return (r, g, b)
