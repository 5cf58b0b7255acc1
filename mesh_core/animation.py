"""
Mesh Overlay — Animation Models
One pure position function per animation mode. Each maps a control point and
the scaled elapsed time to a normalized (x, y) position; no hidden state, so
replaying the same time sequence reproduces the same motion.
"""

import math
import logging
from typing import Callable, Dict, Sequence, Tuple

from mesh_core.control_points import ControlPoint

logger = logging.getLogger(__name__)

Position = Tuple[float, float]


# ═══════════════════════════════════════════════════════════════════════════════
# ANIMATION MODE DEFINITIONS
# ═══════════════════════════════════════════════════════════════════════════════

ANIMATION_MODES = {
    "drift": {
        "name": "Drift",
        "desc": "Each blob wanders around its base position",
    },
    "orbit": {
        "name": "Orbit",
        "desc": "Blobs circle the canvas center",
    },
    "breathe": {
        "name": "Breathe",
        "desc": "The layout pulses in and out from the center",
    },
    "wave": {
        "name": "Wave",
        "desc": "Blobs sway along Lissajous-like paths",
    },
    "none": {
        "name": "None (Static)",
        "desc": "Rendered once at the base positions",
    },
}

STATIC_MODE = "none"


# ═══════════════════════════════════════════════════════════════════════════════
# POSITION FUNCTIONS
# ═══════════════════════════════════════════════════════════════════════════════

def _static(pt: ControlPoint, t: float) -> Position:
    return pt.base_x, pt.base_y


def _drift(pt: ControlPoint, t: float) -> Position:
    x = pt.base_x + math.sin(t * pt.drift_vx * 0.3 + pt.angle) * 0.15
    y = pt.base_y + math.cos(t * pt.drift_vy * 0.3 + pt.breathe_phase) * 0.15
    return x, y


def _orbit(pt: ControlPoint, t: float) -> Position:
    # Orbits the canvas center; base position is ignored
    x = 0.5 + math.cos(t * pt.orbit_speed + pt.angle) * pt.radius
    y = 0.5 + math.sin(t * pt.orbit_speed + pt.angle) * pt.radius
    return x, y


def _breathe(pt: ControlPoint, t: float) -> Position:
    scale = 1 + 0.3 * math.sin(t * 0.5 + pt.breathe_phase)
    x = 0.5 + (pt.base_x - 0.5) * scale
    y = 0.5 + (pt.base_y - 0.5) * scale
    x += math.sin(t * 0.2 + pt.angle) * 0.03
    y += math.cos(t * 0.15 + pt.breathe_phase) * 0.03
    return x, y


def _wave(pt: ControlPoint, t: float) -> Position:
    x = pt.base_x + math.sin(t * pt.wave_freq + pt.wave_phase) * 0.12
    y = pt.base_y + math.cos(t * pt.wave_freq * 0.7 + pt.wave_phase) * 0.08
    return x, y


_POSITION_FUNCS: Dict[str, Callable[[ControlPoint, float], Position]] = {
    STATIC_MODE: _static,
    "drift": _drift,
    "orbit": _orbit,
    "breathe": _breathe,
    "wave": _wave,
}


def position_at(point: ControlPoint, mode: str, t: float) -> Position:
    """Animated position of ``point`` at scaled time ``t`` (unknown modes stay at base)."""
    func = _POSITION_FUNCS.get(mode, _static)
    return func(point, t)


def animate_positions(points: Sequence[ControlPoint], mode: str, t: float, out_x, out_y) -> None:
    """
    Resolve every point's position for one frame into caller-owned arrays.

    ``out_x``/``out_y`` must hold at least ``len(points)`` entries; they are
    fully populated before this returns.
    """
    func = _POSITION_FUNCS.get(mode)
    if func is None:
        logger.debug("Unknown animation mode %r, holding base positions", mode)
        func = _static
    for i, pt in enumerate(points):
        out_x[i], out_y[i] = func(pt, t)


def scaled_time(timestamp_ms: float, speed: float) -> float:
    """Convert a frame timestamp (ms) into animation time (seconds x speed)."""
    return timestamp_ms * 0.001 * speed


def orbit_period(point: ControlPoint) -> float:
    """Scaled time after which an orbiting point returns to the same position."""
    return 2 * math.pi / abs(point.orbit_speed)
