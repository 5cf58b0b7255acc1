"""
Mesh Overlay — Control Point Placement
Deterministic generation of the gradient "blobs": base positions arranged in
angular sectors around the canvas center, palette colors, and the motion
parameters consumed by the animation models.
"""

import math
import logging
from dataclasses import dataclass
from typing import List

from mesh_core.palettes import RGBColor, generate_palette_colors, get_palette_definition
from mesh_core.seeded_random import create_seeded_random, seeded_float

logger = logging.getLogger(__name__)

TWO_PI = math.pi * 2


@dataclass(frozen=True)
class ControlPoint:
    # Base position (normalized 0-1)
    base_x: float
    base_y: float
    color: RGBColor
    # Motion parameters, fixed at creation
    angle: float
    radius: float
    drift_vx: float
    drift_vy: float
    breathe_phase: float
    wave_freq: float
    wave_phase: float
    orbit_speed: float


def spread_distance(scale: float) -> float:
    """Maximum distance of a base position from the center for a given scale."""
    return 0.15 + scale * 0.2


def generate_control_points(seed: int, count: int, palette: str, scale: float) -> List[ControlPoint]:
    """
    Generate ``count`` control points from a seed.

    All randomness comes from one RNG stream in a fixed order (palette
    colors, base angle, then each point's distance and motion parameters),
    so (seed, count, palette, scale) fully determines the result.

    An unknown palette yields an empty list.
    """
    rng = create_seeded_random(seed)
    palette_def = get_palette_definition(palette)
    if palette_def is None:
        logger.debug("Unknown mesh palette %r, no control points generated", palette)
        return []

    colors = generate_palette_colors(palette_def, count, rng)

    # Evenly-spaced sectors around the center keep points from clustering
    angle_step = TWO_PI / count
    base_angle = seeded_float(rng, 0, TWO_PI)
    spread = spread_distance(scale)

    points = []
    for i in range(count):
        sector_angle = base_angle + angle_step * i
        dist = seeded_float(rng, spread * 0.6, spread)
        base_x = 0.5 + math.cos(sector_angle) * dist
        base_y = 0.5 + math.sin(sector_angle) * dist

        angle = seeded_float(rng, 0, TWO_PI)
        radius = seeded_float(rng, 0.08, 0.25)
        drift_vx = seeded_float(rng, -1, 1)
        drift_vy = seeded_float(rng, -1, 1)
        breathe_phase = seeded_float(rng, 0, TWO_PI)
        wave_freq = seeded_float(rng, 0.3, 0.8)
        wave_phase = seeded_float(rng, 0, TWO_PI)
        orbit_speed = seeded_float(rng, 0.3, 0.8)
        if rng() <= 0.5:
            orbit_speed = -orbit_speed

        points.append(ControlPoint(
            base_x=base_x,
            base_y=base_y,
            color=colors[i],
            angle=angle,
            radius=radius,
            drift_vx=drift_vx,
            drift_vy=drift_vy,
            breathe_phase=breathe_phase,
            wave_freq=wave_freq,
            wave_phase=wave_phase,
            orbit_speed=orbit_speed,
        ))

    logger.debug("Generated %d control points (seed=%d, palette=%s)", len(points), seed, palette)
    return points
