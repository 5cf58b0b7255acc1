"""
Mesh Overlay — Color Palettes
Each palette defines HSL ranges for generating harmonious colors.
Colors come out as RGB tuples for direct pixel-buffer writes.
"""

import math
import logging
from typing import Dict, List, Optional, Tuple

from mesh_core.seeded_random import RandomFn, seeded_float

logger = logging.getLogger(__name__)

RGBColor = Tuple[int, int, int]


# ═══════════════════════════════════════════════════════════════════════════════
# PALETTE DEFINITIONS
# ═══════════════════════════════════════════════════════════════════════════════

MESH_PALETTE_DEFINITIONS: Dict[str, dict] = {
    "pastel": {
        "name": "Pastel",
        "hue": (0, 360),
        "saturation": (40, 65),
        "lightness": (75, 90),
        "hue_spread": 120,
    },
    "vibrant": {
        "name": "Vibrant",
        "hue": (0, 360),
        "saturation": (80, 100),
        "lightness": (45, 65),
        "hue_spread": 90,
    },
    "earth": {
        "name": "Earth Tones",
        "hue": (15, 55),
        "saturation": (30, 60),
        "lightness": (30, 55),
    },
    "ocean": {
        "name": "Ocean",
        "hue": (180, 240),
        "saturation": (50, 85),
        "lightness": (35, 65),
    },
    "neon": {
        "name": "Neon",
        "hue": (0, 360),
        "saturation": (90, 100),
        "lightness": (50, 70),
        "hue_spread": 60,
    },
    "warm": {
        "name": "Warm",
        "hue": (0, 60),
        "saturation": (60, 90),
        "lightness": (45, 70),
    },
    "cool": {
        "name": "Cool",
        "hue": (180, 300),
        "saturation": (50, 80),
        "lightness": (40, 65),
    },
    "monochrome": {
        "name": "Monochrome",
        "hue": (0, 0),
        "saturation": (0, 5),
        "lightness": (20, 85),
    },
    "sunset": {
        "name": "Sunset",
        "hue": (330, 60),  # wraps through 0
        "saturation": (70, 95),
        "lightness": (45, 65),
    },
    "forest": {
        "name": "Forest",
        "hue": (80, 160),
        "saturation": (35, 70),
        "lightness": (25, 50),
    },
    "candy": {
        "name": "Candy",
        "hue": (280, 360),
        "saturation": (60, 90),
        "lightness": (60, 80),
        "hue_spread": 40,
    },
    "aurora": {
        "name": "Aurora",
        "hue": (100, 280),
        "saturation": (50, 85),
        "lightness": (40, 65),
        "hue_spread": 80,
    },
}

# Names offered by the configurator. Not all have a definition yet; the
# missing ones render an empty mesh.
MESH_PALETTES = [
    "pastel", "vibrant", "earth", "ocean", "neon",
    "warm", "cool", "monochrome", "sunset", "forest",
    "candy", "aurora", "twilight", "tropical", "lavender",
    "slate", "ember", "sakura",
]


# ═══════════════════════════════════════════════════════════════════════════════
# COLOR UTILITIES
# ═══════════════════════════════════════════════════════════════════════════════

def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def hsl_to_rgb(h: float, s: float, l: float) -> RGBColor:
    """Convert HSL (h: 0-360, s: 0-100, l: 0-100) to RGB (0-255)."""
    s /= 100.0
    l /= 100.0
    a = s * min(l, 1 - l)

    def f(n):
        k = (n + h / 30.0) % 12
        return l - a * max(min(k - 3, 9 - k, 1), -1)

    return (
        _round_half_up(f(0) * 255),
        _round_half_up(f(8) * 255),
        _round_half_up(f(4) * 255),
    )


def hex_to_rgb(hex_color: str) -> RGBColor:
    """Convert hex color to RGB tuple."""
    hex_color = hex_color.lstrip('#')
    return tuple(int(hex_color[i:i+2], 16) for i in (0, 2, 4))


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """Convert RGB to hex string."""
    return f"#{r:02x}{g:02x}{b:02x}"


def get_palette_definition(name: str) -> Optional[dict]:
    """Look up a palette by name. Unknown names return None, never raise."""
    return MESH_PALETTE_DEFINITIONS.get(name)


# ═══════════════════════════════════════════════════════════════════════════════
# COLOR GENERATION
# ═══════════════════════════════════════════════════════════════════════════════

def generate_palette_colors(palette: dict, count: int, rng: RandomFn) -> List[RGBColor]:
    """
    Generate ``count`` colors from a palette definition using a seeded RNG.

    Hues are evenly distributed across the palette's hue range with small
    jitter, so each control point gets a distinctly different color.

    Draw order (fixed, part of the determinism contract):
        1. start offset inside the available hue range
        2. per color: hue jitter, saturation, lightness
    """
    hue_lo, hue_hi = palette["hue"]
    if hue_lo <= hue_hi:
        total_range = hue_hi - hue_lo
    else:
        # Wrapping hue range (e.g. sunset: 330 -> 60 wraps through 0)
        total_range = 360 - hue_lo + hue_hi
    start_hue = hue_lo

    hue_spread = palette.get("hue_spread")
    effective_range = min(hue_spread, total_range) if hue_spread else total_range

    range_start = start_hue + rng() * max(0, total_range - effective_range)
    slot = effective_range / count

    colors = []
    for i in range(count):
        even_spacing = slot * (i + 0.5)
        jitter = (rng() - 0.5) * slot * 0.4
        h = math.fmod(math.fmod(range_start + even_spacing + jitter, 360) + 360, 360)

        s = seeded_float(rng, *palette["saturation"])
        l = seeded_float(rng, *palette["lightness"])
        colors.append(hsl_to_rgb(h, s, l))

    return colors
