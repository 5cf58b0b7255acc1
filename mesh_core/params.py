"""
Mesh Overlay — Parameter Bundle
The read-only parameters a mesh instance is built from, with the configurator
defaults and the string-to-typed coercion used when they come from the
command line or a query string.
"""

import math
import random
import re
import logging
from dataclasses import dataclass, fields, replace as _dc_replace
from typing import Mapping, Tuple

from mesh_core.animation import STATIC_MODE
from mesh_core.palettes import hex_to_rgb

logger = logging.getLogger(__name__)

# ─── Configurator options ────────────────────────────────────────────────────
MESH_ANIMATIONS = ["drift", "orbit", "breathe", "wave", "none"]
MESH_BLEND_MODES = ["normal", "screen", "multiply", "overlay"]
MESH_POINTS = [2, 3, 4]

# Slider ranges (min, max)
SEED_RANGE = (1, 999999)
SPEED_RANGE = (0.1, 3.0)
BLUR_RANGE = (20.0, 200.0)
SCALE_RANGE = (0.5, 2.0)
OPACITY_RANGE = (0.0, 1.0)

_HEX_COLOR = re.compile(r"^[0-9a-fA-F]{6}$")


def _clamp(value, bounds):
    lo, hi = bounds
    return max(lo, min(hi, value))


def random_seed() -> int:
    """Fresh seed for the 'randomize' action. Host-side only."""
    return random.randint(*SEED_RANGE)


@dataclass(frozen=True)
class MeshParams:
    seed: int = 42
    points: int = 3
    palette: str = "pastel"
    animation: str = "drift"
    speed: float = 1.0
    blur: float = 100.0
    scale: float = 1.0
    opacity: float = 0.8
    blend: str = "normal"
    bg: str = "000000"

    def __post_init__(self):
        # from_mapping normalizes bg; direct construction must already be clean
        if not isinstance(self.bg, str) or not _HEX_COLOR.match(self.bg):
            raise ValueError(f"bg must be a 6-digit hex color without '#', got {self.bg!r}")

    @property
    def structural_key(self) -> Tuple[int, int, str, float]:
        """Parameters whose change requires regenerating the control points."""
        return self.seed, self.points, self.palette, self.scale

    @property
    def is_static(self) -> bool:
        return self.animation == STATIC_MODE

    @property
    def bg_rgb(self):
        return hex_to_rgb(self.bg)

    def replace(self, **changes) -> "MeshParams":
        return _dc_replace(self, **changes)

    @classmethod
    def from_mapping(cls, values: Mapping[str, object]) -> "MeshParams":
        """
        Build params from loosely-typed values (CLI flags, query strings).

        Numbers are parsed as floats; unparseable values fall back to the
        default. Results are then clamped to the configurator's ranges.
        """
        defaults = cls()
        parsed = {}
        for f in fields(cls):
            default = getattr(defaults, f.name)
            raw = values.get(f.name)
            if raw is None:
                parsed[f.name] = default
                continue
            if isinstance(default, (int, float)):
                try:
                    number = float(raw)
                except (TypeError, ValueError):
                    logger.debug("Ignoring non-numeric %s=%r", f.name, raw)
                    number = float("nan")
                parsed[f.name] = number if math.isfinite(number) else default
            else:
                parsed[f.name] = str(raw)
        return cls._normalized(parsed, defaults)

    @classmethod
    def _normalized(cls, p: dict, defaults: "MeshParams") -> "MeshParams":
        p["seed"] = int(_clamp(int(p["seed"]), SEED_RANGE))
        p["points"] = int(_clamp(int(round(p["points"])), (MESH_POINTS[0], MESH_POINTS[-1])))
        p["speed"] = float(_clamp(p["speed"], SPEED_RANGE))
        p["blur"] = float(_clamp(p["blur"], BLUR_RANGE))
        p["scale"] = float(_clamp(p["scale"], SCALE_RANGE))
        p["opacity"] = float(_clamp(p["opacity"], OPACITY_RANGE))

        if p["animation"] not in MESH_ANIMATIONS:
            logger.warning("Unknown animation %r, using %r", p["animation"], defaults.animation)
            p["animation"] = defaults.animation
        if p["blend"] not in MESH_BLEND_MODES:
            logger.warning("Unknown blend mode %r, using %r", p["blend"], defaults.blend)
            p["blend"] = defaults.blend

        bg = p["bg"].lstrip("#")
        if not _HEX_COLOR.match(bg):
            logger.warning("Invalid background color %r, using %r", p["bg"], defaults.bg)
            bg = defaults.bg
        p["bg"] = bg.lower()

        # Palette names pass through untouched; unknown ones render empty.
        return cls(**p)
