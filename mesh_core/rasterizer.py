"""
Mesh Overlay — Mesh Rasterizer
Inverse-distance-weighted color blend over a small fixed grid.

Renders into a 64x64 RGBA buffer; the host upscales it with bilinear
filtering to produce the smooth full-screen gradient. All working arrays are
allocated once per rasterizer and reused every frame.
"""

import logging
from typing import Sequence

import numpy as np

from mesh_core.control_points import ControlPoint

logger = logging.getLogger(__name__)

RESOLUTION = 64

# Guards the pixel-on-point case without visibly flattening colors
EPSILON = 0.00001

BLUR_MIN = 20.0
BLUR_MAX = 200.0
POWER_MAX = 3.0
POWER_RANGE = 1.8


def blur_to_power(blur: float) -> float:
    """
    Map the user-facing blur control to the IDW exponent.

    Low blur (20) -> power 3.0 (distinct regions)
    High blur (200) -> power 1.2 (very smooth blending)
    """
    return POWER_MAX - ((blur - BLUR_MIN) / (BLUR_MAX - BLUR_MIN)) * POWER_RANGE


class MeshRasterizer:
    """
    Owns the RGBA pixel buffer and the per-pixel scratch arrays.
    """

    def __init__(self, resolution: int = RESOLUTION):
        self.resolution = resolution
        r = resolution
        self.buffer = np.zeros((r, r, 4), dtype=np.uint8)
        self.render_count = 0

        # Pre-compute normalized pixel coordinates (row = y, column = x)
        self.y_grid, self.x_grid = np.mgrid[0:r, 0:r].astype(np.float64)
        self.x_grid /= (r - 1)
        self.y_grid /= (r - 1)

        # Scratch arena
        self._dx = np.empty((r, r), dtype=np.float64)
        self._dy = np.empty((r, r), dtype=np.float64)
        self._weight = np.empty((r, r), dtype=np.float64)
        self._total = np.empty((r, r), dtype=np.float64)
        self._accum = np.empty((3, r, r), dtype=np.float64)
        self._finite = np.empty((3, r, r), dtype=bool)
        self._valid = np.empty((r, r), dtype=bool)
        self._invalid = np.empty((r, r), dtype=bool)

    def clear(self):
        """Make the whole buffer transparent."""
        self.buffer.fill(0)

    def render(self, points: Sequence[ControlPoint], pos_x, pos_y, blur: float) -> np.ndarray:
        """
        Blend the control point colors at their current positions into the buffer.

        Args:
            points: Control points (supply the colors).
            pos_x, pos_y: Current normalized positions, one entry per point.
            blur: User blur value, mapped to the interpolation power.

        Returns:
            The (reused) RGBA buffer.
        """
        self.render_count += 1
        num_points = len(points)
        if num_points == 0:
            self.clear()
            return self.buffer

        half_power = blur_to_power(blur) * 0.5
        dx, dy, weight = self._dx, self._dy, self._weight
        total, accum = self._total, self._accum
        total.fill(0.0)
        accum.fill(0.0)

        with np.errstate(invalid="ignore", divide="ignore", over="ignore"):
            for i in range(num_points):
                np.subtract(self.x_grid, pos_x[i], out=dx)
                np.multiply(dx, dx, out=dx)
                np.subtract(self.y_grid, pos_y[i], out=dy)
                np.multiply(dy, dy, out=dy)
                np.add(dx, dy, out=weight)

                # weight = 1 / (dist^power + epsilon)
                np.power(weight, half_power, out=weight)
                np.add(weight, EPSILON, out=weight)
                np.reciprocal(weight, out=weight)

                np.add(total, weight, out=total)
                color = points[i].color
                for c in range(3):
                    np.multiply(weight, color[c], out=dx)
                    np.add(accum[c], dx, out=accum[c])

            np.divide(accum, total, out=accum)

        # Non-finite pixels become transparent so the background shows through
        np.isfinite(accum, out=self._finite)
        np.logical_and.reduce(self._finite, axis=0, out=self._valid)
        np.logical_not(self._valid, out=self._invalid)
        np.copyto(accum, 0.0, where=self._invalid)

        # Round half to even, then clamp (canvas pixel store semantics)
        np.rint(accum, out=accum)
        np.clip(accum, 0, 255, out=accum)
        for c in range(3):
            np.copyto(self.buffer[..., c], accum[c], casting="unsafe")
        self.buffer[..., 3] = 255
        np.copyto(self.buffer[..., 3], 0, where=self._invalid)

        return self.buffer
