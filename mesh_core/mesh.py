"""
Mesh Overlay — Mesh Instance
Ties the pieces together for one mounted overlay: deterministic control
points, the per-frame position resolution, and the rasterizer, driven by a
host-supplied frame scheduler.
"""

import logging
from typing import Callable, List, Optional

import numpy as np

from mesh_core.animation import animate_positions, scaled_time
from mesh_core.control_points import ControlPoint, generate_control_points
from mesh_core.frame_driver import FrameLoop, FrameScheduler
from mesh_core.params import MeshParams
from mesh_core.rasterizer import RESOLUTION, MeshRasterizer

logger = logging.getLogger(__name__)

PresentCallback = Callable[[np.ndarray], None]

# Initial capacity of the animated-position arena
_DEFAULT_CAPACITY = 4


class MeshOverlay:
    """
    One mesh gradient instance.

    Control points are regenerated only when seed, point count, palette or
    scale change. The animated-position arrays and the pixel buffer are
    allocated once and mutated in place every frame; the position arrays
    are reallocated only when the point count outgrows them.
    """

    def __init__(
        self,
        params: Optional[MeshParams] = None,
        on_present: Optional[PresentCallback] = None,
        resolution: int = RESOLUTION,
    ):
        self.params = params or MeshParams()
        self.on_present = on_present
        self.rasterizer = MeshRasterizer(resolution)
        self.points: List[ControlPoint] = []
        self.pos_x = np.zeros(_DEFAULT_CAPACITY, dtype=np.float64)
        self.pos_y = np.zeros(_DEFAULT_CAPACITY, dtype=np.float64)
        self._loop: Optional[FrameLoop] = None
        self._needs_render = True
        self._regenerate()

    # ─── State ───────────────────────────────────────────────────────────────

    @property
    def buffer(self) -> np.ndarray:
        return self.rasterizer.buffer

    @property
    def render_count(self) -> int:
        return self.rasterizer.render_count

    @property
    def is_running(self) -> bool:
        return self._loop is not None and self._loop.is_running

    def _regenerate(self):
        p = self.params
        self.points = generate_control_points(p.seed, p.points, p.palette, p.scale)
        count = len(self.points)

        if count > len(self.pos_x):
            logger.debug("Growing position arena %d -> %d", len(self.pos_x), count)
            self.pos_x = np.zeros(count, dtype=np.float64)
            self.pos_y = np.zeros(count, dtype=np.float64)

        for i, pt in enumerate(self.points):
            self.pos_x[i] = pt.base_x
            self.pos_y[i] = pt.base_y

        self._needs_render = True
        logger.info(
            "Mesh regenerated: seed=%d points=%d palette=%s scale=%.2f -> %d control points",
            p.seed, p.points, p.palette, p.scale, count,
        )

    def update_params(self, params: MeshParams):
        """Swap in a new parameter bundle, regenerating only what changed."""
        old = self.params
        self.params = params
        if params.structural_key != old.structural_key:
            self._regenerate()
        elif params.blur != old.blur or params.animation != old.animation:
            # Static meshes render once; they need a fresh render for these
            self._needs_render = True

    # ─── Frame handling ──────────────────────────────────────────────────────

    def on_frame(self, timestamp_ms: float):
        """Per-frame callback: resolve positions for this frame and render."""
        p = self.params
        count = len(self.points)

        if p.is_static:
            if not self._needs_render:
                return
            for i, pt in enumerate(self.points):
                self.pos_x[i] = pt.base_x
                self.pos_y[i] = pt.base_y
        elif count:
            t = scaled_time(timestamp_ms, p.speed)
            animate_positions(self.points, p.animation, t, self.pos_x, self.pos_y)
        elif not self._needs_render:
            # Nothing to animate; the empty frame is already on screen
            return

        self._render()

    def _render(self):
        self.rasterizer.render(self.points, self.pos_x, self.pos_y, self.params.blur)
        self._needs_render = False
        if self.on_present is not None:
            self.on_present(self.rasterizer.buffer)

    def start(self, scheduler: FrameScheduler):
        """Register with a frame scheduler; replaces any previous registration."""
        self.stop()
        self._needs_render = True
        self._loop = FrameLoop(scheduler, self.on_frame)
        self._loop.start()

    def stop(self):
        """Stop scheduling further frames (teardown)."""
        if self._loop is not None:
            self._loop.cancel()
            self._loop = None
