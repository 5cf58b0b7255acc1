"""
Mesh Overlay — Rendering Surface
Host-side presentation of the 64x64 buffer: bilinear upscale to the output
size, CSS-style blend against the solid background, then layer opacity.
"""

import logging
from typing import Callable, Optional, Tuple

import cv2
import numpy as np

from mesh_core.params import MeshParams

logger = logging.getLogger(__name__)


def _blend(backdrop: np.ndarray, source: np.ndarray, mode: str) -> np.ndarray:
    """Separable CSS blend modes on 0-1 float colors."""
    if mode == "multiply":
        return backdrop * source
    if mode == "screen":
        return backdrop + source - backdrop * source
    if mode == "overlay":
        return np.where(
            backdrop <= 0.5,
            2.0 * backdrop * source,
            1.0 - 2.0 * (1.0 - backdrop) * (1.0 - source),
        )
    if mode != "normal":
        logger.debug("Unknown blend mode %r, using normal", mode)
    return source


def upscale_buffer(buffer: np.ndarray, size: Tuple[int, int]) -> np.ndarray:
    """
    Bilinear upscale of an RGBA uint8 buffer to ``size`` (width, height).

    Works on premultiplied color so transparent pixels do not bleed black
    into their neighbours. Returns float32 RGBA in 0-1 (straight alpha).
    """
    w, h = size
    rgba = buffer.astype(np.float32) / 255.0
    alpha = rgba[..., 3:4]
    premul = np.concatenate([rgba[..., :3] * alpha, alpha], axis=2)
    scaled = cv2.resize(premul, (w, h), interpolation=cv2.INTER_LINEAR)
    out_alpha = scaled[..., 3:4]
    color = np.divide(
        scaled[..., :3], out_alpha,
        out=np.zeros_like(scaled[..., :3]),
        where=out_alpha > 1e-6,
    )
    return np.concatenate([np.clip(color, 0.0, 1.0), out_alpha], axis=2)


def compose_frame(buffer: np.ndarray, params: MeshParams, size: Tuple[int, int]) -> np.ndarray:
    """
    Composite the mesh buffer over the background color.

    Args:
        buffer: RGBA uint8 mesh buffer.
        params: Supplies ``bg``, ``opacity`` and ``blend``.
        size: Output (width, height).

    Returns:
        RGB uint8 frame of shape (height, width, 3).
    """
    layer = upscale_buffer(buffer, size)
    bg = np.array(params.bg_rgb, dtype=np.float32) / 255.0
    backdrop = np.broadcast_to(bg, layer[..., :3].shape)

    blended = _blend(backdrop, layer[..., :3], params.blend)
    alpha = layer[..., 3:4] * params.opacity
    frame = backdrop * (1.0 - alpha) + blended * alpha
    return np.clip(frame * 255.0 + 0.5, 0, 255).astype(np.uint8)


class SurfacePresenter:
    """
    Shows mesh buffers on a host surface whose size can change.

    The last presented buffer is kept so a resize can be redrawn without a
    fresh render; a static mesh renders only once.

    Args:
        get_size: Returns the surface's current (width, height).
        show: Receives each composed RGB frame.
        min_size: Floor applied to the reported size (before layout a
            widget reports 1x1).
    """

    def __init__(
        self,
        get_size: Callable[[], Tuple[int, int]],
        show: Callable[[np.ndarray], None],
        min_size: Tuple[int, int] = (1, 1),
    ):
        self._get_size = get_size
        self._show = show
        self._min_size = min_size
        self._buffer: Optional[np.ndarray] = None
        self._params: Optional[MeshParams] = None
        self.size: Optional[Tuple[int, int]] = None

    def current_size(self) -> Tuple[int, int]:
        w, h = self._get_size()
        return max(int(w), self._min_size[0]), max(int(h), self._min_size[1])

    def present(self, buffer: np.ndarray, params: MeshParams):
        """Compose ``buffer`` at the current surface size and show it."""
        self._buffer = buffer
        self._params = params
        self._draw(self.current_size())

    def refresh(self) -> bool:
        """Redraw the last buffer if the surface size changed. Returns True if redrawn."""
        if self._buffer is None:
            return False
        size = self.current_size()
        if size == self.size:
            return False
        logger.debug("Surface resized %s -> %s, redrawing", self.size, size)
        self._draw(size)
        return True

    def _draw(self, size: Tuple[int, int]):
        self.size = size
        self._show(compose_frame(self._buffer, self._params, size))
