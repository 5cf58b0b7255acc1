"""
Mesh Overlay - Core Package
Seeded control-point generation, animation models and the IDW rasterizer,
plus the host-side surface and export helpers.
"""

from mesh_core.seeded_random import create_seeded_random, seeded_float, seeded_int
from mesh_core.palettes import MESH_PALETTE_DEFINITIONS, MESH_PALETTES, generate_palette_colors
from mesh_core.control_points import ControlPoint, generate_control_points, spread_distance
from mesh_core.animation import ANIMATION_MODES, animate_positions, position_at
from mesh_core.rasterizer import RESOLUTION, MeshRasterizer, blur_to_power
from mesh_core.frame_driver import FrameLoop, ManualFrameScheduler, TkFrameScheduler
from mesh_core.params import MeshParams
from mesh_core.mesh import MeshOverlay
from mesh_core.surface import SurfacePresenter, compose_frame

__all__ = [
    "create_seeded_random", "seeded_float", "seeded_int",
    "MESH_PALETTE_DEFINITIONS", "MESH_PALETTES", "generate_palette_colors",
    "ControlPoint", "generate_control_points", "spread_distance",
    "ANIMATION_MODES", "animate_positions", "position_at",
    "RESOLUTION", "MeshRasterizer", "blur_to_power",
    "FrameLoop", "ManualFrameScheduler", "TkFrameScheduler",
    "MeshParams", "MeshOverlay", "SurfacePresenter", "compose_frame",
]
