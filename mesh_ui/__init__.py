"""
Mesh Overlay - UI Package
customtkinter preview window and theme constants.
"""

from mesh_ui.theme import COLORS, PREVIEW_SIZE
from mesh_ui.preview import MeshPreviewWindow

__all__ = ["COLORS", "PREVIEW_SIZE", "MeshPreviewWindow"]
