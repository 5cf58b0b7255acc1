"""
Mesh Overlay — Live Preview Window
Hosts one MeshOverlay on the Tk event loop: every presented 64x64 buffer is
composited over the background and scaled to the preview area.
"""

import time
import logging

import customtkinter as ctk
from PIL import Image, ImageTk

from mesh_core.frame_driver import TkFrameScheduler
from mesh_core.mesh import MeshOverlay
from mesh_core.params import MeshParams, random_seed
from mesh_core.surface import SurfacePresenter
from mesh_ui.theme import COLORS, MIN_PREVIEW_SIZE, PREVIEW_SIZE

logger = logging.getLogger(__name__)


class MeshPreviewWindow(ctk.CTk):
    """Standalone window that plays the mesh in real time."""

    def __init__(self, params: MeshParams, fps: int = 60):
        super().__init__()

        # ─── Window Setup ────────────────────────────────────────────────
        self.title("Mesh Overlay — Preview")
        self.geometry(f"{PREVIEW_SIZE[0]}x{PREVIEW_SIZE[1] + 64}")
        self.minsize(480, 330)
        self.configure(fg_color=COLORS["bg_darkest"])
        ctk.set_appearance_mode("dark")

        # ─── State ───────────────────────────────────────────────────────
        self._preview_photo = None
        self._last_present = None
        self._fps_smoothed = 0.0

        self._build_ui()
        self._surface = SurfacePresenter(self._preview_area_size, self._show_frame, MIN_PREVIEW_SIZE)

        self.scheduler = TkFrameScheduler(self, fps=fps)
        self.overlay = MeshOverlay(params, on_present=self._present)
        self.overlay.start(self.scheduler)
        self._update_status()

        self.protocol("WM_DELETE_WINDOW", self._on_close)

    # ═════════════════════════════════════════════════════════════════════════
    # UI CONSTRUCTION
    # ═════════════════════════════════════════════════════════════════════════

    def _build_ui(self):
        hdr = ctk.CTkFrame(self, fg_color=COLORS["bg_dark"], corner_radius=0, height=48)
        hdr.pack(fill="x")
        hdr.pack_propagate(False)

        self._status_label = ctk.CTkLabel(
            hdr, text="",
            font=ctk.CTkFont(size=13, weight="bold"),
            text_color=COLORS["text_primary"]
        )
        self._status_label.pack(side="left", padx=16)

        ctk.CTkButton(
            hdr, text="🎲 Randomize Seed", width=140,
            fg_color=COLORS["accent_blue"], hover_color=COLORS["accent_purple"],
            command=self._randomize_seed
        ).pack(side="right", padx=16)

        self._fps_label = ctk.CTkLabel(
            hdr, text="",
            font=ctk.CTkFont(size=10), text_color=COLORS["text_muted"]
        )
        self._fps_label.pack(side="right")

        self._preview_label = ctk.CTkLabel(self, text="", fg_color=COLORS["preview_bg"])
        self._preview_label.pack(fill="both", expand=True)
        self._preview_label.bind("<Configure>", self._on_preview_resize)

    def _update_status(self):
        p = self.overlay.params
        self._status_label.configure(
            text=f"seed {p.seed}  •  {p.points} points  •  {p.palette}  •  {p.animation}"
        )

    # ═════════════════════════════════════════════════════════════════════════
    # FRAME PRESENTATION
    # ═════════════════════════════════════════════════════════════════════════

    def _preview_area_size(self):
        return self._preview_label.winfo_width(), self._preview_label.winfo_height()

    def _show_frame(self, frame):
        photo = ImageTk.PhotoImage(Image.fromarray(frame))
        self._preview_photo = photo  # Keep reference
        self._preview_label.configure(image=photo, text="")

    def _on_preview_resize(self, event=None):
        # Static meshes never re-render, so redraw the last frame at the new size
        self._surface.refresh()

    def _present(self, buffer):
        self._surface.present(buffer, self.overlay.params)

        now = time.perf_counter()
        if self._last_present is not None:
            dt = now - self._last_present
            if dt > 0:
                self._fps_smoothed = self._fps_smoothed * 0.9 + (1.0 / dt) * 0.1
                self._fps_label.configure(text=f"{self._fps_smoothed:.0f} fps  ")
        self._last_present = now

    def _randomize_seed(self):
        params = self.overlay.params.replace(seed=random_seed())
        logger.info("Seed randomized to %d", params.seed)
        self.overlay.update_params(params)
        self._update_status()

    def _on_close(self):
        """Stop the frame loop before the widget goes away."""
        self.overlay.stop()
        self.destroy()
