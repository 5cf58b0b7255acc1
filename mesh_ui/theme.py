"""
Mesh Overlay - Theme Constants
Shared color palette and preview sizing used by the preview window.
"""

# ─── Theme Colors ────────────────────────────────────────────────────────────────
COLORS = {
    "bg_darkest":       "#060918",
    "bg_dark":          "#0a0e27",
    "accent_blue":      "#0066ff",
    "accent_purple":    "#7b2fff",
    "text_primary":     "#e8eaff",
    "text_muted":       "#4a5280",
    "preview_bg":       "#050810",
}

# Default preview surface (16:9, like an OBS canvas)
PREVIEW_SIZE = (960, 540)

# Smallest size the preview renders at before the window is laid out
MIN_PREVIEW_SIZE = (160, 90)
