# ============================================
# ldtk_explorer/renderer/__init__.py
# ============================================
"""Pillow rendering of resolved levels"""

from .image_renderer import (
    LevelRenderer, RenderedLayer, RenderedLevel, RenderOptions, TilesetCache,
)

__all__ = ["LevelRenderer", "RenderedLayer", "RenderedLevel", "RenderOptions", "TilesetCache"]
