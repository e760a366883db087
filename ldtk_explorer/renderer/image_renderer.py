"""
Level rendering to Pillow images

=============================================================================
WHAT THIS DOES
=============================================================================

A reference consumer of the resolved model. Each drawable layer of a level
is rendered to its own RGBA image the size of the level, so a game can
draw them with whatever framework it uses (or save them to disk):

    Project (resolved) → [TilesetCache] → [LevelRenderer] → RenderedLevel
                          (path → image)                    ├── background
                                                            └── layers[]  (bottom to top)

For every tile the renderer only needs what the model already computed:

    source pixels   tile.src              (x, y, w, h on the tileset image)
    mirroring       tile.flip             (bit 0 horizontal, bit 1 vertical)
    destination     tile.position + (layer.offset_x, layer.offset_y)

Layers without a bound tileset draw nothing. Entity layers are left to
the game.

=============================================================================
"""

import io
import logging
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Dict, List, Optional

from PIL import Image, UnidentifiedImageError

from ..errors import IOFailure
from ..loader import DiskFileSystem, FileSystem
from ..project import FLIP_X, FLIP_Y, Layer, Level, Project, Tile

logger = logging.getLogger(__name__)


class TilesetCache:
    """
    Loads tileset and background images once, keyed by relative path.

    Parameters:
    -----------
    filesystem : FileSystem, optional
        Where images are read from (default: DiskFileSystem())
    base_dir : str
        Directory relative image paths are resolved against; normally
        the directory of the .ldtk file
    """

    def __init__(self, filesystem: Optional[FileSystem] = None, base_dir: str = ""):
        self.filesystem = filesystem if filesystem is not None else DiskFileSystem()
        self.base_dir = base_dir
        self.images: Dict[str, Image.Image] = {}

    def full_path(self, rel_path: str) -> str:
        if not self.base_dir:
            return rel_path
        return str(PurePosixPath(self.base_dir) / rel_path)

    def get(self, rel_path: str) -> Image.Image:
        """
        RGBA image stored at `rel_path`.

        Raises:
        -------
        IOFailure : if the file is missing or is not a readable image
        """
        if rel_path not in self.images:
            path = self.full_path(rel_path)
            data = self.filesystem.read_bytes(path)
            try:
                image = Image.open(io.BytesIO(data)).convert("RGBA")
            except (UnidentifiedImageError, OSError) as e:
                raise IOFailure(path, f"not a readable image ({e})") from e
            logger.debug("Loaded image %s (%dx%d)", path, image.width, image.height)
            self.images[rel_path] = image
        return self.images[rel_path]


@dataclass
class RenderOptions:
    draw_background: bool = True        # Fill with bg color and draw the bg image
    draw_invisible: bool = False        # Also render layers hidden in the editor


@dataclass
class RenderedLayer:
    identifier: str
    image: Image.Image


@dataclass
class RenderedLevel:
    """Result of LevelRenderer.render(): images ready to be drawn in order."""
    level: Level
    background: Optional[Image.Image] = None
    layers: List[RenderedLayer] = field(default_factory=list)    # Bottom to top

    def composite(self) -> Image.Image:
        """Flatten background and layers into a single image."""
        size = (self.level.width, self.level.height)
        if self.background is not None:
            result = self.background.copy()
        else:
            result = Image.new("RGBA", size, (0, 0, 0, 0))
        for layer in self.layers:
            result.alpha_composite(layer.image)
        return result


class LevelRenderer:
    """
    Renders the levels of one project.

    Tileset images are cached across render() calls, so rendering every
    level of a project loads each tileset once.
    """

    def __init__(self, project: Project, filesystem: Optional[FileSystem] = None):
        self.project = project
        self.cache = TilesetCache(filesystem, project.directory)

    def render(self, level: Level, options: Optional[RenderOptions] = None) -> RenderedLevel:
        options = options or RenderOptions()
        result = RenderedLevel(level=level)

        if options.draw_background:
            result.background = self.render_background(level)

        for layer in level.layers:
            if not layer.visible and not options.draw_invisible:
                continue
            image = self.render_layer(level, layer)
            if image is not None:
                result.layers.append(RenderedLayer(layer.identifier, image))

        return result

    def render_background(self, level: Level) -> Image.Image:
        size = (level.width, level.height)
        background = Image.new("RGBA", size, tuple(level.bg_color))

        bg = level.bg_image
        if bg is not None and bg.path:
            source = self.cache.get(bg.path)
            x, y, w, h = (int(v) for v in bg.crop_rect)
            cropped = source.crop((x, y, x + w, y + h))
            scaled_size = (max(1, round(w * bg.scale_x)), max(1, round(h * bg.scale_y)))
            if scaled_size != cropped.size:
                cropped = cropped.resize(scaled_size, Image.Resampling.NEAREST)
            background.paste(cropped, bg.top_left, cropped)

        return background

    def render_layer(self, level: Level, layer: Layer) -> Optional[Image.Image]:
        """
        Draw one layer's tiles; None when the layer has nothing to draw.
        """
        tiles = layer.all_tiles()
        if not tiles or layer.tileset is None:
            return None

        tileset_image = self.cache.get(layer.tileset.rel_path)
        image = Image.new("RGBA", (level.width, level.height), (0, 0, 0, 0))

        for tile in tiles:
            tile_image = self._tile_image(tileset_image, tile)
            x = tile.position[0] + layer.offset_x
            y = tile.position[1] + layer.offset_y
            image.paste(tile_image, (x, y), tile_image)

        if layer.opacity < 1.0:
            alpha = image.getchannel("A").point(lambda a: int(a * layer.opacity))
            image.putalpha(alpha)

        return image

    @staticmethod
    def _tile_image(tileset_image: Image.Image, tile: Tile) -> Image.Image:
        x, y, w, h = tile.src
        tile_image = tileset_image.crop((x, y, x + w, y + h))
        if tile.flip & FLIP_X:
            tile_image = tile_image.transpose(Image.Transpose.FLIP_LEFT_RIGHT)
        if tile.flip & FLIP_Y:
            tile_image = tile_image.transpose(Image.Transpose.FLIP_TOP_BOTTOM)
        return tile_image
