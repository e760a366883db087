"""
Typed model of an LDtk project, its structural decoder and query methods

=============================================================================
WHAT IS LDTK?
=============================================================================

LDtk (Level Designer Toolkit) is a 2D level editor that saves a whole
project - every level, layer, tileset definition and entity - as one JSON
document (.ldtk). The pieces this module models:

    Project
    ├── defs.tilesets  -> Tileset   (one image sliced into a tile grid)
    └── levels         -> Level     (a rectangle placed in the world)
        ├── fieldInstances  -> Property
        └── layerInstances  -> Layer
            ├── gridTiles        -> Tile      (hand painted)
            ├── autoLayerTiles   -> Tile      (placed by auto-tiling rules)
            ├── intGridCsv       -> Integer   (per-cell gameplay values)
            └── entityInstances  -> Entity
                └── fieldInstances -> Property

=============================================================================
TWO PASSES
=============================================================================

Each class has a `from_json()` classmethod that maps one JSON object onto
the dataclass (the structural decode). Some fields cannot be filled at
that point because they depend on other parts of the document:

- Layer.tileset        needs the project's tileset list
- Tile.src             needs the bound tileset's grid geometry
- Integer.position     needs the layer's cell width and grid size
- Level.bg_color       falls back to the project default color

Those are computed afterwards by resolver.resolve(). Use loader.load_file()
or loader.load_bytes() to get a fully resolved Project.

=============================================================================
DRAW ORDER
=============================================================================

LDtk lists layers top-most first. Level.layers is reversed during decode,
so the first layer is the bottom one and layers can be drawn in order.

=============================================================================
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath
from typing import Dict, FrozenSet, List, NamedTuple, Optional, Tuple

from .colors import Color, TRANSPARENT
from .fields import (
    child_path, get_bool, get_float, get_float_list, get_int,
    get_int_list, get_list, get_object, get_optional_int, get_str,
    require_object,
)
from .properties import Property, property_by_identifier


# =============================================================================
# CONSTANTS
# =============================================================================

class LayerType(str, Enum):
    """Layer `__type` values. Members compare equal to the raw strings."""
    INT_GRID = "IntGrid"
    AUTO_LAYER = "AutoLayer"
    TILES = "Tiles"
    ENTITIES = "Entities"


class WorldLayout(str, Enum):
    """Project `worldLayout` values."""
    HORIZONTAL = "LinearHorizontal"
    VERTICAL = "LinearVertical"
    FREE = "Free"
    GRID_VANIA = "GridVania"


LAYER_TYPE_INT_GRID = LayerType.INT_GRID
LAYER_TYPE_AUTO_LAYER = LayerType.AUTO_LAYER
LAYER_TYPE_TILES = LayerType.TILES
LAYER_TYPE_ENTITIES = LayerType.ENTITIES

WORLD_LAYOUT_HORIZONTAL = WorldLayout.HORIZONTAL
WORLD_LAYOUT_VERTICAL = WorldLayout.VERTICAL
WORLD_LAYOUT_FREE = WorldLayout.FREE
WORLD_LAYOUT_GRID_VANIA = WorldLayout.GRID_VANIA

# Tile flip bits
FLIP_X = 1
FLIP_Y = 2


def _enum_or_raw(enum_cls, value: str):
    # Newer editor versions may add values; keep them as plain strings
    try:
        return enum_cls(value)
    except ValueError:
        return value


def _pair(values, default=(0, 0)) -> tuple:
    if len(values) < 2:
        return default
    return values[0], values[1]


class Rect(NamedTuple):
    """Pixel rectangle on a tileset image."""
    x: int
    y: int
    w: int
    h: int


# =============================================================================
# TILESET
# =============================================================================

@dataclass
class Tileset:
    """
    Tileset definition - one image sliced into a grid of square tiles.

    ==========================================================================
    TILE IDS AND SOURCE RECTANGLES
    ==========================================================================

    Tiles are numbered left to right, top to bottom, starting at 0:

        padding
        +--+====+=+====+=+====+
        |  | 0  | | 1  | | 2  |
        +--+====+=+====+=+====+
        |  | 3  | | 4  | | 5  |
        +--+====+=+====+=+====+
                 ^ spacing

        tiles_per_row = (width + spacing) // (grid_size + spacing)
        col, row      = id % tiles_per_row, id // tiles_per_row
        x             = padding + col * (grid_size + spacing)
        y             = padding + row * (grid_size + spacing)

    ==========================================================================
    PER-TILE METADATA
    ==========================================================================

    custom_data : tile id -> free-form string typed in the editor
    enums       : tile id -> names of the enum values tagged on the tile

    Both are filled in by the resolver; untagged tiles are simply absent.

    ==========================================================================
    """
    uid: int                                          # Numeric ID (join key for layers)
    identifier: str = ""                              # Tileset name
    rel_path: str = ""                                # Image path, relative to the project
    width: int = 0                                    # Image width in pixels
    height: int = 0                                   # Image height in pixels
    grid_size: int = 0                                # Tile width/height in pixels
    spacing: int = 0                                  # Pixels between tiles
    padding: int = 0                                  # Pixels around the image edge
    custom_data: Dict[int, str] = field(default_factory=dict)
    enums: Dict[int, FrozenSet[str]] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data, path: str) -> 'Tileset':
        data = require_object(data, path)
        return cls(
            uid=get_int(data, "uid", path),
            identifier=get_str(data, "identifier", path),
            rel_path=get_str(data, "relPath", path),
            width=get_int(data, "pxWid", path),
            height=get_int(data, "pxHei", path),
            grid_size=get_int(data, "tileGridSize", path),
            spacing=get_int(data, "spacing", path),
            padding=get_int(data, "padding", path),
        )

    @property
    def tiles_per_row(self) -> int:
        step = self.grid_size + self.spacing
        if step <= 0:
            return 0
        return (self.width + self.spacing) // step

    def tile_source_rect(self, tile_id: int) -> Rect:
        """
        Source rectangle of `tile_id` on the tileset image.

        Raises:
        -------
        ValueError : if the tileset has no usable grid (grid size of 0,
                     or an image narrower than a single tile)
        """
        per_row = self.tiles_per_row
        if self.grid_size <= 0 or per_row <= 0:
            raise ValueError(
                f"Tileset '{self.identifier}' has no usable tile grid"
            )
        col, row = tile_id % per_row, tile_id // per_row
        step = self.grid_size + self.spacing
        return Rect(self.padding + col * step, self.padding + row * step,
                    self.grid_size, self.grid_size)

    def custom_data_for_tile(self, tile_id: int) -> str:
        return self.custom_data.get(tile_id, "")

    def enums_for_tile(self, tile_id: int) -> FrozenSet[str]:
        return self.enums.get(tile_id, frozenset())

    def tile_has_enum(self, tile_id: int, enum_value: str) -> bool:
        return enum_value in self.enums_for_tile(tile_id)


# =============================================================================
# TILES, INTGRID CELLS, ENTITIES
# =============================================================================

@dataclass
class Tile:
    """
    A graphical tile, manually painted or placed by auto-tiling rules.

    `position` is where the tile goes in the level; `src` is where its
    pixels come from on the tileset. Neither implies the other.
    `flip` bit 0 mirrors horizontally, bit 1 vertically.
    """
    position: Tuple[int, int] = (0, 0)               # Pixel position in the layer
    src: Rect = Rect(0, 0, 0, 0)                      # Source rectangle on the tileset
    flip: int = 0                                     # FLIP_X | FLIP_Y
    id: int = 0                                       # Tile ID in the tileset

    @classmethod
    def from_json(cls, data, path: str) -> 'Tile':
        data = require_object(data, path)
        # "src" is only the top-left corner; its size is settled by the resolver
        sx, sy = _pair(get_int_list(data, "src", path))
        return cls(
            position=_pair(get_int_list(data, "px", path)),
            src=Rect(sx, sy, 0, 0),
            flip=get_int(data, "f", path),
            id=get_int(data, "t", path),
        )

    def flip_x(self) -> bool:
        return self.flip & FLIP_X > 0

    def flip_y(self) -> bool:
        return self.flip & FLIP_Y > 0


@dataclass
class Integer:
    """
    One non-empty IntGrid cell.

    `id` is the flat index into the layer's cell array (row-major) and
    `position` its pixel position, both set by the resolver.
    """
    value: int                                        # Cell value (never 0)
    id: int = 0                                       # Flat cell index
    position: Tuple[int, int] = (0, 0)                # Pixel position in the layer


@dataclass
class TileRect:
    """Tileset rectangle used as an Entity's icon."""
    tileset_uid: int
    x: int = 0
    y: int = 0
    w: int = 0
    h: int = 0
    tile_id: Optional[int] = None                     # Only in older documents
    tileset: Optional[Tileset] = field(default=None, compare=False)

    @classmethod
    def from_json(cls, data, path: str) -> 'TileRect':
        data = require_object(data, path)
        rect = cls(
            tileset_uid=get_int(data, "tilesetUid", path),
            tile_id=get_optional_int(data, "tileId", path),
        )
        if "srcRect" in data:
            values = get_int_list(data, "srcRect", path) + [0, 0, 0, 0]
            rect.x, rect.y, rect.w, rect.h = values[:4]
        else:
            rect.x = get_int(data, "x", path)
            rect.y = get_int(data, "y", path)
            rect.w = get_int(data, "w", path)
            rect.h = get_int(data, "h", path)
        return rect

    @property
    def src(self) -> Rect:
        return Rect(self.x, self.y, self.w, self.h)


@dataclass
class Entity:
    """An Entity instance as placed in a level."""
    identifier: str                                   # Entity name
    iid: str = ""                                     # Unique instance ID
    position: Tuple[int, int] = (0, 0)                # Pixel position (x, y)
    width: int = 0                                    # Width in pixels
    height: int = 0                                   # Height in pixels
    pivot: Tuple[float, float] = (0.0, 0.0)           # 0.5, 0.5 = centered
    properties: List[Property] = field(default_factory=list)
    tile: Optional[TileRect] = None                   # Icon on a tileset, if any

    @classmethod
    def from_json(cls, data, path: str) -> 'Entity':
        data = require_object(data, path)
        props_path = child_path(path, "fieldInstances")
        tile_data = get_object(data, "__tile", path)
        return cls(
            identifier=get_str(data, "__identifier", path),
            iid=get_str(data, "iid", path),
            position=_pair(get_int_list(data, "px", path)),
            width=get_int(data, "width", path),
            height=get_int(data, "height", path),
            pivot=_pair(get_float_list(data, "__pivot", path), (0.0, 0.0)),
            properties=[Property.from_json(p, child_path(props_path, i))
                        for i, p in enumerate(get_list(data, "fieldInstances", path))],
            tile=(TileRect.from_json(tile_data, child_path(path, "__tile"))
                  if tile_data is not None else None),
        )

    def property_by_identifier(self, identifier: str) -> Optional[Property]:
        return property_by_identifier(self.properties, identifier)


# =============================================================================
# LAYER
# =============================================================================

def _decode_int_grid(data, path: str, cell_width: int, cell_height: int) -> List[int]:
    """Flat row-major cell values, from `intGridCsv` or the legacy `intGrid`."""
    if "intGridCsv" in data:
        return get_int_list(data, "intGridCsv", path)

    # Legacy format: only non-empty cells, as {"coordId": i, "v": value - 1}
    values = [0] * max(cell_width * cell_height, 0)
    legacy_path = child_path(path, "intGrid")
    for i, cell in enumerate(get_list(data, "intGrid", path)):
        cell_path = child_path(legacy_path, i)
        cell = require_object(cell, cell_path)
        index = get_int(cell, "coordId", cell_path)
        if index < 0:
            continue
        if index >= len(values):
            values.extend([0] * (index + 1 - len(values)))
        values[index] = get_int(cell, "v", cell_path) + 1
    return values


@dataclass
class Layer:
    """
    A layer instance inside a level.

    ==========================================================================
    LAYER TYPES
    ==========================================================================

    IntGrid   : int_grid holds the non-empty cells; auto_tiles holds any
                tiles produced by auto-tiling rules
    AutoLayer : auto_tiles only
    Tiles     : tiles only
    Entities  : entities only (no tileset needed)

    ==========================================================================
    COORDINATES
    ==========================================================================

    Tile, IntGrid and Entity positions are in pixels, relative to the
    layer. Grid lookups (tile_at, integer_at, ...) divide by grid_size,
    rounding down. The layer offset (offset_x, offset_y) is NOT applied;
    renderers add it when drawing.

    ==========================================================================
    """
    identifier: str                                   # Layer name
    type: str = LayerType.TILES                       # LayerType value
    grid_size: int = 0                                # Cell size in pixels
    offset_x: int = 0                                 # Total pixel offset
    offset_y: int = 0
    cell_width: int = 0                               # Width in cells
    cell_height: int = 0                              # Height in cells
    visible: bool = True                              # Visibility in the editor
    opacity: float = 1.0
    tileset_uid: Optional[int] = None                 # Declared tileset UID
    tileset_rel_path: str = ""                        # Declared tileset image path
    tileset: Optional[Tileset] = field(default=None, compare=False, repr=False)
    tiles: List[Tile] = field(default_factory=list)
    auto_tiles: List[Tile] = field(default_factory=list)
    int_grid: List[Integer] = field(default_factory=list)
    entities: List[Entity] = field(default_factory=list)
    int_grid_csv: List[int] = field(default_factory=list, repr=False)

    @classmethod
    def from_json(cls, data, path: str) -> 'Layer':
        data = require_object(data, path)
        layer = cls(
            identifier=get_str(data, "__identifier", path),
            type=_enum_or_raw(LayerType, get_str(data, "__type", path, LayerType.TILES.value)),
            grid_size=get_int(data, "__gridSize", path),
            offset_x=get_int(data, "__pxTotalOffsetX", path),
            offset_y=get_int(data, "__pxTotalOffsetY", path),
            cell_width=get_int(data, "__cWid", path),
            cell_height=get_int(data, "__cHei", path),
            visible=get_bool(data, "visible", path, True),
            opacity=get_float(data, "__opacity", path, 1.0),
            tileset_uid=get_optional_int(data, "__tilesetDefUid", path),
            tileset_rel_path=get_str(data, "__tilesetRelPath", path),
        )

        tiles_path = child_path(path, "gridTiles")
        layer.tiles = [Tile.from_json(t, child_path(tiles_path, i))
                       for i, t in enumerate(get_list(data, "gridTiles", path))]

        auto_path = child_path(path, "autoLayerTiles")
        layer.auto_tiles = [Tile.from_json(t, child_path(auto_path, i))
                            for i, t in enumerate(get_list(data, "autoLayerTiles", path))]

        entities_path = child_path(path, "entityInstances")
        layer.entities = [Entity.from_json(e, child_path(entities_path, i))
                          for i, e in enumerate(get_list(data, "entityInstances", path))]

        layer.int_grid_csv = _decode_int_grid(data, path, layer.cell_width, layer.cell_height)
        return layer

    @property
    def tileset_path(self) -> str:
        """Image path of the bound tileset, or the declared one when unbound."""
        if self.tileset is not None:
            return self.tileset.rel_path
        return self.tileset_rel_path

    def all_tiles(self) -> List[Tile]:
        """Manually placed tiles followed by auto tiles."""
        return self.tiles + self.auto_tiles

    # -------------------------------------------------------------------------
    # COORDINATE CONVERSION
    # -------------------------------------------------------------------------

    def to_grid_position(self, x: int, y: int) -> Tuple[int, int]:
        """
        Pixel position -> cell position, rounding down.

        With 16px cells, to_grid_position(32, 20) == (2, 1).
        """
        if self.grid_size <= 0:
            raise ValueError(f"Layer '{self.identifier}' has no grid")
        return x // self.grid_size, y // self.grid_size

    def from_grid_position(self, x: int, y: int) -> Tuple[int, int]:
        """Cell position -> pixel position of the cell's top-left corner."""
        return x * self.grid_size, y * self.grid_size

    # -------------------------------------------------------------------------
    # LOOKUPS
    # -------------------------------------------------------------------------

    def _first_in_cell(self, items, x: int, y: int):
        if self.grid_size <= 0:
            return None
        cell = self.to_grid_position(x, y)
        for item in items:
            if self.to_grid_position(*item.position) == cell:
                return item
        return None

    def tile_at(self, x: int, y: int) -> Optional[Tile]:
        """Manually placed Tile in the cell containing pixel (x, y)."""
        return self._first_in_cell(self.tiles, x, y)

    def auto_tile_at(self, x: int, y: int) -> Optional[Tile]:
        """Auto tile in the cell containing pixel (x, y)."""
        return self._first_in_cell(self.auto_tiles, x, y)

    def integer_at(self, x: int, y: int) -> Optional[Integer]:
        """IntGrid cell containing pixel (x, y); None for empty cells."""
        return self._first_in_cell(self.int_grid, x, y)

    def entity_at(self, x: int, y: int) -> Optional[Entity]:
        """First Entity whose position lies in the cell containing (x, y)."""
        return self._first_in_cell(self.entities, x, y)

    def entity_by_identifier(self, identifier: str) -> Optional[Entity]:
        for entity in self.entities:
            if entity.identifier == identifier:
                return entity
        return None

    def entities_by_identifier(self, identifier: str) -> List[Entity]:
        return [e for e in self.entities if e.identifier == identifier]


# =============================================================================
# LEVEL
# =============================================================================

@dataclass
class BGImage:
    """Placement of a level's background image."""
    path: str                                         # Image path, relative to the project
    scale_x: float = 1.0
    scale_y: float = 1.0
    crop_rect: Tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)  # x, y, w, h
    top_left: Tuple[int, int] = (0, 0)                # Where the cropped image is drawn


@dataclass
class Level:
    """
    A level: a rectangle of the world holding layers.

    `bg_color` is this level's background color, or the project default
    when the level leaves it unset.
    """
    identifier: str                                   # Level name ("Level_0")
    iid: str = ""
    uid: int = 0
    world_x: int = 0                                  # Position in the world
    world_y: int = 0
    width: int = 0                                    # Size in pixels
    height: int = 0
    bg_color_string: str = ""
    bg_color: Color = TRANSPARENT
    bg_rel_path: str = ""
    bg_image: Optional[BGImage] = None
    layers: List[Layer] = field(default_factory=list)  # Bottom to top
    properties: List[Property] = field(default_factory=list)

    @classmethod
    def from_json(cls, data, path: str) -> 'Level':
        data = require_object(data, path)
        level = cls(
            identifier=get_str(data, "identifier", path),
            iid=get_str(data, "iid", path),
            uid=get_int(data, "uid", path),
            world_x=get_int(data, "worldX", path),
            world_y=get_int(data, "worldY", path),
            width=get_int(data, "pxWid", path),
            height=get_int(data, "pxHei", path),
            bg_color_string=get_str(data, "__bgColor", path),
            bg_rel_path=get_str(data, "bgRelPath", path),
        )

        # null when the level is stored in a separate file
        layers_path = child_path(path, "layerInstances")
        layers = [Layer.from_json(layer_data, child_path(layers_path, i))
                  for i, layer_data in enumerate(get_list(data, "layerInstances", path))]
        layers.reverse()
        level.layers = layers

        props_path = child_path(path, "fieldInstances")
        level.properties = [Property.from_json(p, child_path(props_path, i))
                            for i, p in enumerate(get_list(data, "fieldInstances", path))]
        return level

    def contains(self, x: int, y: int) -> bool:
        """Whether world point (x, y) lies inside the level, edges included."""
        return (self.world_x <= x <= self.world_x + self.width and
                self.world_y <= y <= self.world_y + self.height)

    def layer_by_identifier(self, identifier: str) -> Optional[Layer]:
        for layer in self.layers:
            if layer.identifier == identifier:
                return layer
        return None

    def property_by_identifier(self, identifier: str) -> Optional[Property]:
        return property_by_identifier(self.properties, identifier)


# =============================================================================
# PROJECT (Main Entry Point)
# =============================================================================

@dataclass
class Project:
    """
    A complete LDtk project - the root of the model.

    ==========================================================================
    USAGE
    ==========================================================================

        project = load_file("world.ldtk")

        level = project.level_by_identifier("Level_0")
        for layer in level.layers:              # bottom to top
            for tile in layer.all_tiles():
                draw(layer.tileset_path, tile.src, tile.position, tile.flip)

        walls = project.int_grid_constant_by_name("wall")

    ==========================================================================
    INTGRID NAMES
    ==========================================================================

    int_grid_names is indexed by IntGrid value: int_grid_names[v] names the
    cells whose Integer.value is v. Index 0 stands for empty cells and holds
    "", as do values defined without an identifier. So

        cell.value == project.int_grid_constant_by_name("wall")

    selects exactly the "wall" cells.

    ==========================================================================
    """
    world_layout: str = WorldLayout.FREE
    world_grid_width: int = 0
    world_grid_height: int = 0
    bg_color_string: str = ""
    bg_color: Color = TRANSPARENT
    json_version: str = ""
    levels: List[Level] = field(default_factory=list)
    tilesets: List[Tileset] = field(default_factory=list)
    int_grid_names: List[str] = field(default_factory=list)
    path: Optional[str] = None                        # Where the project was loaded from

    @classmethod
    def from_json(cls, data, path: str = "") -> 'Project':
        data = require_object(data, path or "$")
        project = cls(
            world_layout=_enum_or_raw(WorldLayout, get_str(data, "worldLayout", path, WorldLayout.FREE.value)),
            world_grid_width=get_int(data, "worldGridWidth", path),
            world_grid_height=get_int(data, "worldGridHeight", path),
            bg_color_string=get_str(data, "defaultLevelBgColor", path),
            json_version=get_str(data, "jsonVersion", path),
        )

        levels_path = child_path(path, "levels")
        project.levels = [Level.from_json(level_data, child_path(levels_path, i))
                          for i, level_data in enumerate(get_list(data, "levels", path))]

        defs_path = child_path(path, "defs")
        defs = get_object(data, "defs", path) or {}
        tilesets_path = child_path(defs_path, "tilesets")
        project.tilesets = [Tileset.from_json(t, child_path(tilesets_path, i))
                            for i, t in enumerate(get_list(defs, "tilesets", defs_path))]
        return project

    @property
    def directory(self) -> str:
        """Directory that relative asset paths are resolved against."""
        if not self.path:
            return ""
        parent = str(PurePosixPath(self.path.replace("\\", "/")).parent)
        return "" if parent == "." else parent

    def level_by_identifier(self, identifier: str) -> Optional[Level]:
        for level in self.levels:
            if level.identifier == identifier:
                return level
        return None

    def level_at(self, x: int, y: int) -> Optional[Level]:
        """
        Level containing world point (x, y), or None.

        Bounds are inclusive. Should levels overlap, the first one in
        project order wins.
        """
        for level in self.levels:
            if level.contains(x, y):
                return level
        return None

    def tileset_by_identifier(self, identifier: str) -> Optional[Tileset]:
        for tileset in self.tilesets:
            if tileset.identifier == identifier:
                return tileset
        return None

    def tileset_by_uid(self, uid: int) -> Optional[Tileset]:
        for tileset in self.tilesets:
            if tileset.uid == uid:
                return tileset
        return None

    def int_grid_constant_by_name(self, name: str) -> int:
        """IntGrid value named `name`, or -1 if it is not defined."""
        for i, constant in enumerate(self.int_grid_names):
            if constant and constant == name:
                return i
        return -1
