"""
LDtk Project Explorer - load LDtk level-editor projects into a typed model

Requisitos:
    pip install numpy pillow
"""

from .colors import Color, TRANSPARENT, parse_hex_color
from .errors import (
    LDtkError, IOFailure, MalformedDocument, UnresolvedReference, TypeMismatch,
)
from .loader import DiskFileSystem, FileSystem, MemoryFileSystem, load_bytes, load_file
from .project import (
    BGImage, Entity, Integer, Layer, LayerType, Level, Project, Rect,
    Tile, TileRect, Tileset, WorldLayout, FLIP_X, FLIP_Y,
    LAYER_TYPE_INT_GRID, LAYER_TYPE_AUTO_LAYER, LAYER_TYPE_TILES, LAYER_TYPE_ENTITIES,
    WORLD_LAYOUT_HORIZONTAL, WORLD_LAYOUT_VERTICAL, WORLD_LAYOUT_FREE,
    WORLD_LAYOUT_GRID_VANIA,
)
from .properties import Property, PropertyKind

__version__ = "1.0.0"
__all__ = [
    "load_file",
    "load_bytes",
    "FileSystem",
    "DiskFileSystem",
    "MemoryFileSystem",
    "Project",
    "Level",
    "Layer",
    "LayerType",
    "WorldLayout",
    "Tile",
    "TileRect",
    "Integer",
    "Entity",
    "Property",
    "PropertyKind",
    "Tileset",
    "BGImage",
    "Rect",
    "Color",
    "TRANSPARENT",
    "parse_hex_color",
    "FLIP_X",
    "FLIP_Y",
    "LAYER_TYPE_INT_GRID",
    "LAYER_TYPE_AUTO_LAYER",
    "LAYER_TYPE_TILES",
    "LAYER_TYPE_ENTITIES",
    "WORLD_LAYOUT_HORIZONTAL",
    "WORLD_LAYOUT_VERTICAL",
    "WORLD_LAYOUT_FREE",
    "WORLD_LAYOUT_GRID_VANIA",
    "LDtkError",
    "IOFailure",
    "MalformedDocument",
    "UnresolvedReference",
    "TypeMismatch",
]
