"""
Second pass over a decoded Project: fill in every derived field

=============================================================================
WHY A SECOND PASS?
=============================================================================

The structural decode (project.py) maps each JSON object onto its own
dataclass and nothing else. Several fields need information from
elsewhere in the document:

    STEP                      NEEDS
    ------------------------  --------------------------------------------
    colors                    the project default for unset level colors
    tileset metadata          defs.tilesets[*].customData / enumTags, which
                              are keyed by tile ID rather than nested
    background images         levels[i].__bgPos from the raw document
    IntGrid cells             the layer's cell width and grid size
    tileset binding           the project's tileset list (by UID)
    source rectangles         the bound tileset's grid geometry
    IntGrid names             defs.layers[*].intGridValues

The raw document (the dict returned by json.loads) is kept alongside the
typed tree for the steps that read it directly.

Each step can be run on its own and running one twice gives the same
result. The only ordering constraint is that tileset binding must happen
before source rectangles are computed; resolve() runs them in that order.

=============================================================================
FAILURES
=============================================================================

- A malformed color is logged and replaced (never aborts the load).
- A layer tileset UID matching no tileset is logged and left unbound.
- A level declaring a background image without a __bgPos block raises
  UnresolvedReference (a MalformedDocument).

=============================================================================
"""

import logging
from typing import Any, Dict, List

from .colors import TRANSPARENT, parse_hex_color_or_default
from .errors import UnresolvedReference
from .fields import (
    child_path, get_float_list, get_int, get_int_list, get_list,
    get_object, get_str, require_object,
)
from .project import BGImage, Integer, Layer, Project, Rect, Tile, Tileset

logger = logging.getLogger(__name__)


def resolve(project: Project, raw: Dict[str, Any]) -> Project:
    """Run every resolution step over `project`, in place. Returns it."""
    resolve_colors(project)
    attach_tileset_metadata(project, raw)
    attach_background_images(project, raw)
    materialize_int_grids(project)
    bind_tilesets(project)
    compute_source_rects(project)
    collect_int_grid_names(project, raw)
    return project


# =============================================================================
# COLORS
# =============================================================================

def resolve_colors(project: Project):
    """Parse background colors; unset level colors use the project's."""
    project.bg_color = parse_hex_color_or_default(project.bg_color_string)
    for level in project.levels:
        if level.bg_color_string:
            level.bg_color = parse_hex_color_or_default(level.bg_color_string, TRANSPARENT)
        else:
            level.bg_color = project.bg_color
    logger.debug("Resolved colors for %d levels", len(project.levels))


# =============================================================================
# TILESET METADATA
# =============================================================================

def _raw_tileset_defs(raw: Dict[str, Any]) -> List[Any]:
    defs = get_object(raw, "defs", "") or {}
    return get_list(defs, "tilesets", "defs")


def attach_tileset_metadata(project: Project, raw: Dict[str, Any]):
    """
    Copy per-tile custom data and enum tags onto each Tileset.

    Raw layout of one tileset definition:

        {
            "uid": 3,
            "customData": [{"tileId": 12, "data": "spikes"}, ...],
            "enumTags":   [{"enumValueId": "Solid", "tileIds": [0, 1, 5]}, ...]
        }
    """
    by_uid = {tileset.uid: tileset for tileset in project.tilesets}

    for i, tileset_def in enumerate(_raw_tileset_defs(raw)):
        path = child_path("defs.tilesets", i)
        tileset_def = require_object(tileset_def, path)
        tileset = by_uid.get(get_int(tileset_def, "uid", path))
        if tileset is None:
            continue

        custom_data = {}
        custom_path = child_path(path, "customData")
        for j, entry in enumerate(get_list(tileset_def, "customData", path)):
            entry_path = child_path(custom_path, j)
            entry = require_object(entry, entry_path)
            custom_data[get_int(entry, "tileId", entry_path)] = get_str(entry, "data", entry_path)

        enums: Dict[int, set] = {}
        tags_path = child_path(path, "enumTags")
        for j, tag in enumerate(get_list(tileset_def, "enumTags", path)):
            tag_path = child_path(tags_path, j)
            tag = require_object(tag, tag_path)
            name = get_str(tag, "enumValueId", tag_path)
            for tile_id in get_int_list(tag, "tileIds", tag_path):
                enums.setdefault(tile_id, set()).add(name)

        tileset.custom_data = custom_data
        tileset.enums = {tile_id: frozenset(names) for tile_id, names in enums.items()}

    logger.debug("Attached metadata to %d tilesets", len(project.tilesets))


# =============================================================================
# BACKGROUND IMAGES
# =============================================================================

def attach_background_images(project: Project, raw: Dict[str, Any]):
    """
    Build a BGImage for every level that declares `bgRelPath`.

    Raises:
    -------
    UnresolvedReference : if such a level has no usable `__bgPos` block
    """
    raw_levels = get_list(raw, "levels", "")
    count = 0

    for index, level in enumerate(project.levels):
        if not level.bg_rel_path:
            level.bg_image = None
            continue

        path = child_path("levels", index)
        level_data = require_object(raw_levels[index], path)
        pos_path = child_path(path, "__bgPos")
        bg_pos = get_object(level_data, "__bgPos", path)
        if bg_pos is None:
            raise UnresolvedReference(
                f"background image '{level.bg_rel_path}' has no position block",
                pos_path,
            )

        scale = get_float_list(bg_pos, "scale", pos_path)
        crop_rect = get_float_list(bg_pos, "cropRect", pos_path)
        if len(scale) < 2 or len(crop_rect) < 4:
            raise UnresolvedReference(
                "expected 2 scale values and 4 crop rectangle values", pos_path
            )
        top_left = get_int_list(bg_pos, "topLeftPx", pos_path) + [0, 0]

        level.bg_image = BGImage(
            path=level.bg_rel_path,
            scale_x=scale[0],
            scale_y=scale[1],
            crop_rect=(crop_rect[0], crop_rect[1], crop_rect[2], crop_rect[3]),
            top_left=(top_left[0], top_left[1]),
        )
        count += 1

    logger.debug("Attached %d background images", count)


# =============================================================================
# INTGRID CELLS
# =============================================================================

def materialize_layer_int_grid(layer: Layer) -> List[Integer]:
    """
    Turn the layer's flat cell array into Integer cells.

    Cell i sits at column i % cell_width, row i // cell_width. Empty
    (zero) cells are skipped, so gaps between consecutive ids are normal.
    """
    cells = []
    width = layer.cell_width
    if width <= 0:
        return cells

    for index, value in enumerate(layer.int_grid_csv):
        if value == 0:
            continue
        cx, cy = index % width, index // width
        cells.append(Integer(value=value, id=index,
                             position=(cx * layer.grid_size, cy * layer.grid_size)))
    return cells


def materialize_int_grids(project: Project):
    count = 0
    for level in project.levels:
        for layer in level.layers:
            layer.int_grid = materialize_layer_int_grid(layer)
            count += len(layer.int_grid)
    logger.debug("Materialized %d IntGrid cells", count)


# =============================================================================
# TILESET BINDING AND SOURCE RECTANGLES
# =============================================================================

def bind_tilesets(project: Project):
    """Point each layer and entity icon at its Tileset, by UID."""
    by_uid = {}
    for tileset in project.tilesets:
        # First definition wins, like a linear scan would
        by_uid.setdefault(tileset.uid, tileset)

    bound = 0
    for level in project.levels:
        for layer in level.layers:
            if layer.tileset_uid is None:
                layer.tileset = None
            else:
                layer.tileset = by_uid.get(layer.tileset_uid)
                if layer.tileset is not None:
                    bound += 1
                else:
                    logger.warning(
                        "Layer '%s' in level '%s' refers to unknown tileset %d",
                        layer.identifier, level.identifier, layer.tileset_uid,
                    )

            for entity in layer.entities:
                if entity.tile is not None:
                    entity.tile.tileset = by_uid.get(entity.tile.tileset_uid)

    logger.debug("Bound %d layers to their tilesets", bound)


def _tile_source(tileset: Tileset, layer: Layer, tile: Tile) -> Rect:
    if tileset is not None and tileset.grid_size > 0 and tileset.tiles_per_row > 0:
        return tileset.tile_source_rect(tile.id)
    # No usable tileset: keep the corner written in the document
    return Rect(tile.src.x, tile.src.y, layer.grid_size, layer.grid_size)


def compute_source_rects(project: Project):
    """Fill Tile.src for every tile, and entity icons given by tile ID."""
    count = 0
    for level in project.levels:
        for layer in level.layers:
            tileset = layer.tileset
            if tileset is not None and (tileset.grid_size <= 0 or tileset.tiles_per_row <= 0):
                logger.warning("Tileset '%s' has no usable tile grid", tileset.identifier)

            for tile in layer.tiles:
                tile.src = _tile_source(tileset, layer, tile)
            for tile in layer.auto_tiles:
                tile.src = _tile_source(tileset, layer, tile)
            count += len(layer.tiles) + len(layer.auto_tiles)

            for entity in layer.entities:
                icon = entity.tile
                if icon is None or icon.tile_id is None or icon.tileset is None:
                    continue
                if icon.tileset.grid_size <= 0 or icon.tileset.tiles_per_row <= 0:
                    continue
                icon.x, icon.y, icon.w, icon.h = icon.tileset.tile_source_rect(icon.tile_id)

    logger.debug("Computed source rectangles for %d tiles", count)


# =============================================================================
# INTGRID NAMES
# =============================================================================

def collect_int_grid_names(project: Project, raw: Dict[str, Any]):
    """
    Name table for IntGrid values, indexed by the value itself.

    names[v] is the identifier of IntGrid value v, so it can be compared
    with Integer.value directly. Index 0 (empty cell) and values with no
    identifier hold "". When several IntGrid layers define the same value,
    the first definition names it.
    """
    names = [""]
    defs = get_object(raw, "defs", "") or {}
    for i, layer_def in enumerate(get_list(defs, "layers", "defs")):
        path = child_path("defs.layers", i)
        layer_def = require_object(layer_def, path)
        if get_str(layer_def, "type", path) != "IntGrid":
            continue
        values_path = child_path(path, "intGridValues")
        for j, value in enumerate(get_list(layer_def, "intGridValues", path)):
            value_path = child_path(values_path, j)
            value = require_object(value, value_path)
            number = get_int(value, "value", value_path, default=j + 1)
            if number <= 0:
                continue
            if number >= len(names):
                names.extend([""] * (number + 1 - len(names)))
            if not names[number]:
                names[number] = get_str(value, "identifier", value_path)
    project.int_grid_names = names if len(names) > 1 else []
    logger.debug("Collected %d IntGrid names", sum(1 for name in names if name))
