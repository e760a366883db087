"""Builders for small LDtk documents, as plain dicts."""

import json

import pytest


def make_tileset(uid=1, identifier="Tiles", rel_path="tiles.png", px_wid=64, px_hei=64,
                 grid_size=16, spacing=0, padding=0, **extra):
    data = {
        "uid": uid,
        "identifier": identifier,
        "relPath": rel_path,
        "pxWid": px_wid,
        "pxHei": px_hei,
        "tileGridSize": grid_size,
        "spacing": spacing,
        "padding": padding,
        "customData": [],
        "enumTags": [],
    }
    data.update(extra)
    return data


def make_layer(identifier="Ground", layer_type="Tiles", grid_size=16, c_wid=4, c_hei=4,
               tileset_uid=1, **extra):
    data = {
        "__identifier": identifier,
        "__type": layer_type,
        "__gridSize": grid_size,
        "__cWid": c_wid,
        "__cHei": c_hei,
        "__pxTotalOffsetX": 0,
        "__pxTotalOffsetY": 0,
        "__tilesetDefUid": tileset_uid,
        "__tilesetRelPath": "tiles.png" if tileset_uid is not None else None,
        "gridTiles": [],
        "autoLayerTiles": [],
        "entityInstances": [],
        "intGridCsv": [],
        "visible": True,
    }
    data.update(extra)
    return data


def make_tile(x, y, tile_id, flip=0):
    return {"px": [x, y], "src": [0, 0], "f": flip, "t": tile_id, "d": [0]}


def make_level(identifier="Level_0", world_x=0, world_y=0, px_wid=64, px_hei=64,
               layers=None, **extra):
    data = {
        "identifier": identifier,
        "iid": f"iid-{identifier}",
        "uid": 0,
        "worldX": world_x,
        "worldY": world_y,
        "pxWid": px_wid,
        "pxHei": px_hei,
        "__bgColor": "#223344",
        "bgRelPath": None,
        "layerInstances": layers if layers is not None else [],
        "fieldInstances": [],
    }
    data.update(extra)
    return data


def make_project(levels=None, tilesets=None, layer_defs=None, **extra):
    data = {
        "jsonVersion": "1.5.3",
        "worldLayout": "Free",
        "worldGridWidth": 256,
        "worldGridHeight": 256,
        "defaultLevelBgColor": "#40465B",
        "levels": levels if levels is not None else [],
        "defs": {
            "layers": layer_defs if layer_defs is not None else [],
            "tilesets": tilesets if tilesets is not None else [],
        },
    }
    data.update(extra)
    return data


def to_bytes(document) -> bytes:
    return json.dumps(document).encode("utf-8")


@pytest.fixture
def minimal_document():
    """One 64x64 level, one Tiles layer with tile 0 at (16, 16)."""
    layer = make_layer(gridTiles=[make_tile(16, 16, 0)])
    return make_project(levels=[make_level(layers=[layer])], tilesets=[make_tileset()])


@pytest.fixture
def world_document():
    """Two side-by-side levels with every layer type, properties and tags."""
    level_0_layers = [
        # Top-most first, as LDtk writes them
        make_layer("Entities", "Entities", tileset_uid=None, entityInstances=[
            {
                "__identifier": "Player",
                "iid": "player-1",
                "px": [24, 40],
                "width": 16,
                "height": 24,
                "__pivot": [0.5, 1],
                "__tile": {"tilesetUid": 1, "x": 32, "y": 0, "w": 16, "h": 16},
                "fieldInstances": [
                    {"__identifier": "hp", "__type": "Int", "__value": 10},
                    {"__identifier": "tint", "__type": "Color", "__value": "#FF0000"},
                ],
            },
            {
                "__identifier": "Coin",
                "iid": "coin-1",
                "px": [48, 8],
                "width": 8,
                "height": 8,
                "__pivot": [0, 0],
                "__tile": None,
                "fieldInstances": [],
            },
            {
                "__identifier": "Coin",
                "iid": "coin-2",
                "px": [56, 8],
                "width": 8,
                "height": 8,
                "__pivot": [0, 0],
                "fieldInstances": [],
            },
        ]),
        make_layer("Walls", "Tiles", gridTiles=[
            make_tile(0, 0, 5, flip=1),
            make_tile(16, 0, 6, flip=3),
        ]),
        make_layer("Collisions", "IntGrid",
                   intGridCsv=[0, 1, 0, 0,
                               0, 0, 2, 0,
                               0, 0, 0, 0,
                               1, 0, 0, 1],
                   autoLayerTiles=[make_tile(16, 0, 1)]),
    ]
    levels = [
        make_level("Level_0", layers=level_0_layers, fieldInstances=[
            {"__identifier": "music", "__type": "String", "__value": "forest.ogg"},
            {"__identifier": "spawn", "__type": "Point", "__value": {"cx": 2, "cy": 3}},
            {"__identifier": "secret", "__type": "Bool", "__value": None},
        ]),
        make_level("Level_1", world_x=64, layers=[], __bgColor=""),
    ]
    tilesets = [
        make_tileset(customData=[{"tileId": 5, "data": "door"}],
                     enumTags=[{"enumValueId": "Solid", "tileIds": [5, 6]},
                               {"enumValueId": "Wood", "tileIds": [6]}]),
        make_tileset(uid=2, identifier="Props", rel_path="props.png", px_wid=40,
                     grid_size=8, spacing=2, padding=1),
    ]
    layer_defs = [
        {"identifier": "Collisions", "type": "IntGrid", "intGridValues": [
            {"value": 1, "identifier": "wall", "color": "#000000"},
            {"value": 2, "identifier": "water", "color": "#0000FF"},
        ]},
        {"identifier": "Entities", "type": "Entities", "intGridValues": []},
    ]
    return make_project(levels=levels, tilesets=tilesets, layer_defs=layer_defs,
                        worldLayout="LinearHorizontal")
