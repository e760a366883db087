import numpy as np

from conftest import to_bytes
from ldtk_explorer.loader import load_bytes
from ldtk_explorer.map import IntGridMap


def collisions(world_document):
    project = load_bytes(to_bytes(world_document))
    return project.levels[0].layer_by_identifier("Collisions")


def test_from_layer(world_document):
    grid = IntGridMap.from_layer(collisions(world_document))
    assert grid.shape == (4, 4)
    assert grid.values.dtype == np.int32
    np.testing.assert_array_equal(grid.values, [
        [0, 1, 0, 0],
        [0, 0, 2, 0],
        [0, 0, 0, 0],
        [1, 0, 0, 1],
    ])


def test_value_lookups(world_document):
    grid = IntGridMap.from_layer(collisions(world_document))
    assert grid.value_at(2, 1) == 2
    assert grid.value_at_pixel(40, 20) == 2
    assert grid.is_set(0, 3)
    assert not grid.is_set(0, 0)
    # Outside the layer reads as empty
    assert grid.value_at(-1, 0) == 0
    assert grid.value_at(4, 4) == 0


def test_mask_and_count(world_document):
    grid = IntGridMap.from_layer(collisions(world_document))
    assert grid.count(1) == 3
    assert grid.count(2) == 1
    mask = grid.mask(1, 2)
    assert mask.dtype == bool
    assert int(mask.sum()) == 4
    assert mask[1, 2]


def test_matches_integer_at(world_document):
    layer = collisions(world_document)
    grid = IntGridMap.from_layer(layer)
    for cy in range(layer.cell_height):
        for cx in range(layer.cell_width):
            cell = layer.integer_at(*layer.from_grid_position(cx, cy))
            assert grid.value_at(cx, cy) == (cell.value if cell else 0)
