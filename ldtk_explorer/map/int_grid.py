"""
Dense IntGrid view using a numpy array

=============================================================================
WHY A DENSE VIEW?
=============================================================================

Layer.int_grid only lists non-empty cells, and Layer.integer_at() scans
that list on every call. That is fine for occasional lookups, but game
logic (collision, pathfinding) asks the same question thousands of times
per frame. IntGridMap copies the cells once into a 2D array:

    values[cy, cx] = cell value   (0 = empty)

Row-first indexing matches numpy's convention, so values[cy] is a whole
row of the layer.

=============================================================================
USAGE EXAMPLE
=============================================================================

    collision = level.layer_by_identifier("Collisions")
    grid = IntGridMap.from_layer(collision)

    if grid.value_at_pixel(player.x, player.y) == 1:
        ...

    solid = grid.mask(1, 2)        # boolean array of walls and platforms

=============================================================================
"""

import numpy as np
from typing import Tuple

from ..project import Layer


class IntGridMap:
    """IntGrid values of one layer as an int32 array shaped (rows, columns)."""

    def __init__(self, width: int, height: int, grid_size: int):
        self.width = width
        self.height = height
        self.grid_size = grid_size
        self.values = np.zeros((height, width), dtype=np.int32)

    @classmethod
    def from_layer(cls, layer: Layer) -> 'IntGridMap':
        grid = cls(max(layer.cell_width, 0), max(layer.cell_height, 0), layer.grid_size)
        for cell in layer.int_grid:
            cx, cy = layer.to_grid_position(*cell.position)
            if grid.in_bounds(cx, cy):
                grid.values[cy, cx] = cell.value
        return grid

    @property
    def shape(self) -> Tuple[int, int]:
        return self.values.shape

    def in_bounds(self, cx: int, cy: int) -> bool:
        return 0 <= cx < self.width and 0 <= cy < self.height

    def value_at(self, cx: int, cy: int) -> int:
        """
        Value of cell (cx, cy).

        Out-of-bounds cells read as 0 (empty), so callers can probe
        neighbours at the layer edge without checking first.
        """
        if not self.in_bounds(cx, cy):
            return 0
        return int(self.values[cy, cx])

    def value_at_pixel(self, x: int, y: int) -> int:
        if self.grid_size <= 0:
            return 0
        return self.value_at(x // self.grid_size, y // self.grid_size)

    def is_set(self, cx: int, cy: int) -> bool:
        return self.value_at(cx, cy) != 0

    def mask(self, *values: int) -> np.ndarray:
        """Boolean array, True where the cell holds any of `values`."""
        return np.isin(self.values, values)

    def count(self, value: int) -> int:
        return int(np.count_nonzero(self.values == value))
