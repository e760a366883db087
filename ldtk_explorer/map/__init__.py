"""Grid views over resolved layers"""

from .int_grid import IntGridMap

__all__ = ["IntGridMap"]
