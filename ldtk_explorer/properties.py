"""
Custom fields ("Properties") attached to LDtk Levels and Entities

=============================================================================
VALUE KINDS
=============================================================================

LDtk field instances carry a declared type string (`__type`, e.g. "Int",
"Float", "Color", "Point", "Array<Int>", "LocalEnum.Direction") and a JSON
value (`__value`). The JSON value maps onto one of these kinds:

    INT     JSON integer              "Int"
    FLOAT   JSON non-integral number  "Float"
    STRING  JSON string               "String", "Color", "FilePath", enums
    BOOL    JSON true/false           "Bool"
    ARRAY   JSON array                "Array<...>"
    MAP     JSON object               "Point" ({"cx": .., "cy": ..}), refs
    NULL    JSON null                 any optional field left empty

The kind is taken from the VALUE, not from the declared type. Callers are
expected to know what a field holds; asking for the wrong kind raises
TypeMismatch instead of returning garbage.

=============================================================================
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .colors import Color, parse_hex_color
from .errors import TypeMismatch
from .fields import get_str, require_object


class PropertyKind(Enum):
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    BOOL = "bool"
    ARRAY = "array"
    MAP = "map"
    NULL = "null"


def kind_of(value: Any) -> PropertyKind:
    # bool first: True is an int in Python
    if value is None:
        return PropertyKind.NULL
    if isinstance(value, bool):
        return PropertyKind.BOOL
    if isinstance(value, int):
        return PropertyKind.INT
    if isinstance(value, float):
        return PropertyKind.FLOAT
    if isinstance(value, str):
        return PropertyKind.STRING
    if isinstance(value, list):
        return PropertyKind.ARRAY
    return PropertyKind.MAP


@dataclass
class Property:
    """A single custom field: identifier, declared type and value."""
    identifier: str              # Field name
    type: str = ""               # Declared LDtk type ("Int", "Color", ...)
    value: Any = None            # Decoded JSON value

    @classmethod
    def from_json(cls, data, path: str) -> 'Property':
        data = require_object(data, path)
        return cls(
            identifier=get_str(data, "__identifier", path),
            type=get_str(data, "__type", path),
            # Any JSON value is acceptable here
            value=data.get("__value"),
        )

    @property
    def kind(self) -> PropertyKind:
        return kind_of(self.value)

    def _mismatch(self, expected: str) -> TypeMismatch:
        return TypeMismatch(self.identifier, expected, self.kind.value)

    # -------------------------------------------------------------------------
    # TYPED ACCESSORS
    # -------------------------------------------------------------------------

    def as_int(self) -> int:
        """Integer value; floats are truncated toward zero."""
        if self.kind is PropertyKind.INT:
            return self.value
        if self.kind is PropertyKind.FLOAT:
            return int(self.value)
        raise self._mismatch("int")

    def as_float(self) -> float:
        if self.kind in (PropertyKind.INT, PropertyKind.FLOAT):
            return float(self.value)
        raise self._mismatch("float")

    def as_string(self) -> str:
        """String value. Also used for colors, enums and file paths."""
        if self.kind is not PropertyKind.STRING:
            raise self._mismatch("string")
        return self.value

    def as_bool(self) -> bool:
        if self.kind is not PropertyKind.BOOL:
            raise self._mismatch("bool")
        return self.value

    def as_array(self) -> List[Any]:
        if self.kind is not PropertyKind.ARRAY:
            raise self._mismatch("array")
        return self.value

    def as_map(self) -> Dict[str, Any]:
        """
        Object value. LDtk Points decode to maps keyed "cx" and "cy";
        see as_point() for a shortcut.
        """
        if self.kind is not PropertyKind.MAP:
            raise self._mismatch("map")
        return self.value

    def as_point(self) -> Tuple[int, int]:
        """Grid coordinates (cx, cy) of a Point field."""
        point = self.as_map()
        cx, cy = point.get("cx"), point.get("cy")
        if kind_of(cx) is not PropertyKind.INT or kind_of(cy) is not PropertyKind.INT:
            raise self._mismatch("point")
        return cx, cy

    def as_color(self) -> Color:
        """Opaque Color parsed from a "#RRGGBB" / "#RGB" string value."""
        text = self.as_string()
        try:
            return parse_hex_color(text)
        except ValueError as e:
            raise self._mismatch("color") from e

    def is_null(self) -> bool:
        return self.value is None


def property_by_identifier(properties: Sequence[Property],
                           identifier: str) -> Optional[Property]:
    """First Property named `identifier`, or None."""
    for prop in properties:
        if prop.identifier == identifier:
            return prop
    return None
