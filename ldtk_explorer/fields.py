"""
Typed field access over decoded JSON objects

The structural decode reads every LDtk field through these helpers.
They implement the forward-compatibility policy of the loader:

- A missing key, or a key whose value is null, yields the default.
- Unknown keys are never looked at, so additive schema changes load fine.
- A key present with the wrong JSON type raises MalformedDocument,
  naming the JSON path of the value.

JSON numbers decode to int or float; bool is a subclass of int in Python
so it is rejected explicitly wherever a number is expected.
"""

from typing import Any, Dict, List, Optional

from .errors import MalformedDocument


def child_path(path: str, key) -> str:
    """Extend a JSON path with an object key or a list index."""
    if isinstance(key, int):
        return f"{path}[{key}]"
    return f"{path}.{key}" if path else str(key)


def _type_name(value) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _wrong_type(expected: str, value, path: str) -> MalformedDocument:
    return MalformedDocument(f"expected {expected}, got {_type_name(value)}", path)


def require_object(value, path: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise _wrong_type("object", value, path)
    return value


def as_int(value, path: str) -> int:
    # LDtk writes integral values as JSON ints; 16.0 is tolerated
    if isinstance(value, bool):
        raise _wrong_type("integer", value, path)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise _wrong_type("integer", value, path)


def as_float(value, path: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _wrong_type("number", value, path)
    return float(value)


def get_int(data: Dict[str, Any], key: str, path: str, default: int = 0) -> int:
    value = data.get(key)
    if value is None:
        return default
    return as_int(value, child_path(path, key))


def get_optional_int(data: Dict[str, Any], key: str, path: str) -> Optional[int]:
    value = data.get(key)
    if value is None:
        return None
    return as_int(value, child_path(path, key))


def get_float(data: Dict[str, Any], key: str, path: str, default: float = 0.0) -> float:
    value = data.get(key)
    if value is None:
        return default
    return as_float(value, child_path(path, key))


def get_str(data: Dict[str, Any], key: str, path: str, default: str = "") -> str:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise _wrong_type("string", value, child_path(path, key))
    return value


def get_bool(data: Dict[str, Any], key: str, path: str, default: bool = False) -> bool:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise _wrong_type("boolean", value, child_path(path, key))
    return value


def get_list(data: Dict[str, Any], key: str, path: str) -> List[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise _wrong_type("array", value, child_path(path, key))
    return value


def get_object(data: Dict[str, Any], key: str, path: str) -> Optional[Dict[str, Any]]:
    value = data.get(key)
    if value is None:
        return None
    return require_object(value, child_path(path, key))


def get_int_list(data: Dict[str, Any], key: str, path: str) -> List[int]:
    field_path = child_path(path, key)
    return [as_int(v, child_path(field_path, i))
            for i, v in enumerate(get_list(data, key, path))]


def get_float_list(data: Dict[str, Any], key: str, path: str) -> List[float]:
    field_path = child_path(path, key)
    return [as_float(v, child_path(field_path, i))
            for i, v in enumerate(get_list(data, key, path))]
