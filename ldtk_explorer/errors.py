"""
Exceptions raised while loading and querying LDtk projects

=============================================================================
ERROR TAXONOMY
=============================================================================

    LDtkError
    ├── IOFailure            bytes could not be obtained (missing file, ...)
    ├── MalformedDocument    bad JSON, or a field of the wrong JSON type
    │   └── UnresolvedReference   a block the resolver needs is absent
    └── TypeMismatch         Property accessor called on another value kind

Load errors abort the whole load: no partial Project is ever returned.
TypeMismatch is local to the accessor call that raised it.

Malformed background colors are NOT errors. They are logged and replaced
by transparent black (see colors.py).

=============================================================================
"""


class LDtkError(Exception):
    """Base class for every error raised by ldtk_explorer."""


class IOFailure(LDtkError, OSError):
    """The file-system collaborator could not supply the requested bytes."""

    def __init__(self, path, reason: str = ""):
        self.path = str(path)
        message = f"Could not read '{self.path}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class MalformedDocument(LDtkError, ValueError):
    """
    The document is not valid JSON, or a field has an incompatible type.

    `location` is the JSON path of the offending value when known,
    e.g. "levels[0].layerInstances[1].__gridSize".
    """

    def __init__(self, message: str, location: str = ""):
        self.location = location
        if location:
            message = f"{location}: {message}"
        super().__init__(message)


class UnresolvedReference(MalformedDocument):
    """A raw-document block referenced by another field is missing."""


class TypeMismatch(LDtkError, TypeError):
    """A Property value was requested as a kind it does not hold."""

    def __init__(self, identifier: str, expected: str, actual: str):
        self.identifier = identifier
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Property '{identifier}' holds {actual}, not {expected}"
        )
