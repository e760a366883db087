"""
Entry points: load an LDtk project from a path or from bytes

File access goes through a small FileSystem collaborator so projects can
come from disk, from assets embedded in a package, or from anywhere else
that can hand over bytes for a path:

    project = load_file("maps/world.ldtk")
    project = load_file("world.ldtk", DiskFileSystem("assets"))
    project = load_file("world.ldtk", MemoryFileSystem({"world.ldtk": data}))
    project = load_bytes(data)

Paths use '/' as separator on every platform.
"""

import json
import logging
from pathlib import Path
from typing import BinaryIO, Dict, Optional, Protocol, Union

from .errors import IOFailure, MalformedDocument
from .project import Project
from .resolver import resolve

logger = logging.getLogger(__name__)


# =============================================================================
# FILE SYSTEMS
# =============================================================================

class FileSystem(Protocol):
    """Anything able to read the bytes stored at a slash-separated path."""

    def read_bytes(self, path: str) -> bytes:
        ...


class DiskFileSystem:
    """
    Reads files from disk.

    Parameters:
    -----------
    root : str or Path, optional
        Directory relative paths are resolved against (default: the
        current working directory)
    """

    def __init__(self, root: Union[str, Path, None] = None):
        self.root = Path(root) if root is not None else None

    def read_bytes(self, path: str) -> bytes:
        # Path() accepts '/' on every platform
        full_path = Path(path)
        if self.root is not None:
            full_path = self.root / full_path
        try:
            return full_path.read_bytes()
        except OSError as e:
            raise IOFailure(full_path, e.strerror or str(e)) from e


class MemoryFileSystem:
    """Serves files from a dict of path -> bytes."""

    def __init__(self, files: Optional[Dict[str, bytes]] = None):
        self.files = dict(files or {})

    def read_bytes(self, path: str) -> bytes:
        try:
            return self.files[path]
        except KeyError:
            raise IOFailure(path, "no such file") from None


# =============================================================================
# LOADING
# =============================================================================

def load_bytes(data: Union[bytes, bytearray, str, BinaryIO]) -> Project:
    """
    Decode and resolve a project from an in-memory document.

    Parameters:
    -----------
    data : bytes, bytearray, str, or a readable binary stream

    Raises:
    -------
    MalformedDocument : invalid JSON, a field of the wrong type, or a
                        missing block required by another field
    IOFailure : reading from the stream failed
    """
    if hasattr(data, "read"):
        try:
            data = data.read()
        except OSError as e:
            raise IOFailure(getattr(data, "name", "<stream>"), str(e)) from e

    try:
        raw = json.loads(data)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedDocument(f"invalid JSON: {e}") from e

    project = Project.from_json(raw)
    resolve(project, raw)
    logger.debug("Loaded project with %d levels and %d tilesets",
                 len(project.levels), len(project.tilesets))
    return project


def load_file(path: Union[str, Path], filesystem: Optional[FileSystem] = None) -> Project:
    """
    Load the project stored at `path`.

    Parameters:
    -----------
    path : str or Path
        Location of the .ldtk file, as understood by `filesystem`
    filesystem : FileSystem, optional
        Where to read from (default: DiskFileSystem())

    Raises:
    -------
    IOFailure : the file could not be read
    MalformedDocument : see load_bytes()
    """
    if filesystem is None:
        filesystem = DiskFileSystem()
    path = Path(path).as_posix() if isinstance(path, Path) else path

    try:
        data = filesystem.read_bytes(path)
    except IOFailure:
        raise
    except OSError as e:
        raise IOFailure(path, str(e)) from e

    project = load_bytes(data)
    project.path = path
    return project
