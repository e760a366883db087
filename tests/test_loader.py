import io
import json

import pytest

from conftest import to_bytes
from ldtk_explorer.errors import IOFailure, LDtkError, MalformedDocument
from ldtk_explorer.loader import DiskFileSystem, MemoryFileSystem, load_bytes, load_file
from ldtk_explorer.project import Rect


def test_end_to_end_minimal_project(minimal_document):
    project = load_bytes(to_bytes(minimal_document))

    assert len(project.levels) == 1
    layers = project.levels[0].layers
    assert len(layers) == 1
    assert len(layers[0].tiles) == 1

    tile = layers[0].tiles[0]
    assert tile.src == Rect(0, 0, 16, 16)
    assert layers[0].to_grid_position(*tile.position) == (1, 1)
    assert layers[0].to_grid_position(16, 16) == (1, 1)


@pytest.mark.parametrize("convert", [
    lambda data: data,
    bytearray,
    lambda data: data.decode("utf-8"),
    io.BytesIO,
])
def test_load_bytes_accepts_buffers_and_streams(minimal_document, convert):
    project = load_bytes(convert(to_bytes(minimal_document)))
    assert project.levels[0].identifier == "Level_0"
    assert project.path is None


@pytest.mark.parametrize("data", [b"", b"{", b"not json", b"\xff\xfe\xfa", b"[1, 2]", b"null"])
def test_invalid_documents_are_malformed(data):
    with pytest.raises(MalformedDocument):
        load_bytes(data)


def test_malformed_document_is_an_ldtk_error():
    with pytest.raises(LDtkError):
        load_bytes(b"{]")


def test_load_file_from_memory(minimal_document):
    fs = MemoryFileSystem({"maps/world.ldtk": to_bytes(minimal_document)})
    project = load_file("maps/world.ldtk", fs)
    assert project.path == "maps/world.ldtk"
    assert project.directory == "maps"
    assert len(project.levels) == 1


def test_load_file_from_disk(tmp_path, minimal_document):
    (tmp_path / "world.ldtk").write_text(json.dumps(minimal_document), encoding="utf-8")

    project = load_file(tmp_path / "world.ldtk")
    assert project.levels[0].layers[0].tiles[0].src == Rect(0, 0, 16, 16)

    project = load_file("world.ldtk", DiskFileSystem(tmp_path))
    assert project.directory == ""


def test_missing_file_is_io_failure(tmp_path):
    with pytest.raises(IOFailure) as exc_info:
        load_file("missing.ldtk", DiskFileSystem(tmp_path))
    assert isinstance(exc_info.value, OSError)
    assert exc_info.value.path.endswith("missing.ldtk")

    with pytest.raises(IOFailure):
        load_file("missing.ldtk", MemoryFileSystem())


def test_foreign_filesystem_errors_are_wrapped(minimal_document):
    class BrokenFileSystem:
        def read_bytes(self, path):
            raise PermissionError("denied")

    with pytest.raises(IOFailure, match="denied"):
        load_file("world.ldtk", BrokenFileSystem())


def test_failed_load_returns_nothing_partial(minimal_document):
    minimal_document["levels"][0]["bgRelPath"] = "bg.png"
    fs = MemoryFileSystem({"world.ldtk": to_bytes(minimal_document)})
    project = None
    with pytest.raises(MalformedDocument):
        project = load_file("world.ldtk", fs)
    assert project is None
