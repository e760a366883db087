import io

import pytest
from PIL import Image

from conftest import make_layer, make_level, make_project, make_tile, make_tileset, to_bytes
from ldtk_explorer.errors import IOFailure
from ldtk_explorer.loader import MemoryFileSystem, load_file
from ldtk_explorer.renderer import LevelRenderer, RenderOptions, TilesetCache


def tile_color(tile_id):
    return (10 * tile_id + 5, 100, 200, 255)


def tileset_png() -> bytes:
    """4x4 tiles of 16px, each a solid color, except tile 1 whose left half is black."""
    image = Image.new("RGBA", (64, 64))
    for tile_id in range(16):
        x, y = (tile_id % 4) * 16, (tile_id // 4) * 16
        image.paste(tile_color(tile_id), (x, y, x + 16, y + 16))
    image.paste((0, 0, 0, 255), (16, 0, 24, 16))
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def background_png() -> bytes:
    image = Image.new("RGBA", (8, 8), (0, 255, 0, 255))
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def files():
    layers = [
        make_layer("Top", tileset_uid=1, __pxTotalOffsetX=16,
                   gridTiles=[make_tile(0, 0, 3)]),
        make_layer("Hidden", tileset_uid=1, visible=False,
                   gridTiles=[make_tile(32, 32, 2)]),
        make_layer("Bottom", tileset_uid=1,
                   gridTiles=[make_tile(0, 0, 0), make_tile(0, 16, 1, flip=1)]),
        make_layer("Unbound", tileset_uid=42, gridTiles=[make_tile(48, 48, 0)]),
        make_layer("Things", "Entities", tileset_uid=None),
    ]
    level = make_level(layers=layers, bgRelPath="bg.png",
                       __bgPos={"topLeftPx": [48, 0], "scale": [2, 2], "cropRect": [0, 0, 8, 8]})
    document = make_project(levels=[level], tilesets=[make_tileset()])
    return MemoryFileSystem({
        "maps/world.ldtk": to_bytes(document),
        "maps/tiles.png": tileset_png(),
        "maps/bg.png": background_png(),
    })


@pytest.fixture
def project(files):
    return load_file("maps/world.ldtk", files)


def test_renders_drawable_layers_bottom_to_top(project, files):
    rendered = LevelRenderer(project, files).render(project.levels[0])
    assert [layer.identifier for layer in rendered.layers] == ["Bottom", "Top"]
    assert all(layer.image.size == (64, 64) for layer in rendered.layers)


def test_tiles_drawn_at_position_plus_offset(project, files):
    rendered = LevelRenderer(project, files).render(project.levels[0])
    bottom, top = (layer.image for layer in rendered.layers)
    assert bottom.getpixel((5, 5)) == tile_color(0)
    assert top.getpixel((20, 5)) == tile_color(3)
    assert top.getpixel((5, 5)) == (0, 0, 0, 0)


def test_flipped_tile(project, files):
    bottom = LevelRenderer(project, files).render(project.levels[0]).layers[0].image
    # Tile 1 has its black half on the left; mirrored it ends up on the right
    assert bottom.getpixel((2, 20)) == tile_color(1)
    assert bottom.getpixel((13, 20)) == (0, 0, 0, 255)


def test_hidden_layers_on_request(project, files):
    options = RenderOptions(draw_invisible=True)
    rendered = LevelRenderer(project, files).render(project.levels[0], options)
    assert [layer.identifier for layer in rendered.layers] == ["Bottom", "Hidden", "Top"]


def test_background(project, files):
    rendered = LevelRenderer(project, files).render(project.levels[0])
    background = rendered.background
    assert background.getpixel((0, 63)) == (0x22, 0x33, 0x44, 255)
    # 8x8 image scaled by 2 at (48, 0)
    assert background.getpixel((50, 2)) == (0, 255, 0, 255)
    assert background.getpixel((63, 15)) == (0, 255, 0, 255)
    assert background.getpixel((50, 17)) == (0x22, 0x33, 0x44, 255)


def test_no_background_on_request(project, files):
    rendered = LevelRenderer(project, files).render(project.levels[0],
                                                    RenderOptions(draw_background=False))
    assert rendered.background is None
    assert rendered.composite().getpixel((63, 63)) == (0, 0, 0, 0)


def test_composite(project, files):
    image = LevelRenderer(project, files).render(project.levels[0]).composite()
    assert image.size == (64, 64)
    assert image.getpixel((5, 5)) == tile_color(0)
    assert image.getpixel((20, 5)) == tile_color(3)
    assert image.getpixel((40, 40)) == (0x22, 0x33, 0x44, 255)


def test_tileset_images_are_cached(project, files):
    cache = TilesetCache(files, "maps")
    assert cache.get("tiles.png") is cache.get("tiles.png")
    assert cache.full_path("tiles.png") == "maps/tiles.png"


def test_missing_tileset_image(project):
    renderer = LevelRenderer(project, MemoryFileSystem({}))
    with pytest.raises(IOFailure):
        renderer.render(project.levels[0], RenderOptions(draw_background=False))


def test_unreadable_image():
    cache = TilesetCache(MemoryFileSystem({"tiles.png": b"not a png"}))
    with pytest.raises(IOFailure, match="not a readable image"):
        cache.get("tiles.png")
