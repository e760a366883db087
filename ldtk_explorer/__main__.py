#!/usr/bin/env python3

"""
LDtk Project Explorer - print the contents of an LDtk project

Usage:
    python -m ldtk_explorer <project.ldtk>
    python -m ldtk_explorer <project.ldtk> <level> [output.png]

With a level identifier, only that level is listed. With an output path
as well, the level is rendered (background and visible layers) to a PNG.
"""

import sys
from pathlib import Path

from .errors import LDtkError
from .loader import DiskFileSystem, load_file
from .project import Level, Project


def print_level(level: Level):
    print(f"Level {level.identifier}: {level.width}x{level.height} "
          f"at ({level.world_x}, {level.world_y}), bg {level.bg_color}")
    if level.bg_image:
        print(f"  Background image: {level.bg_image.path}")
    for layer in level.layers:
        counts = (f"{len(layer.tiles)} tiles, {len(layer.auto_tiles)} auto tiles, "
                  f"{len(layer.int_grid)} cells, {len(layer.entities)} entities")
        tileset = layer.tileset.identifier if layer.tileset else "-"
        hidden = "" if layer.visible else " (hidden)"
        print(f"  [{layer.type}] {layer.identifier}{hidden}: {counts}; tileset {tileset}")
    for prop in level.properties:
        print(f"  {prop.identifier} ({prop.type}) = {prop.value!r}")


def print_project(project: Project):
    print(f"Project {project.path} (LDtk {project.json_version or '?'}, "
          f"layout {project.world_layout})")
    print(f"Tilesets: {len(project.tilesets)}")
    for tileset in project.tilesets:
        print(f"  #{tileset.uid} {tileset.identifier}: {tileset.rel_path} "
              f"({tileset.width}x{tileset.height}, grid {tileset.grid_size})")
    if project.int_grid_names:
        named = [f"{value}={name}" for value, name in enumerate(project.int_grid_names) if name]
        print(f"IntGrid values: {', '.join(named)}")
    print(f"Levels: {len(project.levels)}")


def main():
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    source_path = Path(sys.argv[1])
    level_name = sys.argv[2] if len(sys.argv) >= 3 else None
    output_path = sys.argv[3] if len(sys.argv) >= 4 else None

    try:
        project = load_file(source_path.name, DiskFileSystem(source_path.parent))
        print_project(project)

        if level_name is None:
            for level in project.levels:
                print_level(level)
            return

        level = project.level_by_identifier(level_name)
        if level is None:
            print(f"Error: Level '{level_name}' not found")
            sys.exit(1)
        print_level(level)

        if output_path:
            from .renderer import LevelRenderer
            renderer = LevelRenderer(project, DiskFileSystem(source_path.parent))
            renderer.render(level).composite().save(output_path)
            print(f"Saved to: {output_path}")
    except LDtkError as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
