"""Interactive map viewer: camera panning and zooming, and software rendering of the map."""

from __future__ import annotations

import argparse
import sys
from typing import Optional

import numpy as np

from plumeview.camera import Camera
from plumeview.elvl import ElvlError
from plumeview.map import MAP_SIZE, Map, MapError
from plumeview.renderer import TILE_SIZE, MapRenderer

DEFAULT_SCALE = 1.0 / 16.0
SCROLL_SPEED = 1.0 / 5.0
DEFAULT_MAP = "test.lvl"
DEFAULT_WINDOW_SIZE = (1024, 768)


class Viewer:
    """Viewer state: the camera, the cursor and an optional drag in progress."""

    def __init__(self, map, width, height):
        self.map = map
        self.size = (int(width), int(height))
        self.renderer = MapRenderer()
        self.renderer.set_map(map)
        self.camera = Camera(float(width), float(height), (0.0, 0.0), DEFAULT_SCALE)
        self.mouse_position = (0.0, 0.0)
        self.drag_anchor: Optional[tuple[float, float]] = None

    @property
    def visible(self) -> bool:
        width, height = self.size
        return width > 0 and height > 0

    def resize(self, width, height) -> bool:
        """Resize the surface; returns False when it has no area (e.g. minimised)."""
        self.size = (int(width), int(height))
        self.camera.set_surface_dimensions(float(width), float(height))
        return self.visible

    def move_cursor(self, x, y) -> None:
        self.mouse_position = (float(x), float(y))

    def press(self) -> None:
        """Start dragging the map from the current cursor position."""
        self.drag_anchor = self.mouse_position

    def release(self) -> None:
        self.drag_anchor = None

    def scroll(self, dy) -> None:
        """Zoom by ``dy`` wheel lines, keeping the world point under the cursor fixed."""
        scale = self.camera.scale
        old_scale = scale if scale != 0.0 else 0.01

        new_scale = scale - scale * (float(dy) * SCROLL_SPEED)

        old_world = self.camera.unproject(self.mouse_position)
        world_offset = (old_world - self.camera.position) * (1.0 / old_scale)

        self.camera.position = self.camera.position + world_offset * (old_scale - new_scale)
        self.camera.set_scale(new_scale)

    def step(self) -> bool:
        """Advance one frame; returns False when there is nothing to draw."""
        if not self.visible:
            return False

        self.renderer.update(self.camera)

        if self.drag_anchor is not None:
            anchor_x, anchor_y = self.drag_anchor
            mouse_x, mouse_y = self.mouse_position
            scale = self.camera.scale
            self.camera.position = self.camera.position - np.array(
                [(mouse_x - anchor_x) * scale, (mouse_y - anchor_y) * scale]
            )
            self.drag_anchor = self.mouse_position

        return True

    def frame(self) -> np.ndarray:
        """Render the current view as an RGB array of shape (height, width, 3)."""
        width, height = self.size
        if not self.visible:
            return np.zeros((max(height, 0), max(width, 0), 3), dtype=np.uint8)

        scale = self.camera.scale
        pos_x, pos_y = self.camera.position
        world_x = pos_x + (np.arange(width) + 0.5 - width * 0.5) * scale
        world_y = pos_y + (np.arange(height) + 0.5 - height * 0.5) * scale

        tile_x = np.floor(world_x).astype(np.int64)
        tile_y = np.floor(world_y).astype(np.int64)
        inside_x = (tile_x >= 0) & (tile_x < MAP_SIZE)
        inside_y = (tile_y >= 0) & (tile_y < MAP_SIZE)

        texel_u = np.clip(((world_x - tile_x) * TILE_SIZE).astype(np.int64), 0, TILE_SIZE - 1)
        texel_v = np.clip(((world_y - tile_y) * TILE_SIZE).astype(np.int64), 0, TILE_SIZE - 1)

        tiledata = self.renderer.tiledata
        ids = tiledata[np.clip(tile_y, 0, MAP_SIZE - 1)][:, np.clip(tile_x, 0, MAP_SIZE - 1)]
        ids = np.where(inside_y[:, None] & inside_x[None, :], ids, 0).astype(np.int64)

        # Tile id 0 is empty; ids 1.. map onto the tileset layers, anything past them is empty.
        layers = self.renderer.tileset
        atlas = np.concatenate(
            [np.zeros((1,) + layers.shape[1:], dtype=np.uint8), layers], axis=0
        )
        ids = np.where(ids < atlas.shape[0], ids, 0)

        rgba = atlas[ids, texel_v[:, None], texel_u[None, :]].astype(np.uint16)
        rgb = rgba[..., :3] * rgba[..., 3:4] // 255
        return rgb.astype(np.uint8)


def _parse_args(argv):
    parser = argparse.ArgumentParser(prog="plumeview", description="View a tile map file.")
    parser.add_argument("map", nargs="?", default=DEFAULT_MAP, help="map file to open")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = _parse_args(argv)

    try:
        loaded = Map.load(args.map)
    except (OSError, MapError, ElvlError) as exc:
        print(f"plumeview: {exc}", file=sys.stderr)
        return 1

    import pygame

    pygame.init()
    try:
        pygame.display.set_mode(DEFAULT_WINDOW_SIZE, pygame.RESIZABLE)
        pygame.display.set_caption(f"plumeview - {args.map}")
        viewer = Viewer(loaded, *DEFAULT_WINDOW_SIZE)
        running = True
        waiting = False

        while running:
            events = [pygame.event.wait()] if waiting else []
            events.extend(pygame.event.get())

            for event in events:
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.VIDEORESIZE:
                    waiting = not viewer.resize(event.w, event.h)
                elif event.type == pygame.MOUSEMOTION:
                    viewer.move_cursor(*event.pos)
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    viewer.press()
                elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                    viewer.release()
                elif event.type == pygame.MOUSEWHEEL:
                    viewer.scroll(event.y)

            if not running:
                break

            if viewer.step():
                surface = pygame.display.get_surface()
                if surface.get_size() == viewer.size:
                    pygame.surfarray.blit_array(surface, viewer.frame().transpose(1, 0, 2))
                    pygame.display.flip()
    finally:
        pygame.quit()

    return 0


if __name__ == "__main__":
    sys.exit(main())