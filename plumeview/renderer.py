"""Prepares the GPU-side data that draws a tile map: tile layers, tile ids and the MVP."""

from __future__ import annotations

import numpy as np

from plumeview.camera import Camera
from plumeview.map import MAP_SIZE, Map

TILE_SIZE = 16
TILESET_COLUMNS = 19
TILESET_ROWS = 10
TILE_LAYERS = TILESET_COLUMNS * TILESET_ROWS
TILESET_WIDTH = TILESET_COLUMNS * TILE_SIZE
TILESET_HEIGHT = TILESET_ROWS * TILE_SIZE

_QUAD_START = -1.0
_QUAD_END = 1025.0


def create_vertices() -> np.ndarray:
    """Return the two triangles covering the map, as a (6, 2) float32 array."""
    start, end = _QUAD_START, _QUAD_END
    return np.array(
        [
            (start, start),
            (start, end),
            (end, start),
            (end, start),
            (start, end),
            (end, end),
        ],
        dtype=np.float32,
    )


class MapRenderer:
    """Holds the tileset layers, tile ids and transform used to draw a map."""

    def __init__(self):
        self.vertices = create_vertices()
        self.tileset = np.zeros((TILE_LAYERS, TILE_SIZE, TILE_SIZE, 4), dtype=np.uint8)
        self.tiledata = np.zeros((MAP_SIZE, MAP_SIZE), dtype=np.uint8)
        self.mvp = np.identity(4)

    def set_map(self, map: Map) -> None:
        """Split the map's tileset into per-tile layers and copy its tile ids."""
        if map.tileset is not None:
            texels = np.asarray(map.tileset.convert("RGBA"), dtype=np.uint8)
            height, width = texels.shape[:2]
            if width != TILESET_WIDTH or height < TILESET_HEIGHT:
                raise ValueError(
                    f"tileset must be {TILESET_WIDTH} pixels wide and at least "
                    f"{TILESET_HEIGHT} tall, got {width}x{height}"
                )
            grid = texels[:TILESET_HEIGHT].reshape(
                TILESET_ROWS, TILE_SIZE, TILESET_COLUMNS, TILE_SIZE, 4
            )
            self.tileset = (
                grid.transpose(0, 2, 1, 3, 4)
                .reshape(TILE_LAYERS, TILE_SIZE, TILE_SIZE, 4)
                .copy()
            )

        self.tiledata = np.array(map.tiles, dtype=np.uint8).reshape(MAP_SIZE, MAP_SIZE)

    def update(self, camera: Camera) -> None:
        """Recompute the model-view-projection matrix from the camera."""
        self.mvp = camera.projection @ camera.view()

    @property
    def uniform_bytes(self) -> bytes:
        """The MVP as 64 bytes of column-major float32, as a uniform buffer holds it."""
        return np.asarray(self.mvp, dtype="<f4").tobytes(order="F")