"""Loading of tile map files, with an optional embedded tileset and eLVL data."""

from __future__ import annotations

import io
import struct
from dataclasses import dataclass, field
from typing import Optional

import numpy as np
from PIL import Image, UnidentifiedImageError

from plumeview.elvl import Attribute, Chunk, read_elvl

MAP_SIZE = 1024

TILE_ID_FIRST_DOOR = 162
TILE_ID_LAST_DOOR = 169
TILE_ID_FLAG = 170
TILE_ID_SAFE = 171
TILE_ID_GOAL = 172
TILE_ID_WORMHOLE = 220


class MapError(ValueError):
    """Raised when a map file cannot be read."""


def decode_tile(value) -> tuple[int, int, int]:
    """Split a packed tile record into ``(x, y, tile_id)``."""
    value = int(value)
    return value & 0xFFF, (value >> 12) & 0xFFF, (value >> 24) & 0xFF


def _empty_tiles() -> np.ndarray:
    return np.zeros((MAP_SIZE, MAP_SIZE), dtype=np.uint8)


@dataclass
class Map:
    """A 1024x1024 tile map; ``tiles`` is indexed as ``tiles[y, x]``."""

    filename: str = ""
    elvl: list[Chunk] = field(default_factory=list)
    tiles: np.ndarray = field(default_factory=_empty_tiles)
    tileset: Optional[Image.Image] = None

    @classmethod
    def empty(cls) -> "Map":
        return cls()

    @classmethod
    def load(cls, filename) -> "Map":
        """Read a map file from disk.

        Files shorter than two bytes give an empty map.
        """
        loaded = cls(filename=str(filename))

        with open(filename, "rb") as handle:
            data = handle.read()

        if len(data) < 2:
            return loaded

        tiledata_offset = 0

        if data[:2] == b"BM":
            if len(data) < 10:
                raise MapError("invalid bitmap header")
            try:
                with Image.open(io.BytesIO(data)) as image:
                    loaded.tileset = image.convert("RGBA")
            except (UnidentifiedImageError, OSError, ValueError) as exc:
                raise MapError(f"cannot decode tileset bitmap: {exc}") from exc
            (tiledata_offset,) = struct.unpack_from("<I", data, 2)

        if tiledata_offset >= len(data):
            raise MapError("tile data offset larger than file data length")

        loaded._read_tiles(data[tiledata_offset:])
        loaded.elvl = read_elvl(data)
        return loaded

    def _read_tiles(self, tiledata: bytes) -> None:
        count = len(tiledata) // 4
        if count == 0:
            return

        values = np.frombuffer(tiledata[: count * 4], dtype="<u4")
        xs = (values & 0xFFF).astype(np.int64)
        ys = ((values >> 12) & 0xFFF).astype(np.int64)
        ids = ((values >> 24) & 0xFF).astype(np.uint8)

        if xs.max() >= MAP_SIZE or ys.max() >= MAP_SIZE:
            raise MapError("tile coordinate outside of the map")

        # Later records overwrite earlier ones at the same position.
        indices = ys * MAP_SIZE + xs
        reversed_indices = indices[::-1]
        unique, first = np.unique(reversed_indices, return_index=True)
        flat = self.tiles.reshape(-1)
        flat[unique] = ids[::-1][first]

    def get_attributes(self) -> list[Attribute]:
        """Return the attribute chunks of the map's eLVL data, in file order."""
        return [chunk for chunk in self.elvl if isinstance(chunk, Attribute)]