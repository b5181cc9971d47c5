"""Reader for the extended level (eLVL) metadata stored in map files."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass, field
from typing import Union

METADATA_HEADER_SIZE = 12
CHUNK_HEADER_SIZE = 8
REGION_CHUNK_HEADER_SIZE = 8
MAP_WIDTH = 1024


def _tag(name: bytes) -> int:
    return int.from_bytes(name, "little")


ELVL_MAGIC = _tag(b"elvl")
CHUNK_ATTR = _tag(b"ATTR")
CHUNK_REGN = _tag(b"REGN")
REGION_NAME = _tag(b"rNAM")
REGION_TILES = _tag(b"rTIL")
REGION_BASE = _tag(b"rBSE")
REGION_NO_ANTIWARP = _tag(b"rNAW")
REGION_NO_WEAPONS = _tag(b"rNWP")
REGION_NO_FLAGS = _tag(b"rNFL")


class ElvlError(ValueError):
    """Raised when eLVL data is malformed."""


class RegionFlags(enum.IntFlag):
    NONE = 0
    BASE = 1 << 0
    NO_ANTIWARP = 1 << 1
    NO_WEAPONS = 1 << 2
    NO_FLAGS = 1 << 3


@dataclass
class Attribute:
    key: str
    value: str


@dataclass
class OtherChunk:
    kind: int
    payload: bytes


def _advance(coord: tuple[int, int], run: int) -> tuple[int, int]:
    x, y = coord
    x += run
    if x >= MAP_WIDTH:
        return 0, y + 1
    return x, y


@dataclass
class Region:
    name: str = ""
    flags: RegionFlags = RegionFlags.NONE
    tiles: set[int] = field(default_factory=set)

    @staticmethod
    def _index(x: int, y: int) -> int:
        return y * MAP_WIDTH + x

    @property
    def tile_count(self) -> int:
        return len(self.tiles)

    def set_tile(self, x, y) -> None:
        self.tiles.add(self._index(x, y))

    def in_region(self, x, y) -> bool:
        return self._index(x, y) in self.tiles

    def get_tiles(self) -> list[tuple[int, int]]:
        """Return the region's tiles as (x, y) pairs in row-major order."""
        return [(index % MAP_WIDTH, index // MAP_WIDTH) for index in sorted(self.tiles)]

    def _repeat_row(self, y: int, run: int) -> None:
        above = [x for x in range(MAP_WIDTH) if self.in_region(x, y - 1)]
        for row in range(y, y + run):
            for x in above:
                self.set_tile(x, row)

    def parse_data(self, data, coord) -> tuple[int, int]:
        """Decode run-length encoded tile data starting at ``coord``.

        Returns the coordinate reached after the last run.
        """
        data = bytes(data)
        x, y = coord
        pos = 0

        while pos < len(data):
            first = data[pos]
            kind = first >> 5

            if kind in (0, 2, 4, 6):
                run = (first & 0x1F) + 1
                pos += 1
            else:
                if pos + 1 >= len(data):
                    raise ElvlError("unexpected end of data during region tile parsing")
                run = (((first & 3) << 8) | data[pos + 1]) + 1
                pos += 2

            if kind in (0, 1):
                x, y = _advance((x, y), run)
            elif kind in (2, 3):
                for i in range(run):
                    self.set_tile(x + i, y)
                x, y = _advance((x, y), run)
            elif kind in (4, 5):
                x, y = 0, y + run
            else:
                self._repeat_row(y, run)
                x, y = 0, y + run

        return x, y


Chunk = Union[Attribute, Region, OtherChunk]


def _aligned(size: int) -> int:
    return (size + 3) & ~3


def _decode(raw: bytes, what: str) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ElvlError(f"{what} is not valid UTF-8") from exc


def _read_attribute(payload: bytes) -> Attribute:
    key, sep, value = payload.partition(b"=")
    if not sep:
        raise ElvlError("attribute data did not have key value split")
    return Attribute(_decode(key, "attribute key"), _decode(value, "attribute value"))


def _read_region(payload: bytes) -> Region:
    region = Region()
    coord = (0, 0)
    rest = payload

    while len(rest) > REGION_CHUNK_HEADER_SIZE:
        kind, size = struct.unpack_from("<II", rest)
        end = REGION_CHUNK_HEADER_SIZE + size
        if end > len(rest):
            raise ElvlError("region chunk extends past end of data")
        body = rest[REGION_CHUNK_HEADER_SIZE:end]

        if kind == REGION_NAME:
            region.name = _decode(body, "region name")
        elif kind == REGION_TILES:
            coord = region.parse_data(body, coord)
        elif kind == REGION_BASE:
            region.flags |= RegionFlags.BASE
        elif kind == REGION_NO_ANTIWARP:
            region.flags |= RegionFlags.NO_ANTIWARP
        elif kind == REGION_NO_WEAPONS:
            region.flags |= RegionFlags.NO_WEAPONS
        elif kind == REGION_NO_FLAGS:
            region.flags |= RegionFlags.NO_FLAGS

        rest = rest[REGION_CHUNK_HEADER_SIZE + _aligned(size):]

    return region


def read_elvl(data) -> list[Chunk]:
    """Read the eLVL chunks embedded in a map file.

    Files without a bitmap header or without valid eLVL metadata yield an
    empty list; malformed chunks raise :class:`ElvlError`.
    """
    data = bytes(data)
    chunks: list[Chunk] = []

    if len(data) < 10 or data[:2] != b"BM":
        return chunks

    (metadata_offset,) = struct.unpack_from("<I", data, 6)
    if metadata_offset == 0 or len(data) < metadata_offset + METADATA_HEADER_SIZE:
        return chunks

    magic, total_size = struct.unpack_from("<II", data, metadata_offset)
    if magic != ELVL_MAGIC:
        return chunks

    rest = data[metadata_offset + METADATA_HEADER_SIZE:]
    consumed = METADATA_HEADER_SIZE

    while len(rest) >= CHUNK_HEADER_SIZE and consumed < total_size:
        kind, size = struct.unpack_from("<II", rest)
        end = CHUNK_HEADER_SIZE + size
        if end > len(rest):
            raise ElvlError("chunk extends past end of data")
        payload = rest[CHUNK_HEADER_SIZE:end]

        if kind == CHUNK_ATTR:
            chunks.append(_read_attribute(payload))
        elif kind == CHUNK_REGN:
            chunks.append(_read_region(payload))
        else:
            chunks.append(OtherChunk(kind, payload))

        total_chunk_size = CHUNK_HEADER_SIZE + _aligned(size)
        rest = rest[total_chunk_size:]
        consumed += total_chunk_size

    return chunks