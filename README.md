# plumeview

A viewer for 1024×1024 tile maps. A map file may start with a bitmap
tileset (19 × 10 tiles of 16×16 pixels, 304 pixels wide), followed by
packed 32-bit tile records (12 bits x, 12 bits y, 8 bits tile id). The
file may also carry extended level (eLVL) metadata, such as attributes
and named regions.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Viewing a map

```
plumeview path/to/map.lvl
```

If you give no path, `test.lvl` in the current directory is opened. If
the file cannot be read or is malformed, an error is printed and the
command exits with status 1.

In the viewer window:

- drag with the left mouse button to pan;
- scroll the mouse wheel to zoom, keeping the point under the cursor fixed;
- close the window to quit.

Tile id 0 is drawn as empty; ids 1 to 190 are drawn with the matching
tile from the tileset, and higher ids are drawn as empty.

## Using the library

```python
from plumeview.map import Map

level = Map.load("arena.lvl")
print(level.tiles[10, 20])  # tile id at x=20, y=10
for attribute in level.get_attributes():
    print(attribute.key, "=", attribute.value)
```

`Map.load` raises `plumeview.map.MapError` for files it cannot read, and
`plumeview.elvl.ElvlError` for malformed metadata. `Map.empty()` gives a
map with no tiles. `plumeview.map.decode_tile` splits one packed tile
record into `(x, y, tile_id)`.

Extended level data can be read from the raw bytes:

```python
from plumeview.elvl import Region, read_elvl

with open("arena.lvl", "rb") as handle:
    chunks = read_elvl(handle.read())

for chunk in chunks:
    if isinstance(chunk, Region):
        print(chunk.name, chunk.flags, chunk.tile_count)
```

`read_elvl` returns `Attribute`, `Region` and `OtherChunk` objects in file
order, and an empty list for files with no eLVL data. A `Region` offers
`in_region(x, y)`, `get_tiles()` and the `RegionFlags` it was given.

Other modules:

- `plumeview.camera.Camera` holds the view position and scale (world
  units per pixel), builds the orthographic projection and view matrices,
  and converts screen positions to world positions with `unproject`.
- `plumeview.renderer.MapRenderer` splits a map's tileset into per-tile
  layers, copies its tile ids, and computes the model-view-projection
  matrix from a camera (`uniform_bytes` gives it as column-major float32).
- `plumeview.viewer.Viewer` keeps the camera, cursor and drag state, and
  `frame()` renders the current view as an RGB array.

## What it does not do

- It only views maps; it cannot edit or save them.
- Rendering is done in software with numpy, not on the GPU.
- Of the region metadata, only the name, the tiles and the base,
  no-antiwarp, no-weapons and no-flags markers are read; other region
  entries are skipped.