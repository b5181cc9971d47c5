import numpy as np
import pytest
from PIL import Image

from plumeview.camera import Camera
from plumeview.map import Map
from plumeview.renderer import MapRenderer, create_vertices


def _tileset_image():
    texels = np.zeros((160, 304, 4), dtype=np.uint8)
    for tile_id in range(190):
        tx = (tile_id % 19) * 16
        ty = (tile_id // 19) * 16
        texels[ty:ty + 16, tx:tx + 16, 0] = tile_id
        texels[ty:ty + 16, tx:tx + 16, 3] = 255
    return Image.fromarray(texels, "RGBA")


def test_vertices_cover_map():
    vertices = create_vertices()
    assert vertices.shape == (6, 2)
    assert vertices.dtype == np.float32
    assert vertices.min() == -1.0
    assert vertices.max() == 1025.0
    assert tuple(vertices[0]) == (-1.0, -1.0)
    assert tuple(vertices[5]) == (1025.0, 1025.0)


def test_new_renderer_starts_empty():
    renderer = MapRenderer()
    assert not renderer.tiledata.any()
    assert not renderer.tileset.any()
    assert np.array_equal(renderer.mvp, np.identity(4))


def test_set_map_splits_tileset():
    loaded = Map.empty()
    loaded.tileset = _tileset_image()
    renderer = MapRenderer()
    renderer.set_map(loaded)

    assert renderer.tileset.shape == (190, 16, 16, 4)
    for tile_id in (0, 18, 19, 100, 189):
        layer = renderer.tileset[tile_id]
        assert (layer[:, :, 0] == tile_id).all()
        assert (layer[:, :, 3] == 255).all()


def test_set_map_copies_tiles():
    loaded = Map.empty()
    loaded.tiles[5, 9] = 42
    renderer = MapRenderer()
    renderer.set_map(loaded)
    assert renderer.tiledata[5, 9] == 42
    assert np.array_equal(renderer.tiledata, loaded.tiles)

    loaded.tiles[5, 9] = 1
    assert renderer.tiledata[5, 9] == 42


def test_set_map_without_tileset_keeps_layers():
    renderer = MapRenderer()
    renderer.set_map(Map.empty())
    assert not renderer.tileset.any()


def test_wrong_tileset_width_raises():
    loaded = Map.empty()
    loaded.tileset = Image.new("RGBA", (100, 160))
    with pytest.raises(ValueError):
        MapRenderer().set_map(loaded)


def test_update_centres_camera_position():
    camera = Camera(800, 600, (3.0, 4.0), 1.0 / 16.0)
    renderer = MapRenderer()
    renderer.update(camera)

    assert np.allclose(renderer.mvp, camera.projection @ camera.view())
    clip = renderer.mvp @ np.array([3.0, 4.0, 0.0, 1.0])
    assert np.allclose(clip[:2], [0.0, 0.0])


def test_uniform_bytes_are_column_major():
    camera = Camera(640, 480, (10.0, -2.0), 0.5)
    renderer = MapRenderer()
    renderer.update(camera)

    raw = renderer.uniform_bytes
    assert len(raw) == 64
    decoded = np.frombuffer(raw, dtype="<f4").reshape(4, 4).T
    assert np.allclose(decoded, renderer.mvp, atol=1e-6)