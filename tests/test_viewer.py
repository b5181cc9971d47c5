import numpy as np
import pytest

from plumeview.map import Map
from plumeview.viewer import DEFAULT_SCALE, Viewer, main

WIDTH, HEIGHT = 800, 600


@pytest.fixture
def viewer():
    return Viewer(Map.empty(), WIDTH, HEIGHT)


def test_initial_camera(viewer):
    assert viewer.camera.scale == pytest.approx(1.0 / 16.0)
    assert list(viewer.camera.position) == [0.0, 0.0]
    assert viewer.drag_anchor is None


def test_resize_to_zero_disables_drawing(viewer):
    assert viewer.resize(0, 600) is False
    assert viewer.step() is False
    assert viewer.resize(640, 480) is True
    assert viewer.step() is True
    assert list(viewer.camera.surface_dim) == [640.0, 480.0]


def test_step_updates_mvp(viewer):
    viewer.camera.position = np.array([12.0, 34.0])
    viewer.step()
    expected = viewer.camera.projection @ viewer.camera.view()
    assert np.allclose(viewer.renderer.mvp, expected)


def test_drag_moves_camera_against_cursor(viewer):
    viewer.move_cursor(100, 100)
    viewer.press()
    viewer.move_cursor(116, 132)
    viewer.step()
    scale = viewer.camera.scale
    assert viewer.camera.position[0] == pytest.approx(-16 * scale)
    assert viewer.camera.position[1] == pytest.approx(-32 * scale)
    assert viewer.drag_anchor == (116.0, 132.0)

    before = viewer.camera.position.copy()
    viewer.step()
    assert np.allclose(viewer.camera.position, before)


def test_release_stops_drag(viewer):
    viewer.move_cursor(10, 10)
    viewer.press()
    viewer.release()
    viewer.move_cursor(200, 200)
    viewer.step()
    assert list(viewer.camera.position) == [0.0, 0.0]


@pytest.mark.parametrize("dy", [1.0, -1.0, 2.0])
def test_scroll_keeps_cursor_world_point(viewer, dy):
    viewer.move_cursor(123, 456)
    before = viewer.camera.unproject(viewer.mouse_position)
    old_scale = viewer.camera.scale
    viewer.scroll(dy)
    after = viewer.camera.unproject(viewer.mouse_position)
    assert np.allclose(before, after)
    assert viewer.camera.scale == pytest.approx(old_scale * (1 - dy / 5))


def test_scroll_at_zero_scale_stays_zero(viewer):
    viewer.camera.set_scale(0.0)
    viewer.scroll(1.0)
    assert viewer.camera.scale == 0.0


def test_frame_of_empty_map_is_black(viewer):
    image = viewer.frame()
    assert image.shape == (HEIGHT, WIDTH, 3)
    assert not image.any()


def test_frame_draws_tile_under_centre():
    level = Map.empty()
    level.tiles[0, 0] = 1
    viewer = Viewer(level, WIDTH, HEIGHT)
    viewer.renderer.tileset[0] = (255, 0, 0, 255)
    viewer.camera.position = np.array([0.5, 0.5])

    image = viewer.frame()
    assert tuple(image[HEIGHT // 2, WIDTH // 2]) == (255, 0, 0)
    assert tuple(image[0, 0]) == (0, 0, 0)


def test_frame_of_hidden_viewer_is_empty(viewer):
    viewer.resize(0, 0)
    assert viewer.frame().size == 0


def test_default_scale_constant():
    viewer = Viewer(Map.empty(), 10, 10)
    assert viewer.camera.scale == DEFAULT_SCALE


def test_main_reports_missing_map(tmp_path, capsys):
    assert main([str(tmp_path / "missing.lvl")]) == 1
    assert "plumeview" in capsys.readouterr().err