"""A 2D camera with an orthographic projection over the tile map."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np


def orthographic_rh(left, right, bottom, top, near, far):
    """Return a right-handed orthographic projection with depth mapped to [0, 1]."""
    rcp_width = 1.0 / (right - left)
    rcp_height = 1.0 / (top - bottom)
    rcp_depth = 1.0 / (near - far)

    matrix = np.identity(4)
    matrix[0, 0] = 2.0 * rcp_width
    matrix[1, 1] = 2.0 * rcp_height
    matrix[2, 2] = rcp_depth
    matrix[0, 3] = -(left + right) * rcp_width
    matrix[1, 3] = -(top + bottom) * rcp_height
    matrix[2, 3] = rcp_depth * near
    return matrix


def _round_up_even(value: float) -> float:
    pixels = min(max(int(value), 0), 0xFFFFFFFF)
    return float((pixels + 1) & ~1)


def _build_projection(surface_width: float, surface_height: float, scale: float) -> np.ndarray:
    width = _round_up_even(surface_width)
    height = _round_up_even(surface_height)

    # The orthographic extents run from -half to +half, so the scale is halved.
    half_scale = scale * 0.5

    left = -width * half_scale
    right = width * half_scale
    bottom = height * half_scale
    top = -height * half_scale

    return orthographic_rh(left, right, bottom, top, 0.0, 1.0)


class Camera:
    """Camera looking at a world position; ``scale`` is world units per pixel."""

    def __init__(self, surface_width, surface_height, position, scale):
        self.position = np.asarray(position, dtype=float).copy()
        self.surface_dim = np.array([surface_width, surface_height], dtype=float)
        self._scale = float(scale)
        self.projection = _build_projection(surface_width, surface_height, self._scale)

    @property
    def scale(self) -> float:
        return self._scale

    def view(self) -> np.ndarray:
        """Return the matrix that moves the camera position to the origin."""
        matrix = np.identity(4)
        matrix[0, 3] = -self.position[0]
        matrix[1, 3] = -self.position[1]
        return matrix

    def set_surface_dimensions(self, surface_width, surface_height) -> None:
        self.surface_dim = np.array([surface_width, surface_height], dtype=float)
        self.projection = _build_projection(surface_width, surface_height, self._scale)

    def set_scale(self, scale) -> None:
        self._scale = float(scale)
        self.projection = _build_projection(
            self.surface_dim[0], self.surface_dim[1], self._scale
        )

    def unproject(self, screen_position: Sequence[float]) -> np.ndarray:
        """Map a pixel position on the surface to a world position."""
        screen_center = self.surface_dim * 0.5
        screen_offset = np.asarray(screen_position, dtype=float) - screen_center
        return self.position + screen_offset * self._scale