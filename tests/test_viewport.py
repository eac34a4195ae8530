"""
Unit tests for viewport geometry, pixel mapping and image buffers
"""

import numpy as np
import pytest

from escapetime.errors import ConfigurationError
from escapetime.viewport import PixelGrid, Viewport, map_pixel, new_image_buffer, prepare_render

TOP_LEFT = complex(-2.2, -1.2)
BOTTOM_RIGHT = complex(1, 1.2)


def test_corner_pixel_maps_to_top_left():
    assert map_pixel(0, 0, 800, 600, TOP_LEFT, BOTTOM_RIGHT) == TOP_LEFT


def test_center_pixel_maps_to_viewport_center():
    c = map_pixel(400, 300, 800, 600, TOP_LEFT, BOTTOM_RIGHT)
    assert c.real == pytest.approx(-0.6)
    assert c.imag == pytest.approx(0.0, abs=1e-12)


def test_axes_are_interpolated_independently():
    """Moving along x never changes the imaginary part and vice versa"""
    row = {map_pixel(x, 7, 80, 60, TOP_LEFT, BOTTOM_RIGHT).imag for x in range(80)}
    column = {map_pixel(11, y, 80, 60, TOP_LEFT, BOTTOM_RIGHT).real for y in range(60)}
    assert len(row) == 1
    assert len(column) == 1


def test_mapping_is_reproducible():
    first = [map_pixel(x, y, 13, 7, TOP_LEFT, BOTTOM_RIGHT) for x in range(13) for y in range(7)]
    second = [map_pixel(x, y, 13, 7, TOP_LEFT, BOTTOM_RIGHT) for x in range(13) for y in range(7)]
    assert first == second


def test_viewport_map_pixel_delegates():
    viewport = Viewport(TOP_LEFT, BOTTOM_RIGHT)
    grid = PixelGrid(32, 24)
    assert viewport.map_pixel(5, 9, grid) == map_pixel(5, 9, 32, 24, TOP_LEFT, BOTTOM_RIGHT)


@pytest.mark.parametrize("bottom_right", [complex(-2.2, 1.2), complex(1, -1.2), TOP_LEFT])
def test_zero_extent_viewport_is_rejected(bottom_right):
    with pytest.raises(ConfigurationError):
        Viewport(TOP_LEFT, bottom_right).validate()


def test_inverted_viewport_is_allowed():
    viewport = Viewport(BOTTOM_RIGHT, TOP_LEFT).validate()
    assert viewport.top_left == BOTTOM_RIGHT


@pytest.mark.parametrize("width, height", [(0, 10), (10, 0), (-1, 5)])
def test_empty_grid_is_rejected(width, height):
    with pytest.raises(ConfigurationError):
        PixelGrid(width, height).validate()


def test_configuration_error_is_a_value_error():
    with pytest.raises(ValueError):
        new_image_buffer(0, 0)


def test_new_buffer_is_transparent_rgba():
    buffer = new_image_buffer(8, 5)
    assert buffer.shape == (5, 8, 4)
    assert buffer.dtype == np.uint8
    assert not buffer.any()


def test_grid_is_read_from_buffer_shape():
    grid = PixelGrid.of(new_image_buffer(8, 5))
    assert grid == PixelGrid(width=8, height=5)
    assert grid.size == 40


@pytest.mark.parametrize("buffer", [
    None,
    np.zeros((4, 4), dtype=np.uint8),
    np.zeros((4, 4, 3), dtype=np.uint8),
    np.zeros((0, 4, 4), dtype=np.uint8),
])
def test_unusable_buffers_are_rejected(buffer):
    with pytest.raises(ConfigurationError):
        PixelGrid.of(buffer)


def test_prepare_render_coerces_corners_to_complex():
    grid, viewport = prepare_render(new_image_buffer(3, 2), -2 - 1j, 1 + 1j)
    assert grid == PixelGrid(3, 2)
    assert viewport == Viewport(complex(-2, -1), complex(1, 1))


def test_prepare_render_rejects_real_only_corners():
    """Two real corners span no imaginary extent"""
    with pytest.raises(ConfigurationError):
        prepare_render(new_image_buffer(3, 2), -2, 1)
