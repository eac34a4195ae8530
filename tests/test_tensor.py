"""
Tests for the vectorized TensorFlow render path
"""

import numpy as np
import pytest

tf = pytest.importorskip("tensorflow")

from escapetime.color import BLACK, escape_color
from escapetime.evaluator import escape_iteration, evaluate
from escapetime.renderer import render_sequential
from escapetime.tensor import NOT_ESCAPED, colorize, escape_iterations, render_tensor
from escapetime.viewport import new_image_buffer

TOP_LEFT = complex(-2.2, -1.2)
BOTTOM_RIGHT = complex(1, 1.2)


def test_known_points_match_scalar_evaluator():
    xs = np.array([0.0, 10.0, 1.0, 2.0, -1.0, -2.5])
    ys = np.array([0.0])
    escaped_at = escape_iterations(xs, ys)
    assert escaped_at.shape == (1, 6)
    assert escaped_at[0].tolist() == [NOT_ESCAPED, 0, 2, 1, NOT_ESCAPED, 2]


def test_imaginary_axis_is_rows():
    escaped_at = escape_iterations(np.array([0.0]), np.array([0.0, 10.0]))
    assert escaped_at[:, 0].tolist() == [NOT_ESCAPED, escape_iteration(10j)]


def test_iteration_budget_is_respected():
    escaped_at = escape_iterations(np.array([1.0]), np.array([0.0]), max_iterations=2)
    assert escaped_at[0, 0] == NOT_ESCAPED


def test_colorize_uses_the_shared_palette():
    rgba = colorize(np.array([[NOT_ESCAPED, 0, 1, 360]], dtype=np.int32))
    assert tuple(rgba[0, 0]) == BLACK
    assert tuple(rgba[0, 1]) == escape_color(0)
    assert tuple(rgba[0, 2]) == escape_color(1)
    assert tuple(rgba[0, 3]) == escape_color(360)


def test_render_tensor_fills_buffer():
    buffer = new_image_buffer(32, 24)
    assert render_tensor(buffer, TOP_LEFT, BOTTOM_RIGHT, max_iterations=100) == 32 * 24
    assert np.all(buffer[..., 3] == 255)
    assert tuple(buffer[0, 0]) == evaluate(TOP_LEFT, 100)


def test_render_tensor_agrees_with_sequential():
    """Chaotic orbits on the boundary may round differently, everything else matches"""
    expected = new_image_buffer(32, 24)
    render_sequential(expected, TOP_LEFT, BOTTOM_RIGHT, max_iterations=100)
    actual = new_image_buffer(32, 24)
    render_tensor(actual, TOP_LEFT, BOTTOM_RIGHT, max_iterations=100)

    matching = np.all(actual == expected, axis=-1)
    assert matching.mean() >= 0.99
