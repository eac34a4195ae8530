"""Vectorized whole-frame renderer built on TensorFlow."""

from __future__ import annotations

import logging

import numpy as np
import tensorflow as tf

from .color import PALETTE, BLACK, hue_degrees
from .evaluator import HORIZON, MAX_ITERATIONS
from .viewport import prepare_render

logger = logging.getLogger(__name__)

NOT_ESCAPED = -1


@tf.function
def _escape_step(
    i: tf.Tensor, zs: tf.Tensor, cs: tf.Tensor, escaped_at: tf.Tensor, active: tf.Tensor
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor]:
    """Advance the orbits that have not escaped yet by one iteration."""

    zs = tf.where(active, zs * zs + cs, zs)
    horizon = tf.cast(HORIZON, tf.float64)
    newly_escaped = tf.logical_and(active, tf.abs(zs) > horizon)
    escaped_at = tf.where(newly_escaped, tf.fill(tf.shape(escaped_at), i), escaped_at)
    active = tf.logical_and(active, tf.logical_not(newly_escaped))
    return zs, escaped_at, active


@tf.function
def _escape_run(cs: tf.Tensor, max_iterations: tf.Tensor) -> tf.Tensor:
    """Return the escape iteration of every point, ``NOT_ESCAPED`` inside the set."""

    max_iterations = tf.cast(max_iterations, tf.int32)
    i = tf.constant(0, dtype=tf.int32)
    zs = tf.zeros_like(cs)
    escaped_at = tf.fill(tf.shape(cs), tf.constant(NOT_ESCAPED, dtype=tf.int32))
    active = tf.ones(tf.shape(cs), tf.bool)

    def cond(i, zs, escaped_at, active):
        return tf.logical_and(tf.less(i, max_iterations), tf.reduce_any(active))

    def body(i, zs, escaped_at, active):
        zs, escaped_at, active = _escape_step(i, zs, cs, escaped_at, active)
        return i + 1, zs, escaped_at, active

    _, _, escaped_at, _ = tf.while_loop(cond, body, (i, zs, escaped_at, active))
    return escaped_at


def escape_iterations(
    xs: np.ndarray, ys: np.ndarray, *, max_iterations: int = MAX_ITERATIONS, device: str = "/CPU:0"
) -> np.ndarray:
    """Escape iteration for each point of the ``ys`` x ``xs`` coordinate grid."""

    with tf.device(device):
        x_tf = tf.convert_to_tensor(xs, dtype=tf.float64)
        y_tf = tf.convert_to_tensor(ys, dtype=tf.float64)
        X, Y = tf.meshgrid(x_tf, y_tf)
        cs = tf.complex(X, Y)
        escaped_at = _escape_run(cs, tf.constant(max_iterations, dtype=tf.int32))
    return escaped_at.numpy()


def colorize(escaped_at: np.ndarray) -> np.ndarray:
    """Look up the palette color of each escape iteration."""

    rgba = PALETTE[hue_degrees(np.maximum(escaped_at, 0))]
    rgba[escaped_at == NOT_ESCAPED] = BLACK
    return rgba


def render_tensor(
    buffer: np.ndarray,
    top_left: complex,
    bottom_right: complex,
    *,
    max_iterations: int = MAX_ITERATIONS,
    device: str = "/CPU:0",
) -> int:
    """Render every pixel of ``buffer`` in one vectorized pass."""

    grid, viewport = prepare_render(buffer, top_left, bottom_right)
    tl, br = viewport.top_left, viewport.bottom_right

    # Same operation order as map_pixel so coordinates match the scalar paths.
    cols = np.arange(grid.width, dtype=np.float64)
    rows = np.arange(grid.height, dtype=np.float64)
    xs = tl.real + (br.real - tl.real) * cols / grid.width
    ys = tl.imag + (br.imag - tl.imag) * rows / grid.height

    logger.debug("tensor render of %dx%d pixels on %s", grid.width, grid.height, device)
    escaped_at = escape_iterations(xs, ys, max_iterations=max_iterations, device=device)
    buffer[...] = colorize(escaped_at)
    return grid.size
