"""Color helpers mapping escape iterations onto opaque RGBA colors."""

from __future__ import annotations

import numpy as np
from matplotlib import colors as mcolors

Color = tuple[int, int, int, int]

OPAQUE = 255
BLACK: Color = (0, 0, 0, OPAQUE)
HUE_STEP = 7


def _quantize(rgb: np.ndarray) -> np.ndarray:
    return (rgb * 255 + 0.5).astype(np.uint8)


def hsv_to_rgb(h: float, s: float, v: float) -> tuple[int, int, int]:
    """Convert a hue fraction, saturation and value to 8-bit RGB channels."""

    rgb = _quantize(mcolors.hsv_to_rgb(np.array([h, s, v], dtype=np.float64)))
    return int(rgb[0]), int(rgb[1]), int(rgb[2])


def _build_palette() -> np.ndarray:
    degrees = np.arange(360, dtype=np.float64)
    hsv = np.stack((degrees / 360.0, np.ones(360), np.ones(360)), axis=-1)
    rgb = _quantize(mcolors.hsv_to_rgb(hsv))
    alpha = np.full((360, 1), OPAQUE, dtype=np.uint8)
    return np.concatenate((rgb, alpha), axis=1)


# One RGBA entry per hue degree, shared by the scalar and vectorized paths.
PALETTE = _build_palette()
PALETTE.setflags(write=False)


def hue_degrees(iteration):
    return (iteration * HUE_STEP) % 360


def escape_color(iteration: int) -> Color:
    """Return the color of a point that escaped on ``iteration``."""

    r, g, b, a = PALETTE[hue_degrees(iteration)]
    return int(r), int(g), int(b), int(a)
