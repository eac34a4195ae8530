"""Viewport geometry and the image buffers renders are written into."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .errors import ConfigurationError

CHANNELS = 4


@dataclass(frozen=True)
class PixelGrid:
    """Pixel dimensions of a single render."""

    width: int
    height: int

    def validate(self) -> "PixelGrid":
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError(f"pixel grid must be non-empty, got {self.width}x{self.height}")
        return self

    @property
    def size(self) -> int:
        return self.width * self.height

    @classmethod
    def of(cls, buffer: np.ndarray) -> "PixelGrid":
        """Read the grid of ``buffer``, rejecting anything that is not an RGBA frame."""

        if buffer is None:
            raise ConfigurationError("image buffer is missing")
        shape = getattr(buffer, "shape", ())
        if len(shape) != 3 or shape[2] != CHANNELS:
            raise ConfigurationError(f"image buffer must have shape (height, width, {CHANNELS}), got {shape}")
        return cls(width=int(shape[1]), height=int(shape[0])).validate()


@dataclass(frozen=True)
class Viewport:
    """Rectangle of the complex plane spanned by two opposite corners."""

    top_left: complex
    bottom_right: complex

    def validate(self) -> "Viewport":
        if self.bottom_right.real == self.top_left.real or self.bottom_right.imag == self.top_left.imag:
            raise ConfigurationError(f"viewport {self.top_left} .. {self.bottom_right} has a zero extent")
        return self

    def map_pixel(self, x: int, y: int, grid: PixelGrid) -> complex:
        return map_pixel(x, y, grid.width, grid.height, self.top_left, self.bottom_right)


def map_pixel(x: int, y: int, width: int, height: int, top_left: complex, bottom_right: complex) -> complex:
    """Linearly interpolate pixel ``(x, y)`` between the viewport corners."""

    re = top_left.real + (bottom_right.real - top_left.real) * x / width
    im = top_left.imag + (bottom_right.imag - top_left.imag) * y / height
    return complex(re, im)


def new_image_buffer(width: int, height: int) -> np.ndarray:
    """Allocate a transparent RGBA buffer; rendered pixels are always opaque."""

    grid = PixelGrid(width, height).validate()
    return np.zeros((grid.height, grid.width, CHANNELS), dtype=np.uint8)


def prepare_render(buffer: np.ndarray, top_left: complex, bottom_right: complex) -> tuple[PixelGrid, Viewport]:
    grid = PixelGrid.of(buffer)
    viewport = Viewport(complex(top_left), complex(bottom_right)).validate()
    return grid, viewport
