"""Encoding rendered buffers to image files."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import PIL.Image

from .errors import ImageWriteError


def _pil_format_name(ext: str) -> str:
    upper = ext.upper()
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    return upper


def write_single_image(buffer: np.ndarray, output_path: Path, image_format: str = "png") -> Path:
    """Write an RGBA ``buffer`` to ``output_path`` using the provided format."""

    output_path = Path(output_path)
    pil_format = _pil_format_name(image_format)
    try:
        image = PIL.Image.fromarray(np.ascontiguousarray(buffer, dtype=np.uint8))
        if pil_format == "JPEG":
            image = image.convert("RGB")
        output_path.parent.mkdir(parents=True, exist_ok=True)
        image.save(str(output_path), format=pil_format)
    except (OSError, ValueError, KeyError) as exc:
        raise ImageWriteError(f"could not write {output_path}: {exc}") from exc
    return output_path
