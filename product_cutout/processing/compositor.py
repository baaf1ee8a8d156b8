from __future__ import annotations

import numpy as np

from ..errors import DimensionMismatch
from .raster import ImageBuffer, Mask, to_rgb


def apply_alpha(image: ImageBuffer, mask: Mask) -> ImageBuffer:
    """Return an RGBA buffer whose alpha is ``mask``; any existing alpha is replaced."""
    if image.size != mask.size:
        raise DimensionMismatch(f"Image is {image.size} but mask is {mask.size}")
    rgb = to_rgb(image).array
    rgba = np.concatenate((rgb, mask.array), axis=2)
    return ImageBuffer(rgba, color_space="srgb")
