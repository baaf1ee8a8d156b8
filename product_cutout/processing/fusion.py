from __future__ import annotations

from typing import Sequence

import numpy as np
from PIL import ImageFilter

from ..errors import DimensionMismatch
from .raster import ConvolutionKernel, Mask


DILATION_KERNEL = ConvolutionKernel(weights=(1,) * 9, size=3, scale=1, offset=0)
BLUR_RADII = (1, 2)
ALPHA_THRESHOLD = 128


def _check_same_size(first: Mask, second: Mask) -> None:
    if first.size != second.size:
        raise DimensionMismatch(f"Mask sizes differ: {first.size} vs {second.size}")


def union(first: Mask, second: Mask) -> Mask:
    _check_same_size(first, second)
    hits = (first.samples == 255) | (second.samples == 255)
    return Mask.from_array(hits.astype(np.uint8) * 255)


def dilate(mask: Mask) -> Mask:
    """Grow foreground by one pixel ring: any lit 3x3 neighbour lights the centre."""
    neighbourhood = DILATION_KERNEL.apply(mask)
    return Mask.from_array((neighbourhood.samples > 0).astype(np.uint8) * 255)


def smooth(mask: Mask, radii: Sequence[float] = BLUR_RADII) -> Mask:
    img = mask.to_image()
    for radius in radii:
        img = img.filter(ImageFilter.GaussianBlur(radius))
    return Mask.from_image(img)


def binarize(mask: Mask, threshold: int = ALPHA_THRESHOLD) -> Mask:
    return Mask.from_array((mask.samples >= threshold).astype(np.uint8) * 255)


def fuse(edge: Mask, color: Mask, soft_alpha: bool = False) -> Mask:
    """Combine the edge and color masks into the final alpha mask.

    Dilation runs before the blur so smoothing softens the expanded boundary
    instead of eating it back. With ``soft_alpha`` the blurred confidence is
    returned as-is.
    """
    fused = smooth(dilate(union(edge, color)))
    if soft_alpha:
        return fused
    return binarize(fused)
