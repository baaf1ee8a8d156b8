from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np
from PIL import Image

from ..config import QUALITY_MAX, QUALITY_MIN
from ..errors import InvalidQualityError
from .raster import ImageBuffer, encode_image


logger = logging.getLogger(__name__)

DEFAULT_QUALITY = 90
DEFAULT_MAX_DIMENSION = 1000
PALETTE_COLORS = 256
LOSSLESS_ABOVE = 95
NEAR_LOSSLESS_ABOVE = 90

_MIMETYPES = {"PNG": "image/png", "WEBP": "image/webp"}


@dataclass(frozen=True)
class OptimizedImage:
    data: bytes
    format: str
    size: Tuple[int, int]

    @property
    def mimetype(self) -> str:
        return _MIMETYPES[self.format]

    @property
    def extension(self) -> str:
        return self.format.lower()


def fit_inside(width: int, height: int, cap: int) -> Tuple[int, int]:
    """Largest size within ``cap`` x ``cap`` keeping the aspect ratio; never upscales."""
    if cap <= 0:
        raise ValueError(f"Max dimension must be positive, got {cap}")
    if width <= cap and height <= cap:
        return width, height
    scale = min(cap / width, cap / height)
    return max(1, min(cap, round(width * scale))), max(1, min(cap, round(height * scale)))


def has_transparency(buffer: ImageBuffer) -> bool:
    return buffer.has_alpha and bool((buffer.array[:, :, 3] < 255).any())


def _is_binary(samples: np.ndarray) -> bool:
    return bool(np.isin(samples, (0, 255)).all())


def resize(buffer: ImageBuffer, max_dimension: int = DEFAULT_MAX_DIMENSION) -> ImageBuffer:
    target = fit_inside(buffer.width, buffer.height, max_dimension)
    if target == buffer.size:
        return buffer
    logger.debug("optimizer: resizing %sx%s -> %sx%s", *buffer.size, *target)
    resized = ImageBuffer.from_image(buffer.to_image().resize(target, Image.Resampling.LANCZOS))
    if buffer.has_alpha and _is_binary(buffer.array[:, :, 3]):
        # Keep a hard-edged mask hard after resampling.
        array = np.array(resized.array)
        array[:, :, 3] = np.where(array[:, :, 3] >= 128, 255, 0)
        resized = ImageBuffer(array, color_space=resized.color_space)
    return resized


def _exact_palette(rgba: np.ndarray) -> Image.Image:
    packed = np.ascontiguousarray(rgba).view(np.uint32)[:, :, 0]
    colors, indices = np.unique(packed, return_inverse=True)
    indexed = Image.fromarray(indices.reshape(packed.shape).astype(np.uint8))
    indexed.putpalette(colors.view(np.uint8).tobytes(), rawmode="RGBA")
    return indexed


def _palette_with_transparent_index(img: Image.Image, alpha: np.ndarray) -> Image.Image:
    quantized = img.convert("RGB").quantize(colors=PALETTE_COLORS - 1, method=Image.Quantize.MEDIANCUT)
    indices = np.asarray(quantized).astype(np.uint16) + 1
    indices[alpha == 0] = 0
    rgb_palette = quantized.getpalette("RGB")[: (PALETTE_COLORS - 1) * 3]
    rgba_palette = [0, 0, 0, 0]
    for offset in range(0, len(rgb_palette), 3):
        rgba_palette.extend(rgb_palette[offset:offset + 3])
        rgba_palette.append(255)
    indexed = Image.fromarray(indices.astype(np.uint8))
    indexed.putpalette(rgba_palette, rawmode="RGBA")
    return indexed


def _encode_transparent(buffer: ImageBuffer) -> bytes:
    img = buffer.to_image()
    alpha = buffer.array[:, :, 3]
    png_options = {"optimize": True, "compress_level": 9}

    if img.getcolors(PALETTE_COLORS) is not None:
        logger.debug("optimizer: exact %s-color palette", PALETTE_COLORS)
        return encode_image(_exact_palette(buffer.array), "PNG", **png_options)

    if _is_binary(alpha):
        logger.debug("optimizer: quantized palette with a transparent index")
        return encode_image(_palette_with_transparent_index(img, alpha), "PNG", **png_options)

    quantized = img.quantize(colors=PALETTE_COLORS, method=Image.Quantize.FASTOCTREE)
    if np.array_equal(np.asarray(quantized.convert("RGBA"))[:, :, 3], alpha):
        logger.debug("optimizer: octree palette preserved alpha")
        return encode_image(quantized, "PNG", **png_options)

    logger.debug("optimizer: palette would alter alpha, writing truecolor RGBA")
    return encode_image(img, "PNG", **png_options)


def _encode_opaque(buffer: ImageBuffer, quality: int) -> bytes:
    img = buffer.to_image()
    if img.mode != "RGB":
        img = img.convert("RGB")
    options = {"method": 6, "alpha_quality": 100}
    if quality > LOSSLESS_ABOVE:
        options.update(lossless=True, quality=100, exact=True)
    elif quality > NEAR_LOSSLESS_ABOVE:
        # libwebp's near_lossless knob is not exposed by Pillow; top lossy quality stands in.
        options.update(quality=100)
    else:
        options.update(quality=quality)
    logger.debug("optimizer: webp options %s", options)
    return encode_image(img, "WEBP", **options)


def validate_quality(quality) -> int:
    try:
        value = int(quality)
    except (TypeError, ValueError, OverflowError) as exc:
        raise InvalidQualityError(f"quality must be an integer, got {quality!r}") from exc
    if not QUALITY_MIN <= value <= QUALITY_MAX:
        raise InvalidQualityError(f"quality must be within {QUALITY_MIN}..{QUALITY_MAX}, got {quality}")
    return value


def optimize(
    buffer: ImageBuffer,
    quality: int = DEFAULT_QUALITY,
    max_dimension: int = DEFAULT_MAX_DIMENSION,
) -> OptimizedImage:
    """Resize to fit ``max_dimension`` and re-encode for size.

    Buffers with any alpha below 255 become palette PNGs whose alpha decodes back
    exactly; opaque buffers become WebP at ``quality``.
    """
    quality = validate_quality(quality)
    resized = resize(buffer, max_dimension)
    if has_transparency(resized):
        return OptimizedImage(_encode_transparent(resized), "PNG", resized.size)
    return OptimizedImage(_encode_opaque(resized, quality), "WEBP", resized.size)
