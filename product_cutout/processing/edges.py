from __future__ import annotations

from PIL import Image

from .raster import ConvolutionKernel, ImageBuffer, Mask


CONTRAST_GAIN = 1.5
CONTRAST_BIAS = -0.1
EDGE_OFFSET = 128

LAPLACIAN_KERNEL = ConvolutionKernel(
    weights=(-1, -1, -1, -1, 8, -1, -1, -1, -1),
    size=3,
    scale=1,
    offset=EDGE_OFFSET,
)


def grayscale(buffer: ImageBuffer) -> Image.Image:
    """Luminance-weighted single channel (ITU-R 601-2 weights)."""
    if buffer.channel_count == 1:
        return buffer.to_image()
    img = buffer.to_image()
    if img.mode == "RGBA":
        img = img.convert("RGB")
    return img.convert("L")


def stretch_contrast(
    gray: Image.Image, gain: float = CONTRAST_GAIN, bias: float = CONTRAST_BIAS
) -> Image.Image:
    offset = bias * 255
    lut = [min(255, max(0, int(round(value * gain + offset)))) for value in range(256)]
    return gray.point(lut)


def threshold_above(mask: Mask, level: int) -> Mask:
    return Mask.from_array((mask.samples > level).astype("uint8") * 255)


def edge_mask(buffer: ImageBuffer) -> Mask:
    """Binary mask of strong local intensity change.

    The Laplacian response is centred on the kernel offset, so a flat region
    convolves to exactly ``EDGE_OFFSET`` and only samples above it count as edges.
    """
    gray = stretch_contrast(grayscale(buffer))
    response = LAPLACIAN_KERNEL.apply(Mask.from_image(gray))
    return threshold_above(response, EDGE_OFFSET)
