import numpy as np
from PIL import Image

from product_cutout.processing.edges import LAPLACIAN_KERNEL, edge_mask, grayscale, stretch_contrast
from product_cutout.processing.raster import ImageBuffer


def test_flat_image_has_no_edges() -> None:
    flat = ImageBuffer(np.full((12, 9, 3), (120, 80, 200), dtype=np.uint8))

    mask = edge_mask(flat)

    assert mask.size == flat.size
    assert not mask.samples.any()


def test_single_bright_pixel_is_an_edge() -> None:
    array = np.zeros((5, 5, 3), dtype=np.uint8)
    array[2, 2] = (255, 255, 255)

    mask = edge_mask(ImageBuffer(array))

    assert mask.samples[2, 2] == 255
    assert int((mask.samples == 255).sum()) == 1
    assert mask.is_binary()


def test_step_edge_marks_bright_side() -> None:
    array = np.zeros((6, 8, 3), dtype=np.uint8)
    array[:, 4:] = (230, 230, 230)

    mask = edge_mask(ImageBuffer(array))

    assert (mask.samples[:, 4] == 255).all()
    assert not mask.samples[:, :3].any()
    assert not mask.samples[:, 6:].any()


def test_edge_mask_ignores_alpha_channel() -> None:
    rgba = np.zeros((4, 4, 4), dtype=np.uint8)
    rgba[:, :, :3] = 90
    rgba[1, 1, 3] = 255

    assert not edge_mask(ImageBuffer(rgba)).samples.any()


def test_stretch_contrast_lut() -> None:
    gray = Image.new("L", (3, 1))
    gray.putdata([17, 101, 200])

    stretched = stretch_contrast(gray)

    assert list(stretched.getdata()) == [0, 126, 255]


def test_grayscale_uses_luminance_weights() -> None:
    green = ImageBuffer(np.full((1, 1, 3), (0, 255, 0), dtype=np.uint8))
    blue = ImageBuffer(np.full((1, 1, 3), (0, 0, 255), dtype=np.uint8))

    assert grayscale(green).getpixel((0, 0)) > grayscale(blue).getpixel((0, 0))


def test_laplacian_kernel_shape() -> None:
    assert LAPLACIAN_KERNEL.size == 3
    assert sum(LAPLACIAN_KERNEL.weights) == 0
    assert LAPLACIAN_KERNEL.offset == 128
