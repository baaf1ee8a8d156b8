import numpy as np
import pytest

from product_cutout.errors import DimensionMismatch
from product_cutout.processing.fusion import binarize, dilate, fuse, smooth, union
from product_cutout.processing.raster import Mask


def _mask(shape, lit=()):
    samples = np.zeros(shape, dtype=np.uint8)
    for y, x in lit:
        samples[y, x] = 255
    return Mask.from_array(samples)


def _square(size: int, start: int, stop: int) -> Mask:
    samples = np.zeros((size, size), dtype=np.uint8)
    samples[start:stop, start:stop] = 255
    return Mask.from_array(samples)


def test_union_is_logical_or() -> None:
    first = _mask((2, 2), lit=[(0, 0)])
    second = _mask((2, 2), lit=[(1, 1)])

    assert union(first, second).samples.tolist() == [[255, 0], [0, 255]]


def test_union_rejects_different_sizes() -> None:
    with pytest.raises(DimensionMismatch):
        union(_mask((2, 2)), _mask((3, 2)))


def test_dilate_grows_by_one_ring() -> None:
    dilated = dilate(_mask((5, 5), lit=[(2, 2)]))

    expected = np.zeros((5, 5), dtype=np.uint8)
    expected[1:4, 1:4] = 255
    assert np.array_equal(dilated.samples, expected)


def test_dilate_at_border_stays_in_bounds() -> None:
    dilated = dilate(_mask((3, 3), lit=[(0, 0)]))

    assert dilated.samples.tolist() == [[255, 255, 0], [255, 255, 0], [0, 0, 0]]


def test_smooth_produces_intermediate_values() -> None:
    blurred = smooth(_square(15, 4, 11))

    assert not blurred.is_binary()
    assert blurred.samples[7, 7] > 128
    assert blurred.samples[0, 0] < 10


def test_binarize_threshold_is_inclusive() -> None:
    samples = np.array([[127, 128, 200]], dtype=np.uint8)

    assert binarize(Mask.from_array(samples)).samples.tolist() == [[0, 255, 255]]


def test_fuse_with_itself_equals_single_mask_chain() -> None:
    mask = _square(20, 6, 12)

    assert np.array_equal(fuse(mask, mask).samples, binarize(smooth(dilate(mask))).samples)


def test_fuse_returns_binary_mask_covering_the_object() -> None:
    edge = _mask((30, 30))
    color = _square(30, 10, 20)

    fused = fuse(edge, color)

    assert fused.is_binary()
    assert fused.samples[15, 15] == 255
    assert fused.samples[0, 0] == 0
    assert fused.samples[29, 29] == 0


def test_fuse_soft_alpha_keeps_blurred_values() -> None:
    fused = fuse(_mask((20, 20)), _square(20, 8, 12), soft_alpha=True)

    assert not fused.is_binary()


def test_fuse_of_empty_masks_is_empty() -> None:
    assert not fuse(_mask((8, 8)), _mask((8, 8))).samples.any()


def test_fuse_rejects_mismatched_masks() -> None:
    with pytest.raises(DimensionMismatch):
        fuse(_mask((4, 4)), _mask((4, 5)))
