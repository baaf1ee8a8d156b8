import numpy as np

from product_cutout.processing.color import (
    ForegroundClassifier,
    HeuristicColorClassifier,
    color_mask,
    warm_product_predicate,
)
from product_cutout.processing.raster import ImageBuffer


def test_warm_predicate_on_scalars() -> None:
    assert warm_product_predicate(200, 150, 50)
    assert not warm_product_predicate(50, 50, 50)


def test_warm_predicate_thresholds_are_strict() -> None:
    assert warm_product_predicate(160, 120, 99)
    assert not warm_product_predicate(150, 120, 50)
    assert not warm_product_predicate(200, 100, 50)
    assert not warm_product_predicate(200, 150, 100)


def test_color_mask_classifies_per_pixel() -> None:
    array = np.array([[(200, 150, 50), (50, 50, 50)]], dtype=np.uint8)

    mask = color_mask(ImageBuffer(array))

    assert mask.samples.tolist() == [[255, 0]]
    assert mask.size == (2, 1)


def test_classifier_accepts_rgba_and_ignores_alpha() -> None:
    array = np.array([[(200, 150, 50, 0), (200, 150, 50, 255)]], dtype=np.uint8)

    mask = HeuristicColorClassifier().classify(ImageBuffer(array))

    assert mask.samples.tolist() == [[255, 255]]


def test_custom_predicate_swaps_profile() -> None:
    def blue_bottle(r, g, b):
        return (b > 150) & (r < 100)

    array = np.array([[(20, 40, 220), (200, 150, 50)]], dtype=np.uint8)

    mask = HeuristicColorClassifier(blue_bottle).classify(ImageBuffer(array))

    assert mask.samples.tolist() == [[255, 0]]


def test_constant_predicate_broadcasts() -> None:
    array = np.zeros((3, 4, 3), dtype=np.uint8)

    mask = HeuristicColorClassifier(lambda r, g, b: True).classify(ImageBuffer(array))

    assert (mask.samples == 255).all()


def test_gray_buffer_has_no_warm_pixels() -> None:
    gray = ImageBuffer(np.full((3, 3), 200, dtype=np.uint8))

    assert not color_mask(gray).samples.any()


def test_heuristic_classifier_is_a_foreground_classifier() -> None:
    assert isinstance(HeuristicColorClassifier(), ForegroundClassifier)
