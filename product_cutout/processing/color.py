from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable

import numpy as np

from .raster import ImageBuffer, Mask, to_rgb


# Called with either plain ints or equally-shaped integer arrays; must combine
# comparisons with ``&``/``|`` so it evaluates elementwise.
ColorPredicate = Callable[[Any, Any, Any], Any]


def warm_product_predicate(r, g, b):
    """Orange/yellow hues typical of citrus drinks and similar warm products."""
    return (r > 150) & (g > 100) & (b < 100) & (r > 1.5 * b)


class ForegroundClassifier(ABC):
    """Strategy deciding which pixels of an RGB(A) buffer belong to the product."""

    @abstractmethod
    def classify(self, buffer: ImageBuffer) -> Mask:
        raise NotImplementedError


class HeuristicColorClassifier(ForegroundClassifier):
    def __init__(self, predicate: ColorPredicate = warm_product_predicate) -> None:
        self.predicate = predicate

    def classify(self, buffer: ImageBuffer) -> Mask:
        rgb = to_rgb(buffer).array.astype(np.int16)
        hits = self.predicate(rgb[:, :, 0], rgb[:, :, 1], rgb[:, :, 2])
        hits = np.broadcast_to(np.asarray(hits, dtype=bool), rgb.shape[:2])
        return Mask.from_array(hits.astype(np.uint8) * 255)

    def __repr__(self) -> str:
        name = getattr(self.predicate, "__name__", repr(self.predicate))
        return f"{type(self).__name__}({name})"


def color_mask(buffer: ImageBuffer, predicate: ColorPredicate = warm_product_predicate) -> Mask:
    return HeuristicColorClassifier(predicate).classify(buffer)
