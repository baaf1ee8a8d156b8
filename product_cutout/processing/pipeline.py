from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Tuple

from .color import ForegroundClassifier, HeuristicColorClassifier
from .compositor import apply_alpha
from .edges import edge_mask
from .fusion import fuse
from .optimizer import DEFAULT_MAX_DIMENSION, DEFAULT_QUALITY, OptimizedImage, optimize, validate_quality
from .raster import ImageBuffer, Mask, decode
from ..errors import ProcessingError


logger = logging.getLogger(__name__)


class LocalPipeline:
    """Edge + color segmentation, mask fusion, compositing and re-encoding.

    Each call works on fresh buffers only; an instance carries configuration and
    nothing else, so it may be shared between requests.
    """

    def __init__(
        self,
        classifier: Optional[ForegroundClassifier] = None,
        soft_alpha: bool = False,
        parallel: bool = True,
        max_dimension: int = DEFAULT_MAX_DIMENSION,
    ) -> None:
        self.classifier = classifier or HeuristicColorClassifier()
        self.soft_alpha = soft_alpha
        self.parallel = parallel
        self.max_dimension = max_dimension

    @classmethod
    def from_settings(cls, settings, classifier: Optional[ForegroundClassifier] = None) -> "LocalPipeline":
        return cls(
            classifier=classifier,
            soft_alpha=settings.soft_alpha,
            parallel=settings.parallel_masks,
            max_dimension=settings.max_dimension,
        )

    def build_masks(self, buffer: ImageBuffer) -> Tuple[Mask, Mask]:
        if not self.parallel:
            return edge_mask(buffer), self.classifier.classify(buffer)
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="cutout-mask") as pool:
            edges = pool.submit(edge_mask, buffer)
            colors = pool.submit(self.classifier.classify, buffer)
            return edges.result(), colors.result()

    def segment(self, buffer: ImageBuffer) -> ImageBuffer:
        edges, colors = self.build_masks(buffer)
        alpha = fuse(edges, colors, soft_alpha=self.soft_alpha)
        del edges, colors
        return apply_alpha(buffer, alpha)

    def process(self, data: bytes, quality: int = DEFAULT_QUALITY) -> OptimizedImage:
        """Decode, cut out and re-encode ``data``.

        An out-of-range quality is rejected before any decoding. Decode
        failures propagate. A failure inside segmentation degrades to
        re-encoding the original image through the optimizer alone.
        """
        quality = validate_quality(quality)
        source = decode(data)
        logger.debug(
            "pipeline: decoded %sx%s channels=%s", source.width, source.height, source.channel_count
        )
        try:
            cutout = self.segment(source)
        except (ProcessingError, ValueError) as exc:
            logger.warning("pipeline: segmentation failed (%s), re-encoding original", exc)
            cutout = source
        del source

        result = optimize(cutout, quality=quality, max_dimension=self.max_dimension)
        logger.debug("pipeline: format=%s size=%s bytes=%d", result.format, result.size, len(result.data))
        return result


_DEFAULT_PIPELINE = LocalPipeline()


def process(data: bytes, quality: int = DEFAULT_QUALITY) -> bytes:
    return _DEFAULT_PIPELINE.process(data, quality).data
