from __future__ import annotations

import logging
from typing import Optional

from .config import SETTINGS, CutoutSettings
from .errors import DecodeError, RemoteRemovalError
from .infrastructure.remote import RemoteRemover
from .processing.optimizer import OptimizedImage, optimize
from .processing.pipeline import LocalPipeline
from .processing.raster import decode


logger = logging.getLogger(__name__)


class BackgroundRemover:
    """Remote-first background removal with the local pipeline as fallback.

    Whether a remote service is used is decided by the injected ``remote``
    collaborator (or the settings it is built from), never by global state.
    """

    def __init__(
        self,
        settings: CutoutSettings = SETTINGS,
        remote: Optional[RemoteRemover] = None,
        pipeline: Optional[LocalPipeline] = None,
    ) -> None:
        self.settings = settings
        self.remote = remote
        self.pipeline = pipeline or LocalPipeline.from_settings(settings)

    @classmethod
    def from_settings(cls, settings: CutoutSettings = SETTINGS) -> "BackgroundRemover":
        return cls(settings=settings, remote=RemoteRemover.from_settings(settings))

    def remove_background(self, data: bytes, quality: Optional[int] = None) -> OptimizedImage:
        quality = self.settings.default_quality if quality is None else quality
        if self.remote is not None:
            try:
                return self._from_remote(data, quality)
            except RemoteRemovalError as exc:
                logger.warning("remote removal failed, using local pipeline: %s", exc)
        return self.pipeline.process(data, quality)

    def _from_remote(self, data: bytes, quality: int) -> OptimizedImage:
        encoded = self.remote.remove_background(data)
        try:
            cutout = decode(encoded)
        except DecodeError as exc:
            raise RemoteRemovalError(f"Remote service returned an unreadable image: {exc}") from exc
        return optimize(cutout, quality=quality, max_dimension=self.settings.max_dimension)
