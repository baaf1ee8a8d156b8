import logging
import os
from dataclasses import dataclass
from typing import FrozenSet


QUALITY_MIN = 1
QUALITY_MAX = 100

ALLOWED_MIMETYPES: FrozenSet[str] = frozenset(
    {
        "image/jpeg",
        "image/png",
        "image/webp",
        "image/gif",
        "image/bmp",
        "image/tiff",
    }
)


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class CutoutSettings:
    port: int = 5600
    log_level: str = "INFO"
    default_quality: int = 90
    max_dimension: int = 1000
    soft_alpha: bool = False
    parallel_masks: bool = True
    max_upload_bytes: int = 15 * 1024 * 1024
    remote_api_key: str = ""
    remote_url: str = "https://api.remove.bg/v1.0/removebg"
    remote_timeout: float = 30.0
    remote_retries: int = 1
    download_name: str = "optimized-product"

    @property
    def remote_enabled(self) -> bool:
        return bool(self.remote_api_key)

    @classmethod
    def from_env(cls) -> "CutoutSettings":
        return cls(
            port=int(os.getenv("PORT", "5600")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            default_quality=clamp_quality(os.getenv("DEFAULT_QUALITY", "90"), 90),
            max_dimension=int(os.getenv("MAX_DIMENSION", "1000")),
            soft_alpha=_env_flag("SOFT_ALPHA", "false"),
            parallel_masks=_env_flag("PARALLEL_MASKS", "true"),
            max_upload_bytes=int(os.getenv("MAX_UPLOAD_BYTES", str(15 * 1024 * 1024))),
            remote_api_key=os.getenv("REMOVE_BG_API_KEY", ""),
            remote_url=os.getenv("REMOVE_BG_URL", "https://api.remove.bg/v1.0/removebg"),
            remote_timeout=float(os.getenv("REMOVE_BG_TIMEOUT", "30.0")),
            remote_retries=int(os.getenv("REMOVE_BG_RETRIES", "1")),
            download_name=os.getenv("DOWNLOAD_NAME", "optimized-product"),
        )


def clamp_quality(value: object, default: int = 90) -> int:
    """Coerce a raw form/env value into the 1..100 quality range.

    Values that cannot be parsed as a number fall back to ``default``.
    """

    try:
        quality = int(float(str(value)))
    except (TypeError, ValueError, OverflowError):
        return default
    return max(QUALITY_MIN, min(QUALITY_MAX, quality))


SETTINGS = CutoutSettings.from_env()


def configure_logging(settings: CutoutSettings = SETTINGS) -> logging.Logger:
    logging.basicConfig(level=settings.log_level)
    return logging.getLogger("product_cutout")
