from __future__ import annotations

import io
from dataclasses import dataclass
from typing import NamedTuple, Sequence, Union

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from ..errors import CorruptImageError, DecodeError, EncodeError, UnsupportedFormatError


_CHANNEL_MODES = {1: "L", 3: "RGB", 4: "RGBA"}
_ALPHA_MODES = {"RGBA", "RGBa", "LA", "La", "PA"}
_GRAY_MODES = {"1", "L", "I", "I;16", "I;16B", "I;16L", "F"}
_WIDE_GRAY_MODES = {"I", "I;16", "I;16B", "I;16L", "F"}


class PixelCoordinate(NamedTuple):
    x: int
    y: int

    def sample_index(self, width: int, channel_count: int, channel_offset: int = 0) -> int:
        return (self.y * width + self.x) * channel_count + channel_offset


@dataclass(frozen=True, eq=False)
class ImageBuffer:
    """Immutable grid of 8-bit samples shaped ``(height, width, channels)``.

    Stages never mutate a buffer; they build a new one from the samples they
    compute. The backing array is made contiguous and read-only on construction.
    """

    array: np.ndarray
    color_space: str = "srgb"

    def __post_init__(self) -> None:
        source = self.array
        array = np.asarray(source)
        if array.ndim == 2:
            array = array[:, :, np.newaxis]
        if array.ndim != 3:
            raise ValueError(f"Expected a (height, width, channels) array, got shape {array.shape}")
        if array.shape[2] not in _CHANNEL_MODES:
            raise ValueError(f"Unsupported channel count: {array.shape[2]}")
        if array.dtype != np.uint8:
            array = np.clip(array, 0, 255).astype(np.uint8)
        array = np.ascontiguousarray(array)
        if array.flags.writeable:
            if isinstance(source, np.ndarray) and np.may_share_memory(array, source):
                array = array.copy()
            array.flags.writeable = False
        object.__setattr__(self, "array", array)

    @property
    def height(self) -> int:
        return int(self.array.shape[0])

    @property
    def width(self) -> int:
        return int(self.array.shape[1])

    @property
    def channel_count(self) -> int:
        return int(self.array.shape[2])

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def has_alpha(self) -> bool:
        return self.channel_count == 4

    @property
    def mode(self) -> str:
        return _CHANNEL_MODES[self.channel_count]

    def sample(self, coord: PixelCoordinate, channel_offset: int = 0) -> int:
        return int(self.array.reshape(-1)[coord.sample_index(self.width, self.channel_count, channel_offset)])

    def to_image(self) -> Image.Image:
        if self.channel_count == 1:
            return Image.fromarray(self.array[:, :, 0])
        return Image.fromarray(self.array)

    @classmethod
    def from_image(cls, img: Image.Image) -> "ImageBuffer":
        if img.mode in _WIDE_GRAY_MODES:
            img = _rescale_wide_gray(img)
        if img.mode not in _CHANNEL_MODES.values():
            img = img.convert(_normalized_mode(img))
        color_space = "b-w" if img.mode == "L" else "srgb"
        return cls(np.asarray(img), color_space=color_space)


@dataclass(frozen=True, eq=False)
class Mask(ImageBuffer):
    """Single-channel buffer; 0 is background, 255 is foreground.

    Between binarization steps a mask may carry continuous 0-255 confidence.
    """

    color_space: str = "b-w"

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.channel_count != 1:
            raise ValueError(f"A mask has exactly one channel, got {self.channel_count}")

    @property
    def samples(self) -> np.ndarray:
        return self.array[:, :, 0]

    def is_binary(self) -> bool:
        return bool(np.isin(self.array, (0, 255)).all())

    @classmethod
    def from_array(cls, samples: np.ndarray) -> "Mask":
        return cls(samples)

    @classmethod
    def from_image(cls, img: Image.Image) -> "Mask":
        return cls(np.asarray(img.convert("L")))


@dataclass(frozen=True)
class ConvolutionKernel:
    """Square, odd-sized kernel of signed weights.

    Each output sample is ``clamp(sum(weights * neighbourhood) / scale + offset)``
    with the border handled by replicating the nearest valid sample.
    """

    weights: Sequence[float]
    size: int = 3
    scale: float = 1.0
    offset: float = 0.0

    def __post_init__(self) -> None:
        if self.size < 1 or self.size % 2 == 0:
            raise ValueError(f"Kernel size must be a positive odd number, got {self.size}")
        if len(self.weights) != self.size * self.size:
            raise ValueError(f"Expected {self.size * self.size} weights, got {len(self.weights)}")
        if self.scale == 0:
            raise ValueError("Kernel scale must be non-zero")
        object.__setattr__(self, "weights", tuple(self.weights))

    def apply(self, channel: ImageBuffer) -> Mask:
        if channel.channel_count != 1:
            raise ValueError("Convolution operates on single-channel buffers")
        radius = self.size // 2
        src = channel.array[:, :, 0].astype(np.int32)
        padded = np.pad(src, radius, mode="edge")
        height, width = src.shape
        acc = np.zeros((height, width), dtype=np.float64)
        for index, weight in enumerate(self.weights):
            if weight == 0:
                continue
            ky, kx = divmod(index, self.size)
            acc += weight * padded[ky:ky + height, kx:kx + width]
        values = acc / self.scale + self.offset
        return Mask.from_array(np.clip(np.rint(values), 0, 255).astype(np.uint8))


def _rescale_wide_gray(img: Image.Image) -> Image.Image:
    """Map 16-bit, 32-bit integer and float grayscale onto 0..255.

    ``I;16*`` is always 16-bit. ``I`` and ``F`` are judged by their range:
    floats within 0..1 are unit-scaled, samples above 255 are taken as 16-bit,
    anything else is already 8-bit.
    """
    samples = np.asarray(img).astype(np.float64)
    peak = float(samples.max()) if samples.size else 0.0
    if img.mode.startswith("I;16"):
        scaled = samples / 257.0
    elif img.mode == "F" and peak <= 1.0:
        scaled = samples * 255.0
    elif peak > 255:
        scaled = np.clip(samples, 0, 65535) / 257.0
    else:
        scaled = samples
    return Image.fromarray(np.clip(np.rint(scaled), 0, 255).astype(np.uint8))


def _normalized_mode(img: Image.Image) -> str:
    if img.mode in _ALPHA_MODES or "transparency" in img.info:
        return "RGBA"
    if img.mode in _GRAY_MODES:
        return "L"
    return "RGB"


def decode(data: bytes) -> ImageBuffer:
    if not data:
        raise CorruptImageError("Empty image payload")
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            img = ImageOps.exif_transpose(img)
            return ImageBuffer.from_image(img)
    except UnidentifiedImageError as exc:
        raise UnsupportedFormatError(str(exc)) from exc
    except Image.DecompressionBombError as exc:
        raise CorruptImageError(str(exc)) from exc
    except (OSError, SyntaxError, ValueError, EOFError) as exc:
        raise CorruptImageError(f"Corrupt image payload: {exc}") from exc


def encode_image(img: Image.Image, format: str, **options) -> bytes:
    buffer = io.BytesIO()
    try:
        img.save(buffer, format, **options)
    except (OSError, KeyError, ValueError) as exc:
        raise EncodeError(f"Cannot encode {img.mode} image as {format}: {exc}") from exc
    return buffer.getvalue()


def encode(buffer: Union[ImageBuffer, Image.Image], format: str, **options) -> bytes:
    img = buffer.to_image() if isinstance(buffer, ImageBuffer) else buffer
    return encode_image(img, format, **options)


def to_rgb(buffer: ImageBuffer) -> ImageBuffer:
    if buffer.channel_count == 3:
        return buffer
    if buffer.channel_count == 1:
        return ImageBuffer(np.repeat(buffer.array, 3, axis=2))
    return ImageBuffer(buffer.array[:, :, :3], color_space=buffer.color_space)


__all__ = [
    "ConvolutionKernel",
    "DecodeError",
    "ImageBuffer",
    "Mask",
    "PixelCoordinate",
    "decode",
    "encode",
    "encode_image",
    "to_rgb",
]
