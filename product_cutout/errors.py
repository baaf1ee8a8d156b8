"""Exception hierarchy shared by the pipeline, the remote client and the app."""


class ProcessingError(Exception):
    """Base class for every failure raised while producing a cutout."""


class DecodeError(ProcessingError):
    """The input bytes could not be turned into an image."""


class UnsupportedFormatError(DecodeError):
    pass


class CorruptImageError(DecodeError):
    pass


class DimensionMismatch(ProcessingError):
    """An image and a mask (or two masks) disagree on width/height."""


class EncodeError(ProcessingError):
    """The target format rejected the buffer."""


class RemoteRemovalError(ProcessingError):
    """The remote background-removal service was unavailable or failed."""


class InvalidQualityError(ProcessingError, ValueError):
    """The quality setting is outside 1..100."""
