"""Infrastructure helpers for the remote service and HTTP responses."""

from .remote import RemoteRemover
from .responses import send_cutout

__all__ = [
    "RemoteRemover",
    "send_cutout",
]
