from __future__ import annotations

import logging
import time
from typing import Callable, Optional

import requests

from ..config import CutoutSettings
from ..errors import RemoteRemovalError


logger = logging.getLogger(__name__)

SessionFactory = Callable[[], requests.Session]

PRODUCT_FORM_FIELDS = {
    "size": "auto",
    "format": "png",
    "type": "product",
    "add_shadow": "false",
}


class RemoteRemover:
    """Client for a remove.bg-compatible HTTP API.

    Returns the encoded cutout bytes exactly as the service sends them.
    """

    def __init__(
        self,
        api_key: str,
        url: str = "https://api.remove.bg/v1.0/removebg",
        timeout: float = 30.0,
        retries: int = 1,
        session_factory: SessionFactory | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("RemoteRemover requires an API key")
        self._api_key = api_key
        self.url = url
        self.timeout = timeout
        self.retries = max(0, retries)
        self._session_factory = session_factory or requests.Session
        self._session = self._create_session()

    @classmethod
    def from_settings(
        cls, settings: CutoutSettings, session_factory: SessionFactory | None = None
    ) -> Optional["RemoteRemover"]:
        if not settings.remote_enabled:
            return None
        return cls(
            api_key=settings.remote_api_key,
            url=settings.remote_url,
            timeout=settings.remote_timeout,
            retries=settings.remote_retries,
            session_factory=session_factory,
        )

    def _create_session(self) -> requests.Session:
        session = self._session_factory()
        session.headers.update({"User-Agent": "product-cutout/1.0", "X-Api-Key": self._api_key})
        return session

    def remove_background(self, data: bytes) -> bytes:
        last_exception: Exception | None = None
        for attempt in range(1, self.retries + 2):
            try:
                response = self._session.post(
                    self.url,
                    files={"image_file": ("image", data)},
                    data=PRODUCT_FORM_FIELDS,
                    timeout=self.timeout,
                )
                response.raise_for_status()
                if not response.content:
                    raise RemoteRemovalError("Remote service returned an empty body")
                return response.content
            except (requests.RequestException, RemoteRemovalError) as exc:
                last_exception = exc
                logger.warning("remote: attempt %d failed: %s", attempt, exc)
                if attempt <= self.retries:
                    time.sleep(0.4 * attempt)
        raise RemoteRemovalError(str(last_exception)) from last_exception
