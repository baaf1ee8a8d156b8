from __future__ import annotations

import io

from flask import send_file

from ..processing.optimizer import OptimizedImage


def send_cutout(result: OptimizedImage, download_name: str):
    response = send_file(
        io.BytesIO(result.data),
        mimetype=result.mimetype,
        as_attachment=True,
        download_name=f"{download_name}.{result.extension}",
    )
    response.headers["Cache-Control"] = "no-store"
    return response
