from __future__ import annotations

import logging
from typing import Optional

from flask import Flask, jsonify, request

from .config import ALLOWED_MIMETYPES, SETTINGS, CutoutSettings, clamp_quality, configure_logging
from .errors import DecodeError, ProcessingError
from .infrastructure.responses import send_cutout
from .service import BackgroundRemover

APP_VERSION = "1.0.0"

logger = logging.getLogger(__name__)


def create_app(
    settings: CutoutSettings = SETTINGS, remover: Optional[BackgroundRemover] = None
) -> Flask:
    configure_logging(settings)
    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = settings.max_upload_bytes
    remover = remover or BackgroundRemover.from_settings(settings)

    @app.errorhandler(413)
    def too_large(_exc):
        return jsonify(message="Image exceeds the upload size limit"), 413

    @app.route("/remove-bg", methods=["POST"])
    def remove_bg():
        upload = request.files.get("image")
        if upload is None:
            return jsonify(message="No image file provided"), 400
        if upload.mimetype not in ALLOWED_MIMETYPES:
            return jsonify(message=f"Unsupported image type: {upload.mimetype or 'unknown'}"), 415

        data = upload.read()
        if len(data) > settings.max_upload_bytes:
            return jsonify(message="Image exceeds the upload size limit"), 413

        quality = clamp_quality(request.form.get("quality"), settings.default_quality)
        try:
            result = remover.remove_background(data, quality)
        except DecodeError as exc:
            return jsonify(message=f"Could not read image: {exc}"), 422
        except ProcessingError as exc:  # pragma: no cover - runtime failure path
            logger.exception("remove-bg failed")
            return jsonify(message=f"Failed to process image: {exc}"), 500
        return send_cutout(result, settings.download_name)

    @app.route("/health")
    def health():
        return jsonify(
            ok=True,
            version=APP_VERSION,
            remote_enabled=remover.remote is not None,
            soft_alpha=remover.pipeline.soft_alpha,
            max_dimension=remover.pipeline.max_dimension,
        )

    return app


app = create_app()
