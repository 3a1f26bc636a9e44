#!/usr/bin/env python3
"""
Web API for chart collages.

``/api/images`` accepts a multipart batch of chart images and answers with the
composed collage; ``GET`` lists the collages already stored.
"""

from typing import List, Optional

from flask import Flask, jsonify, request

from chart_collage.core.config import CollageConfig
from chart_collage.core.errors import CollageError, InvalidImageError
from chart_collage.core.models import Batch, RawImage
from chart_collage.core.orchestrator import CollageOrchestrator
from chart_collage.services.media.base import ArtifactStore
from chart_collage.utils.common import read_image_size, setup_logging

logger = setup_logging(__name__)

IMAGES_FIELD = "images"
ROUTE_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]


def error_response(error: CollageError, status: int = 400):
    """Build the JSON error envelope."""
    return jsonify({"message": "Error", "error": error.to_dict()}), status


def read_batch(files) -> Batch:
    """
    Materialize the uploaded image parts, in submission order.

    Args:
        files: Uploaded file storages for the ``images`` field

    Returns:
        The batch to compose
    """
    images: List[RawImage] = []
    for index, part in enumerate(files):
        data = part.read()
        if not data:
            continue
        try:
            width, height = read_image_size(data)
        except OSError as e:
            raise InvalidImageError(
                f"Part {index + 1} ({part.filename or 'unnamed'}) is not an image: {e}",
                batch_index=index,
            )
        images.append(
            RawImage(
                data=data,
                width=width,
                height=height,
                filename=part.filename,
                content_type=part.mimetype or "application/octet-stream",
            )
        )
    return Batch(images)


def create_app(store: Optional[ArtifactStore] = None,
               config: Optional[CollageConfig] = None) -> Flask:
    """
    Create the Flask application.

    Args:
        store: Media store the collages are written to
        config: Collage configuration (read from the environment if omitted)

    Returns:
        Configured Flask app
    """
    if config is None:
        config = CollageConfig.from_env()
    if store is None:
        from chart_collage.services.media.cloudinary_store import CloudinaryStore
        store = CloudinaryStore(config)

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = config.max_content_length
    orchestrator = CollageOrchestrator(store, config)

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({"message": "Method not allowed"}), 405

    @app.errorhandler(413)
    def request_too_large(error):
        return jsonify(
            {
                "message": "Error",
                "error": {
                    "type": "RequestEntityTooLarge",
                    "message": f"Upload exceeds {config.max_upload_mb:g} MB",
                },
            }
        ), 413

    # OPTIONS and HEAD reach the view so they get the JSON 405 too
    @app.route("/api/images", methods=ROUTE_METHODS, provide_automatic_options=False)
    @app.route("/images", methods=ROUTE_METHODS, provide_automatic_options=False)
    def images():
        """List stored collages or compose a new one."""
        if request.method == "GET":
            try:
                result = store.list()
            except CollageError as e:
                logger.error(f"Listing collages failed: {e}")
                return error_response(e)
            return jsonify({"message": "Success", "result": [a.to_dict() for a in result]}), 200

        if request.method == "POST":
            try:
                batch = read_batch(request.files.getlist(IMAGES_FIELD))
                result = orchestrator.run(batch)
            except CollageError as e:
                logger.error(f"Collage request failed: {e}")
                return error_response(e)

            body = {"message": "Success", "result": result.artifact.to_dict()}
            if result.warnings:
                body["warnings"] = result.warnings
            return jsonify(body), 201

        return jsonify({"message": "Method not allowed"}), 405

    return app
