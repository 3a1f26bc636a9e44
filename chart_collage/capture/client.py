"""
HTTP client for the collage API.
"""

from typing import Any, Dict, List

import requests

from chart_collage.core.errors import CollageError
from chart_collage.core.models import Artifact, Batch
from chart_collage.utils.common import setup_logging

logger = setup_logging(__name__)


class CollageClientError(CollageError):
    """The collage API answered with an error."""

    def __init__(self, message: str, status_code: int = None, payload: Dict[str, Any] = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload or {}


class CollageClient:
    """Submits captured batches to the collage API and lists collages."""

    def __init__(self, base_url: str = "http://localhost:5000", timeout: float = 120.0,
                 session: requests.Session = None):
        self.images_url = base_url.rstrip("/") + "/api/images"
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, **kwargs) -> Dict[str, Any]:
        try:
            response = self.session.request(method, self.images_url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise CollageClientError(f"Could not reach {self.images_url}: {e}")

        try:
            payload = response.json()
        except ValueError:
            payload = {"message": response.text}

        if not response.ok:
            error = payload.get("error") or {}
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise CollageClientError(
                message or payload.get("message", f"HTTP {response.status_code}"),
                status_code=response.status_code,
                payload=payload,
            )
        return payload

    def submit(self, batch: Batch) -> Artifact:
        """
        Post a batch and return the composed collage.

        Args:
            batch: Ordered images; the server composes them in this order

        Returns:
            The collage artifact
        """
        files = [
            ("images", (image.filename or f"chart_{i}.png", image.data, image.content_type))
            for i, image in enumerate(batch)
        ]
        payload = self._request("POST", files=files)
        for warning in payload.get("warnings", []):
            logger.warning(f"Server reported: {warning.get('message')}")
        return Artifact.from_dict(payload["result"])

    def list_collages(self) -> List[Artifact]:
        """Return the collages stored on the server."""
        payload = self._request("GET")
        return [Artifact.from_dict(item) for item in payload.get("result", [])]
