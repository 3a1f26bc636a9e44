"""
Cloudinary media store.

Talks to the Cloudinary upload and admin REST APIs directly with requests.
"""

import hashlib
import time
from typing import Any, Dict, List, Optional, Sequence

import requests

from chart_collage.core.config import CollageConfig
from chart_collage.core.errors import ComposeError, ConfigurationError, StoreError
from chart_collage.core.models import Artifact, OverlayDirective
from chart_collage.services.media.base import ArtifactStore
from chart_collage.utils.common import setup_logging

# Set up logging
logger = setup_logging(__name__)

ANCHOR_GRAVITY = {
    "top-left": "north_west",
    "top": "north",
    "top-right": "north_east",
    "center": "center",
}

# Parameters that are never part of the request signature
UNSIGNED_PARAMS = {"file", "api_key", "cloud_name", "resource_type"}


def sign_params(params: Dict[str, Any], api_secret: str) -> str:
    """
    Compute the Cloudinary request signature.

    Args:
        params: Request parameters
        api_secret: Cloudinary API secret

    Returns:
        Hex SHA-1 digest of the sorted parameters followed by the secret
    """
    to_sign = "&".join(
        f"{key}={params[key]}"
        for key in sorted(params)
        if key not in UNSIGNED_PARAMS and params[key] not in (None, "")
    )
    return hashlib.sha1((to_sign + api_secret).encode("utf-8")).hexdigest()


def overlay_layer_id(public_id: str) -> str:
    """Layer references use ':' where public ids use '/'."""
    return public_id.replace("/", ":")


def build_transformation(overlays: Sequence[OverlayDirective]) -> str:
    """
    Render overlay directives as a chained transformation string.

    Each directive becomes one component, e.g.
    ``l_abc,w_400,h_400,c_scale,g_north_west,x_400,y_0``.
    """
    components = []
    for overlay in overlays:
        gravity = ANCHOR_GRAVITY.get(overlay.anchor)
        if gravity is None:
            raise ComposeError(f"Unsupported overlay anchor: {overlay.anchor}")
        components.append(
            ",".join(
                [
                    f"l_{overlay_layer_id(overlay.reference_id)}",
                    f"w_{overlay.tile_width}",
                    f"h_{overlay.tile_height}",
                    f"c_{overlay.scale_mode}",
                    f"g_{gravity}",
                    f"x_{overlay.x}",
                    f"y_{overlay.y}",
                ]
            )
        )
    return "/".join(components)


class CloudinaryStore(ArtifactStore):
    """Artifact store backed by a Cloudinary account."""

    api_base = "https://api.cloudinary.com/v1_1"
    delivery_base = "https://res.cloudinary.com"

    def __init__(self, config: CollageConfig, session: Optional[requests.Session] = None):
        """
        Initialize the Cloudinary store.

        Args:
            config: Collage configuration holding credentials, folder and timeouts
            session: Optional requests session (a new one is created if omitted)
        """
        if not config.has_credentials:
            raise ConfigurationError(
                "CLOUDINARY_CLOUD_NAME, CLOUDINARY_API_KEY and CLOUDINARY_API_SECRET must be set"
            )
        self.config = config
        self.session = session or requests.Session()
        # Secure URLs of bases uploaded through this store and not yet composed
        self._base_urls: Dict[str, str] = {}
        self.upload_url = f"{self.api_base}/{config.cloud_name}/image/upload"
        self.destroy_url = f"{self.api_base}/{config.cloud_name}/image/destroy"
        self.resources_url = f"{self.api_base}/{config.cloud_name}/resources/image/upload"

    def _signed(self, params: Dict[str, Any]) -> Dict[str, Any]:
        params = {k: v for k, v in params.items() if v is not None}
        params["timestamp"] = int(time.time())
        params["signature"] = sign_params(params, self.config.api_secret)
        params["api_key"] = self.config.api_key
        return params

    def _delivery_url(self, public_id: str) -> str:
        return f"{self.delivery_base}/{self.config.cloud_name}/image/upload/{public_id}"

    @staticmethod
    def _payload(response: requests.Response, operation: str) -> Dict[str, Any]:
        """Decode a JSON response body, treating anything else as a store failure."""
        try:
            payload = response.json()
        except ValueError:
            raise StoreError(
                f"Unexpected non-JSON response from media service: {response.text[:200]}",
                operation=operation,
                status_code=response.status_code,
            )
        if not isinstance(payload, dict):
            raise StoreError("Unexpected response shape from media service", operation=operation)
        return payload

    @staticmethod
    def _to_artifact(payload: Dict[str, Any], operation: str) -> Artifact:
        try:
            return Artifact(
                id=payload["public_id"],
                url=payload.get("secure_url") or payload.get("url", ""),
                width=int(payload.get("width", 0)),
                height=int(payload.get("height", 0)),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise StoreError(f"Malformed artifact in response: {e}", operation=operation)

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            return response.json().get("error", {}).get("message", response.text)
        except (ValueError, AttributeError):
            return response.text

    def store(self, data: bytes, folder: bool = False) -> Artifact:
        params = self._signed({"folder": self.config.folder if folder else None})
        try:
            response = self.session.post(
                self.upload_url,
                data=params,
                files={"file": ("chart.png", data, "image/png")},
                timeout=self.config.upload_timeout,
            )
        except requests.RequestException as e:
            raise StoreError(f"Upload failed: {e}", operation="store")

        if response.status_code != 200:
            message = self._error_message(response)
            logger.error(f"Error uploading image: {response.status_code} {message}")
            raise StoreError(
                f"Upload rejected: {message}",
                operation="store",
                status_code=response.status_code,
            )

        artifact = self._to_artifact(self._payload(response, "store"), "store")
        if folder:
            self._base_urls[artifact.id] = artifact.url
        logger.info(f"Uploaded {artifact.id} ({artifact.width}x{artifact.height})")
        return artifact

    def compose(self, base_id: str, overlays: Sequence[OverlayDirective]) -> Artifact:
        """
        Re-upload the base with the overlays applied, replacing it in place.

        The composite keeps the base's public id, so the base is consumed by
        the compose call rather than left behind as an extra artifact.
        """
        params = self._signed(
            {
                "public_id": base_id,
                "overwrite": "true",
                "invalidate": "true",
                "transformation": build_transformation(overlays) or None,
            }
        )
        # The versioned URL from the upload bypasses stale CDN copies
        params["file"] = self._base_urls.get(base_id) or self._delivery_url(base_id)
        try:
            response = self.session.post(
                self.upload_url, data=params, timeout=self.config.compose_timeout
            )
        except requests.RequestException as e:
            raise StoreError(f"Compose failed: {e}", operation="compose")

        if response.status_code in (400, 404):
            message = self._error_message(response)
            logger.error(f"Compose rejected for {base_id}: {message}")
            raise ComposeError(f"Compose rejected: {message}", base_id=base_id)
        if response.status_code != 200:
            message = self._error_message(response)
            raise StoreError(
                f"Compose failed: {message}",
                operation="compose",
                status_code=response.status_code,
            )

        artifact = self._to_artifact(self._payload(response, "compose"), "compose")
        self._base_urls.pop(base_id, None)
        logger.info(
            f"Composed {len(overlays)} overlay(s) onto {base_id} "
            f"({artifact.width}x{artifact.height})"
        )
        return artifact

    def delete(self, artifact_id: str) -> None:
        params = self._signed({"public_id": artifact_id, "invalidate": "true"})
        try:
            response = self.session.post(
                self.destroy_url, data=params, timeout=self.config.delete_timeout
            )
        except requests.RequestException as e:
            raise StoreError(f"Delete failed: {e}", operation="delete")

        if response.status_code != 200:
            raise StoreError(
                f"Delete failed: {self._error_message(response)}",
                operation="delete",
                status_code=response.status_code,
            )

        result = self._payload(response, "delete").get("result")
        self._base_urls.pop(artifact_id, None)
        if result == "not found":
            logger.info(f"Artifact {artifact_id} already absent")
        elif result != "ok":
            raise StoreError(f"Unexpected delete result: {result}", operation="delete")

    def list(self) -> List[Artifact]:
        artifacts: List[Artifact] = []
        params: Dict[str, Any] = {"prefix": f"{self.config.folder}/", "max_results": 500}

        while True:
            try:
                response = self.session.get(
                    self.resources_url,
                    params=params,
                    auth=(self.config.api_key, self.config.api_secret),
                    timeout=self.config.upload_timeout,
                )
            except requests.RequestException as e:
                raise StoreError(f"Listing failed: {e}", operation="list")

            if response.status_code != 200:
                raise StoreError(
                    f"Listing failed: {self._error_message(response)}",
                    operation="list",
                    status_code=response.status_code,
                )

            payload = self._payload(response, "list")
            artifacts.extend(
                self._to_artifact(item, "list") for item in payload.get("resources", [])
            )

            next_cursor = payload.get("next_cursor")
            if not next_cursor:
                break
            params["next_cursor"] = next_cursor

        return artifacts
