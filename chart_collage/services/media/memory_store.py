"""
In-process media store.

Keeps artifacts in memory and composes them with Pillow. Used for local runs
without a Cloudinary account and by the test suite.
"""

import itertools
import threading
from typing import Dict, List, Sequence, Set

from PIL import Image

from chart_collage.core.errors import ComposeError, StoreError
from chart_collage.core.models import Artifact, OverlayDirective
from chart_collage.services.media.base import ArtifactStore
from chart_collage.utils.common import (
    get_resampling_filter,
    image_from_bytes,
    image_to_png_bytes,
    setup_logging,
)

logger = setup_logging(__name__)


class MemoryStore(ArtifactStore):
    """Artifact store that keeps encoded images in a dict."""

    def __init__(self, folder: str = "chart-collages", base_url: str = "memory://",
                 compose_in_place: bool = False):
        self.folder = folder
        self.base_url = base_url
        # Write composites over the base id instead of minting a new id
        self.compose_in_place = compose_in_place
        self.blobs: Dict[str, bytes] = {}
        self.artifacts: Dict[str, Artifact] = {}
        self.in_folder: Set[str] = set()
        self.calls: Dict[str, int] = {"store": 0, "compose": 0, "delete": 0, "list": 0}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

        # Fault injection: 1-based call numbers that fail, ids whose delete fails
        self.fail_store_calls: Set[int] = set()
        self.fail_compose = False
        self.fail_list = False
        self.fail_delete_ids: Set[str] = set()

    def _new_id(self, folder: bool) -> str:
        name = f"img_{next(self._ids):04d}"
        return f"{self.folder}/{name}" if folder else name

    def _put(self, artifact_id: str, img: Image.Image, folder: bool) -> Artifact:
        data = image_to_png_bytes(img)
        artifact = Artifact(
            id=artifact_id,
            url=f"{self.base_url}{artifact_id}",
            width=img.width,
            height=img.height,
        )
        self.blobs[artifact_id] = data
        self.artifacts[artifact_id] = artifact
        if folder:
            self.in_folder.add(artifact_id)
        return artifact

    def get_image(self, artifact_id: str) -> Image.Image:
        """Decode a stored artifact."""
        return image_from_bytes(self.blobs[artifact_id])

    def store(self, data: bytes, folder: bool = False) -> Artifact:
        with self._lock:
            self.calls["store"] += 1
            if self.calls["store"] in self.fail_store_calls:
                raise StoreError("Simulated upload failure", operation="store")
            try:
                img = image_from_bytes(data)
            except OSError as e:
                raise StoreError(f"Invalid image payload: {e}", operation="store")
            return self._put(self._new_id(folder), img, folder)

    def compose(self, base_id: str, overlays: Sequence[OverlayDirective]) -> Artifact:
        with self._lock:
            self.calls["compose"] += 1
            if self.fail_compose:
                raise ComposeError("Simulated compose failure", base_id=base_id)
            if base_id not in self.blobs:
                raise ComposeError(f"Unknown base artifact: {base_id}", base_id=base_id)
            missing = [o.reference_id for o in overlays if o.reference_id not in self.blobs]
            if missing:
                raise ComposeError(
                    f"Unknown overlay artifact(s): {', '.join(missing)}", base_id=base_id
                )

            base = image_from_bytes(self.blobs[base_id])
            width = max([base.width] + [o.x + o.tile_width for o in overlays])
            height = max([base.height] + [o.y + o.tile_height for o in overlays])

            canvas = Image.new("RGBA", (width, height), (255, 255, 255, 0))
            canvas.paste(base, (0, 0), base)
            for overlay in overlays:
                tile = image_from_bytes(self.blobs[overlay.reference_id])
                tile = tile.resize(
                    (overlay.tile_width, overlay.tile_height), get_resampling_filter()
                )
                canvas.paste(tile, (overlay.x, overlay.y), tile)

            target_id = base_id if self.compose_in_place else self._new_id(True)
            composite = self._put(target_id, canvas, True)
            logger.info(
                f"Composed {len(overlays)} overlay(s) onto {base_id} as {composite.id}"
            )
            return composite

    def delete(self, artifact_id: str) -> None:
        with self._lock:
            self.calls["delete"] += 1
            if artifact_id in self.fail_delete_ids:
                raise StoreError(f"Simulated delete failure for {artifact_id}", operation="delete")
            self.blobs.pop(artifact_id, None)
            self.artifacts.pop(artifact_id, None)
            self.in_folder.discard(artifact_id)

    def list(self) -> List[Artifact]:
        with self._lock:
            self.calls["list"] += 1
            if self.fail_list:
                raise StoreError("Simulated listing failure", operation="list")
            return [self.artifacts[i] for i in sorted(self.in_folder)]
