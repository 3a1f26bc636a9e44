"""
Base class for media stores.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Sequence

from chart_collage.core.errors import CollageError
from chart_collage.core.models import Artifact, OverlayDirective
from chart_collage.utils.common import setup_logging

logger = setup_logging(__name__)


class ArtifactStore(ABC):
    """Remote capability that stores, composes, deletes and lists images."""

    @abstractmethod
    def store(self, data: bytes, folder: bool = False) -> Artifact:
        """
        Store raw image bytes.

        Args:
            data: Encoded image payload
            folder: Whether to place the artifact in the listed collage folder

        Returns:
            The stored artifact

        Raises:
            StoreError: On transport failure or quota rejection
        """
        pass

    @abstractmethod
    def compose(self, base_id: str, overlays: Sequence[OverlayDirective]) -> Artifact:
        """
        Draw overlays onto a base artifact, producing one new artifact.

        Args:
            base_id: Id of the artifact used as the canvas
            overlays: Placement directives for the other artifacts

        Returns:
            The composite artifact

        Raises:
            ComposeError: If the base or an overlay reference is invalid
            StoreError: On transport failure
        """
        pass

    @abstractmethod
    def delete(self, artifact_id: str) -> None:
        """
        Delete an artifact. Deleting an absent id is not an error.

        Raises:
            StoreError: On transport failure
        """
        pass

    @abstractmethod
    def list(self) -> List[Artifact]:
        """
        List the artifacts in the collage folder. Order is store-defined.

        Raises:
            StoreError: On transport failure
        """
        pass

    def delete_many(self, artifact_ids: Iterable[str]) -> dict:
        """
        Delete several artifacts, carrying on past individual failures.

        Returns:
            Mapping of failed artifact id to error message
        """
        failures = {}
        for artifact_id in artifact_ids:
            try:
                self.delete(artifact_id)
            except CollageError as e:
                logger.warning(f"Could not delete artifact {artifact_id}: {e}")
                failures[artifact_id] = str(e)
        return failures
