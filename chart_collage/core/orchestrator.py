"""
Collage orchestration.

Uploads a batch of chart images, composes them onto the last image of the
batch and removes the intermediate uploads.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from chart_collage.core.config import CollageConfig
from chart_collage.core.errors import (
    CleanupPartialFailure,
    CollageError,
    EmptyBatchError,
    StoreError,
)
from chart_collage.core.layout import build_overlay_directives, canvas_size
from chart_collage.core.models import Artifact, Batch, BatchState
from chart_collage.services.media.base import ArtifactStore
from chart_collage.utils.common import setup_logging

logger = setup_logging(__name__)


@dataclass
class BatchRun:
    """State of one batch while it moves through the pipeline."""
    batch: Batch
    state: BatchState = BatchState.RECEIVING
    history: List[BatchState] = field(default_factory=lambda: [BatchState.RECEIVING])
    overlay_sources: List[Artifact] = field(default_factory=list)
    base: Optional[Artifact] = None

    def advance(self, state: BatchState) -> None:
        self.state = state
        self.history.append(state)

    @property
    def uploaded(self) -> List[Artifact]:
        return self.overlay_sources + ([self.base] if self.base else [])


@dataclass
class CollageResult:
    """Outcome of a successful batch."""
    artifact: Artifact
    cleanup_failure: Optional[CleanupPartialFailure] = None
    deleted_ids: List[str] = field(default_factory=list)
    state: BatchState = BatchState.DONE
    history: List[BatchState] = field(default_factory=list)

    @property
    def warnings(self) -> List[Dict[str, Any]]:
        return [self.cleanup_failure.to_dict()] if self.cleanup_failure else []


class CollageOrchestrator:
    """Drives batches through upload, compose and cleanup.

    Holds no per-batch state, so one instance can serve concurrent requests.
    """

    def __init__(self, store: ArtifactStore, config: Optional[CollageConfig] = None):
        self.store = store
        self.config = config or CollageConfig()

    def run(self, batch: Batch) -> CollageResult:
        """
        Compose a batch into one collage.

        Args:
            batch: Ordered images; the last one becomes the base canvas

        Returns:
            The composite artifact plus any cleanup failure

        Raises:
            EmptyBatchError: If the batch has no images
            StoreError: If an upload fails
            ComposeError: If the store rejects the composition

            Raised errors carry ``phase`` (the state the batch failed in)
            and ``state`` (always ``BatchState.FAILED``).
        """
        run = BatchRun(batch)
        try:
            if batch.is_empty():
                raise EmptyBatchError()

            logger.info(f"Composing batch of {len(batch)} image(s)")
            self._upload(run)
            composite = self._compose(run)
        except CollageError as e:
            e.phase = run.state
            run.advance(BatchState.FAILED)
            e.state = run.state
            if self.config.rollback_on_failure:
                self._rollback(run)
            raise

        result = self._cleanup(run, composite)
        run.advance(BatchState.DONE)
        result.state = run.state
        result.history = list(run.history)
        logger.info(f"Collage ready: {composite.id} ({composite.width}x{composite.height})")
        return result

    def _upload(self, run: BatchRun) -> None:
        run.advance(BatchState.UPLOADING)
        total = len(run.batch)
        last = total - 1
        for index, image in enumerate(run.batch):
            try:
                artifact = self.store.store(image.data, folder=index == last)
            except StoreError as e:
                e.batch_index = index
                logger.error(f"Upload of image {index + 1}/{total} failed: {e}")
                raise

            if index == last:
                run.base = artifact
            else:
                run.overlay_sources.append(artifact)

    def _compose(self, run: BatchRun) -> Artifact:
        run.advance(BatchState.COMPOSING)
        if not run.overlay_sources:
            # A single image is its own collage
            return run.base

        directives = build_overlay_directives(run.overlay_sources, self.config.tile_size)
        width, height = canvas_size(len(directives), self.config.tile_size)
        logger.info(
            f"Composing {len(directives)} overlay(s) onto {run.base.id} "
            f"(grid {width}x{height})"
        )
        try:
            return self.store.compose(run.base.id, directives)
        except CollageError as e:
            logger.error(f"Compose onto {run.base.id} failed: {e}")
            raise

    def _cleanup(self, run: BatchRun, composite: Artifact) -> CollageResult:
        run.advance(BatchState.CLEANING_UP)
        redundant = [a.id for a in run.overlay_sources]
        if composite.id != run.base.id:
            # The store produced a separate composite, so the base is an intermediate too
            redundant.append(run.base.id)

        failures = self.store.delete_many(redundant)
        cleanup_failure = None
        if failures:
            cleanup_failure = CleanupPartialFailure(list(failures), failures)
            logger.warning(str(cleanup_failure))

        return CollageResult(
            artifact=composite,
            cleanup_failure=cleanup_failure,
            deleted_ids=[i for i in redundant if i not in failures],
        )

    def _rollback(self, run: BatchRun) -> None:
        ids = [a.id for a in run.uploaded]
        if not ids:
            return
        logger.info(f"Rolling back {len(ids)} uploaded artifact(s)")
        failures = self.store.delete_many(ids)
        if failures:
            logger.warning(f"Rollback left {len(failures)} orphaned artifact(s): {list(failures)}")
