"""
Exception hierarchy for collage composition.
"""

from typing import Any, Dict, List, Optional


class CollageError(Exception):
    """Base exception for collage errors."""

    # Set by the orchestrator: the batch state the error was raised in, and FAILED
    phase = None
    state = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error for a JSON error envelope."""
        return {"type": type(self).__name__, "message": str(self)}


class ConfigurationError(CollageError):
    """Exception raised for configuration-related errors."""
    pass


class EmptyBatchError(CollageError):
    """Raised when a batch contains no images. No store call is made."""

    def __init__(self, message: str = "No images were submitted"):
        super().__init__(message)


class StoreError(CollageError):
    """
    A transport-level store call failed (network, auth, quota).

    Args:
        message: Human readable description
        operation: The store operation that failed ("store", "compose", ...)
        batch_index: Position in the batch of the image being uploaded, if any
        status_code: HTTP status returned by the media service, if any
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        batch_index: Optional[int] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.operation = operation
        self.batch_index = batch_index
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.operation:
            data["operation"] = self.operation
        if self.batch_index is not None:
            data["batch_index"] = self.batch_index
        return data


class ComposeError(CollageError):
    """The media service rejected the overlay directive set or the base id."""

    def __init__(self, message: str, base_id: Optional[str] = None):
        super().__init__(message)
        self.base_id = base_id

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.base_id:
            data["base_id"] = self.base_id
        return data


class CleanupPartialFailure(CollageError):
    """
    One or more post-compose deletes failed.

    Never raised by the orchestrator; it travels alongside a successful
    result so orphaned artifacts can be reconciled later.
    """

    def __init__(self, failed_ids: List[str], errors: Optional[Dict[str, str]] = None):
        self.failed_ids = list(failed_ids)
        self.errors = dict(errors or {})
        super().__init__(
            f"Failed to delete {len(self.failed_ids)} intermediate artifact(s): "
            + ", ".join(self.failed_ids)
        )

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["failed_ids"] = self.failed_ids
        data["errors"] = self.errors
        return data


class InvalidImageError(CollageError):
    """A submitted part could not be decoded as an image."""

    def __init__(self, message: str, batch_index: Optional[int] = None):
        super().__init__(message)
        self.batch_index = batch_index
