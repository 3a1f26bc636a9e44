"""
Data model shared by the store clients, the layout planner and the orchestrator.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional


class BatchState(Enum):
    """States a batch moves through while it is being composed."""
    RECEIVING = "receiving"
    UPLOADING = "uploading"
    COMPOSING = "composing"
    CLEANING_UP = "cleaning_up"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class RawImage:
    """Encoded image payload with its declared dimensions."""
    data: bytes
    width: int = 400
    height: int = 400
    filename: Optional[str] = None
    content_type: str = "image/png"

    def __repr__(self) -> str:
        return (
            f"RawImage(filename={self.filename!r}, {self.width}x{self.height}, "
            f"{len(self.data)} bytes)"
        )


@dataclass(frozen=True)
class Artifact:
    """A stored image object returned by the media service."""
    id: str
    url: str
    width: int
    height: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Artifact":
        return cls(
            id=data["id"],
            url=data["url"],
            width=int(data.get("width", 0)),
            height=int(data.get("height", 0)),
        )


@dataclass(frozen=True)
class OverlayDirective:
    """Where and how one uploaded artifact is drawn onto the base canvas."""
    reference_id: str
    tile_width: int
    tile_height: int
    x: int
    y: int
    scale_mode: str = "scale"
    anchor: str = "top-left"


@dataclass
class Batch:
    """Ordered images submitted together. Order decides placement and the base."""
    images: List[RawImage] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.images)

    def __iter__(self) -> Iterator[RawImage]:
        return iter(self.images)

    def is_empty(self) -> bool:
        return not self.images
