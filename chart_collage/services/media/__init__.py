"""
Media storage backends for uploaded charts and composed collages.
"""

from .base import ArtifactStore
from .cloudinary_store import CloudinaryStore
from .memory_store import MemoryStore

__all__ = ["ArtifactStore", "CloudinaryStore", "MemoryStore"]
