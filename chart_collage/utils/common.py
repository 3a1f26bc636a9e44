"""
Common utility functions used across different modules.
"""

import io
import logging
from typing import Tuple

from PIL import Image


# Configure logging
def setup_logging(name: str, level: int = logging.INFO) -> logging.Logger:
    """
    Set up and return a logger with the given name and level.

    Args:
        name: The name of the logger
        level: The logging level (default: logging.INFO)

    Returns:
        A configured logger instance
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger


def get_resampling_filter():
    """
    Get the resampling filter used for every resize.

    Returns:
        The appropriate resampling filter
    """
    return Image.Resampling.LANCZOS


# Image handling
def image_from_bytes(data: bytes, mode: str = "RGBA") -> Image.Image:
    """
    Decode encoded image bytes into a PIL image.

    Args:
        data: Encoded image payload (PNG, JPEG, ...)
        mode: The mode to convert the image to

    Returns:
        The decoded image
    """
    img = Image.open(io.BytesIO(data))
    img.load()
    if img.mode != mode:
        img = img.convert(mode)
    return img


def image_to_png_bytes(img: Image.Image) -> bytes:
    """Encode a PIL image as PNG bytes."""
    buffer = io.BytesIO()
    img.save(buffer, "PNG")
    return buffer.getvalue()


def read_image_size(data: bytes) -> Tuple[int, int]:
    """Return (width, height) of encoded image bytes without a full decode."""
    with Image.open(io.BytesIO(data)) as img:
        return img.size
