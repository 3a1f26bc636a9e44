"""
Grid layout for collage overlays.

The base image sits in the top-left cell of a two column grid. Overlay ``i``
fills grid slot ``i + 1``, reading left-to-right and top-to-bottom, so even
overlays land in the right column and odd overlays in the left column of the
next row:

    +--------+--------+
    |  base  |   0    |
    +--------+--------+
    |   1    |   2    |
    +--------+--------+
    |   3    |  ...   |
"""

from typing import Dict, List, Optional, Sequence, Tuple

from chart_collage.core.models import Artifact, OverlayDirective

TILE_SIZE = 400
COLUMNS = 2

# Overlay column (index % 2) -> horizontal slot, in tiles.
COLUMN_SLOT: Dict[int, int] = {0: 1, 1: 0}

SCALE_MODE = "scale"
ANCHOR = "top-left"


def grid_cell(index: int) -> Tuple[int, int]:
    """
    Return the (column slot, row) an overlay occupies.

    Args:
        index: Position of the overlay among the overlays (0-based)

    Returns:
        Tuple of (column slot, row), both counted in tiles
    """
    if not isinstance(index, int) or index < 0:
        raise ValueError(f"Overlay index must be a non-negative integer, got {index!r}")

    column_slot = COLUMN_SLOT[index % COLUMNS]
    # Rows completed before this overlay, counting the base's row
    row = (index + 1) // COLUMNS
    return column_slot, row


def place(index: int, total_overlays: Optional[int] = None,
          tile_size: int = TILE_SIZE) -> Tuple[int, int]:
    """
    Compute the pixel offset of an overlay on the base canvas.

    The result depends only on ``index``; ``total_overlays`` is accepted so
    callers can validate the index against the batch they are laying out.

    Args:
        index: Position of the overlay among the overlays (0-based)
        total_overlays: Number of overlays in the batch, if known
        tile_size: Edge length of a tile in pixels

    Returns:
        Tuple of (x, y) measured from the top-left corner of the canvas
    """
    if total_overlays is not None and not 0 <= index < total_overlays:
        raise ValueError(
            f"Overlay index {index} out of range for {total_overlays} overlays"
        )
    column_slot, row = grid_cell(index)
    return column_slot * tile_size, row * tile_size


def canvas_size(total_overlays: int, tile_size: int = TILE_SIZE) -> Tuple[int, int]:
    """Size of the composite once the base and all overlays are drawn."""
    if total_overlays < 0:
        raise ValueError("total_overlays must be non-negative")
    slots = total_overlays + 1
    columns = min(slots, COLUMNS)
    rows = (slots + COLUMNS - 1) // COLUMNS
    return columns * tile_size, rows * tile_size


def build_overlay_directives(sources: Sequence[Artifact],
                             tile_size: int = TILE_SIZE) -> List[OverlayDirective]:
    """
    Build one overlay directive per source artifact, in batch order.

    Args:
        sources: Uploaded overlay artifacts (every batch member except the base)
        tile_size: Edge length of a tile in pixels

    Returns:
        Directives ready for the store's compose call
    """
    total = len(sources)
    directives = []
    for index, artifact in enumerate(sources):
        x, y = place(index, total, tile_size)
        directives.append(
            OverlayDirective(
                reference_id=artifact.id,
                tile_width=tile_size,
                tile_height=tile_size,
                x=x,
                y=y,
                scale_mode=SCALE_MODE,
                anchor=ANCHOR,
            )
        )
    return directives
