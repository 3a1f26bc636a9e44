import pytest

from chart_collage.core.layout import (
    COLUMN_SLOT,
    build_overlay_directives,
    canvas_size,
    grid_cell,
    place,
)
from chart_collage.core.models import Artifact


@pytest.mark.parametrize(
    "index,expected",
    [
        (0, (400, 0)),
        (1, (0, 400)),
        (2, (400, 400)),
        (3, (0, 800)),
        (4, (400, 800)),
        (5, (0, 1200)),
    ],
)
def test_place_table(index, expected):
    assert place(index, index + 1) == expected


def test_place_ignores_total_overlays():
    for index in range(6):
        positions = {place(index, total) for total in range(index + 1, index + 6)}
        assert positions == {place(index)}


def test_even_overlays_use_right_slot():
    assert COLUMN_SLOT == {0: 1, 1: 0}
    assert place(0)[0] == 400
    assert place(1)[0] == 0


def test_column_repeats_every_two_indices():
    for index in range(10):
        assert place(index)[0] == place(index + 2)[0]


def test_row_advances_one_tile_every_two_indices():
    for index in range(10):
        assert place(index + 2)[1] - place(index)[1] == 400


def test_overlays_never_cover_the_base_cell():
    # The base occupies the top-left tile
    assert all(place(i) != (0, 0) for i in range(20))
    cells = [grid_cell(i) for i in range(20)]
    assert len(set(cells)) == len(cells)


def test_place_rejects_bad_indices():
    with pytest.raises(ValueError):
        place(-1)
    with pytest.raises(ValueError):
        place(3, 3)


def test_place_with_custom_tile_size():
    assert place(2, tile_size=100) == (100, 100)


@pytest.mark.parametrize(
    "overlays,expected",
    [(0, (400, 400)), (1, (800, 400)), (2, (800, 800)), (3, (800, 800)), (4, (800, 1200))],
)
def test_canvas_size(overlays, expected):
    assert canvas_size(overlays) == expected


def test_build_overlay_directives_for_four_image_batch():
    sources = [Artifact(id=f"a{i}", url=f"memory://a{i}", width=400, height=400) for i in range(3)]

    directives = build_overlay_directives(sources)

    assert [(d.reference_id, d.x, d.y) for d in directives] == [
        ("a0", 400, 0),
        ("a1", 0, 400),
        ("a2", 400, 400),
    ]
    for directive in directives:
        assert (directive.tile_width, directive.tile_height) == (400, 400)
        assert directive.scale_mode == "scale"
        assert directive.anchor == "top-left"


def test_build_overlay_directives_empty():
    assert build_overlay_directives([]) == []
