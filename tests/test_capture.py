import pytest

from chart_collage.capture.charts import (
    ChartSpec,
    capture_batch,
    default_chart_specs,
    render_chart,
)
from chart_collage.utils.common import read_image_size


def test_default_specs_cover_every_chart_type():
    assert [s.chart_type for s in default_chart_specs()] == [
        "bar",
        "line",
        "doughnut",
        "polar_area",
    ]


def test_render_chart_is_fixed_size():
    spec = ChartSpec(chart_type="bar", labels=["a", "b"], values=[1, 2], title="Votes")

    image = render_chart(spec)

    assert (image.width, image.height) == (400, 400)
    assert read_image_size(image.data) == (400, 400)
    assert image.data.startswith(b"\x89PNG")
    assert image.filename == "bar.png"


def test_capture_batch_keeps_order():
    batch = capture_batch(size=(200, 200))

    assert len(batch) == 4
    assert [img.filename for img in batch] == [
        "bar.png",
        "line.png",
        "doughnut.png",
        "polar_area.png",
    ]
    assert all(read_image_size(img.data) == (200, 200) for img in batch)


def test_chart_spec_validation():
    with pytest.raises(ValueError):
        ChartSpec(chart_type="radar", labels=["a"], values=[1])
    with pytest.raises(ValueError):
        ChartSpec(chart_type="bar", labels=["a", "b"], values=[1])
