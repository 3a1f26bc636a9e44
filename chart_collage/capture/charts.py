"""
Chart capture.

Renders chart definitions to fixed-size PNG rasters and packages them as an
ordered batch ready for submission.
"""

import io
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
from PIL import Image

from chart_collage.core.models import Batch, RawImage
from chart_collage.utils.common import get_resampling_filter, image_to_png_bytes, setup_logging

logger = setup_logging(__name__)

CHART_TYPES = ("bar", "line", "doughnut", "polar_area")
DEFAULT_SIZE = (400, 400)
DPI = 100


@dataclass
class ChartSpec:
    """A chart to render.

    Args:
        chart_type: One of "bar", "line", "doughnut", "polar_area"
        labels: Category labels
        values: One value per label
        title: Chart title
        colors: Optional fill colors, one per label
        edge_colors: Optional edge colors, one per label
    """
    chart_type: str
    labels: List[str]
    values: List[float]
    title: str = ""
    colors: Optional[List[str]] = None
    edge_colors: Optional[List[str]] = None

    def __post_init__(self) -> None:
        if self.chart_type not in CHART_TYPES:
            raise ValueError(f"Unsupported chart type: {self.chart_type}")
        if len(self.labels) != len(self.values):
            raise ValueError("labels and values must have the same length")


def default_chart_specs() -> List[ChartSpec]:
    """The four demo charts: bar, line, doughnut and polar area."""
    return [
        ChartSpec(
            chart_type="bar",
            labels=["Red", "Blue", "Yellow", "Green", "Purple", "Orange"],
            values=[12, 19, 3, 5, 2, 3],
            title="Bar Chart",
            colors=["#ff638433", "#36a2eb33", "#ffce5633", "#4bc0c033", "#9966ff33", "#ff9f4033"],
            edge_colors=["#ff6384", "#36a2eb", "#ffce56", "#4bc0c0", "#9966ff", "#ff9f40"],
        ),
        ChartSpec(
            chart_type="line",
            labels=["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul"],
            values=[65, 59, 80, 81, 56, 55, 40],
            title="Line Chart",
            colors=["#4bc0c0"],
        ),
        ChartSpec(
            chart_type="doughnut",
            labels=["Red", "Blue", "Yellow"],
            values=[300, 50, 100],
            title="Doughnut Chart",
            colors=["#ff6384", "#36a2eb", "#ffcd56"],
        ),
        ChartSpec(
            chart_type="polar_area",
            labels=["Red", "Green", "Yellow", "Grey", "Blue"],
            values=[11, 16, 7, 3, 14],
            title="Polar Area Chart",
            colors=["#ff6384", "#4bc0c0", "#ffcd56", "#c9cbcf", "#36a2eb"],
        ),
    ]


def _draw(fig, spec: ChartSpec) -> None:
    if spec.chart_type == "bar":
        ax = fig.add_subplot(111)
        ax.bar(
            spec.labels,
            spec.values,
            color=spec.colors,
            edgecolor=spec.edge_colors,
            linewidth=1,
        )
        ax.set_ylim(bottom=0)
        ax.tick_params(axis="x", labelrotation=45)
    elif spec.chart_type == "line":
        ax = fig.add_subplot(111)
        color = spec.colors[0] if spec.colors else None
        ax.plot(spec.labels, spec.values, color=color, marker="o")
    elif spec.chart_type == "doughnut":
        ax = fig.add_subplot(111)
        ax.pie(
            spec.values,
            labels=spec.labels,
            colors=spec.colors,
            wedgeprops={"width": 0.5},
            startangle=90,
            counterclock=False,
        )
        ax.set_aspect("equal")
    else:
        ax = fig.add_subplot(111, projection="polar")
        count = len(spec.values)
        theta = np.linspace(0.0, 2 * np.pi, count, endpoint=False)
        ax.bar(
            theta,
            spec.values,
            width=2 * np.pi / count,
            color=spec.colors,
            alpha=0.7,
            align="edge",
        )
        ax.set_xticks(theta + np.pi / count)
        ax.set_xticklabels(spec.labels)

    if spec.title:
        ax.set_title(spec.title)


def render_chart(spec: ChartSpec, size: Tuple[int, int] = DEFAULT_SIZE) -> RawImage:
    """
    Render a chart to PNG bytes of exactly ``size`` pixels.

    Args:
        spec: Chart to draw
        size: Output (width, height) in pixels

    Returns:
        The rendered chart as a RawImage
    """
    width, height = size
    fig = plt.figure(figsize=(width / DPI, height / DPI), dpi=DPI)
    try:
        _draw(fig, spec)
        fig.tight_layout()
        buffer = io.BytesIO()
        fig.savefig(buffer, format="png", dpi=DPI, facecolor="white")
    finally:
        plt.close(fig)

    img = Image.open(io.BytesIO(buffer.getvalue())).convert("RGBA")
    if img.size != (width, height):
        img = img.resize((width, height), get_resampling_filter())

    return RawImage(
        data=image_to_png_bytes(img),
        width=width,
        height=height,
        filename=f"{spec.chart_type}.png",
    )


def capture_batch(specs: Optional[Sequence[ChartSpec]] = None,
                  size: Tuple[int, int] = DEFAULT_SIZE) -> Batch:
    """Render charts in order and package them as a batch."""
    if specs is None:
        specs = default_chart_specs()
    images = []
    for spec in specs:
        logger.info(f"Rendering {spec.chart_type} chart")
        images.append(render_chart(spec, size))
    return Batch(images)
