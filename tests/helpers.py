import io

from PIL import Image

from chart_collage.core.models import Batch, RawImage

COLORS = [(255, 0, 0), (0, 255, 0), (0, 0, 255), (255, 255, 0), (0, 255, 255)]


def png_bytes(color, size=(400, 400)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, "PNG")
    return buffer.getvalue()


def make_batch(count: int, size=(400, 400)) -> Batch:
    return Batch(
        [
            RawImage(data=png_bytes(COLORS[i % len(COLORS)], size), width=size[0],
                     height=size[1], filename=f"chart_{i}.png")
            for i in range(count)
        ]
    )
