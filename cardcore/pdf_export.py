from __future__ import annotations

import io
from typing import Tuple

from PIL import Image
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

POINTS_PER_PIXEL = 72.0 / 96.0


def image_to_pdf(image: Image.Image, native_size: Tuple[int, int]) -> bytes:
    """Embed ``image`` on a single page sized to ``native_size`` CSS pixels.

    A high-density raster keeps its pixels; only the page geometry uses the
    native size, so the PDF prints at the card's nominal dimensions.
    """
    page_width = native_size[0] * POINTS_PER_PIXEL
    page_height = native_size[1] * POINTS_PER_PIXEL
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=(page_width, page_height))
    pdf.drawImage(
        ImageReader(image),
        0,
        0,
        width=page_width,
        height=page_height,
        mask="auto",
    )
    pdf.showPage()
    pdf.save()
    return buffer.getvalue()
