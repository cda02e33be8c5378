"""
Module: calibration.preview

Purpose:
    Renders the reference page an operator calibrates against and draws
    the stored regions on it, so boxes can be checked before a batch.

Key Functions:
    - reference_page_number(): Page used for calibration
    - render_reference_page(): Render it at the extraction scale
    - draw_calibration_overlay(): Draw both regions with captions

Dependencies:
    - PIL: Image drawing
    - extractor.utils.pdf: Rendering at the fixed scale
"""

from __future__ import annotations

import logging

from PIL import Image, ImageDraw, ImageFont

from qudrat_toolkit.core.models import BoxKind, CalibrationConfig
from qudrat_toolkit.extractor.config import DEFAULT_SCALE
from qudrat_toolkit.extractor.utils.pdf import PDF_LOCK, SourceDocument, open_document, render_page

logger = logging.getLogger(__name__)

COLORS = {
    BoxKind.QUESTION: (56, 189, 248),   # Blue
    BoxKind.ANSWER: (52, 211, 153),     # Green
}
CAPTIONS = {
    BoxKind.QUESTION: "Question",
    BoxKind.ANSWER: "Answer",
}
FILL_ALPHA = 51
BOX_LINE_WIDTH = 4
FONT_SIZE = 30


def reference_page_number(page_count: int) -> int:
    """Page 2 when there is one (page 1 is the cover), else page 1."""
    return 2 if page_count > 1 else 1


def render_reference_page(source: SourceDocument, scale: float = DEFAULT_SCALE) -> Image.Image:
    """
    Render the calibration reference page of a document.

    Raises:
        DocumentReadError: If the document cannot be opened.
    """
    with open_document(source) as doc:
        page_number = reference_page_number(doc.page_count)
        with PDF_LOCK:
            page = doc.load_page(page_number - 1)
        logger.debug(f"Rendering reference page {page_number} of {source.name}")
        return render_page(page, scale)


def draw_calibration_overlay(image: Image.Image, config: CalibrationConfig) -> Image.Image:
    """
    Draw the defined regions over a rendered page.

    Args:
        image: Page rendered at the calibration scale
        config: Regions to draw; undefined ones are skipped

    Returns:
        New RGB image (original unchanged)
    """
    base = image.convert("RGBA")
    overlay = Image.new("RGBA", base.size, (255, 255, 255, 0))
    draw = ImageDraw.Draw(overlay)

    try:
        font = ImageFont.truetype("Arial.ttf", FONT_SIZE)
    except (IOError, OSError):
        font = ImageFont.load_default()

    for kind in BoxKind:
        box = config.box(kind)
        if box is None:
            continue
        color = COLORS[kind]
        rect = (box.x, box.y, box.right, box.bottom)
        draw.rectangle(rect, fill=color + (FILL_ALPHA,), outline=color + (255,), width=BOX_LINE_WIDTH)
        draw.text((box.x, max(0, box.y - FONT_SIZE - 10)), CAPTIONS[kind], fill=color + (255,), font=font)

    return Image.alpha_composite(base, overlay).convert("RGB")
