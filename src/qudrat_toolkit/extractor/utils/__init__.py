"""
Utilities for PDF rendering, image cropping and text-layer lookup.
"""

from .images import crop_region, decode_image, encode_jpeg
from .pdf import PDF_LOCK, SourceDocument, count_pages, open_document, render_page
from .text import (
    PyMuPdfTextLayer,
    TextFragment,
    TextLayerSource,
    TextToken,
    find_in_box,
    order_fragments,
    text_in_box,
    viewport_matrix,
)

__all__ = [
    "PDF_LOCK",
    "PyMuPdfTextLayer",
    "SourceDocument",
    "TextFragment",
    "TextLayerSource",
    "TextToken",
    "count_pages",
    "crop_region",
    "decode_image",
    "encode_jpeg",
    "find_in_box",
    "open_document",
    "order_fragments",
    "render_page",
    "text_in_box",
    "viewport_matrix",
]
