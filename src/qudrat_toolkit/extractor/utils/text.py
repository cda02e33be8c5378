"""
Module: extractor.utils.text

Purpose:
    Reads the embedded text layer of a page and returns the tokens that
    fall inside a crop box, in approximate reading order. This is the
    exact (OCR-free) path for reading an answer-key caption.

Key Functions:
    - viewport_matrix(): Native PDF space -> rendered pixel space
    - find_in_box(): Map tokens to pixel space and keep those in a box
    - order_fragments(): Row-then-column ordering
    - text_in_box(): The joined raw string for a box

Key Classes:
    - TextLayerSource: Protocol for anything that yields page tokens
    - PyMuPdfTextLayer: Default source backed by page.get_text("dict")

Dependencies:
    - fitz (PyMuPDF): Text extraction and coordinate transforms

Used By:
    - extractor.page_processor: Text-layer answer detection
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from typing import Iterable, List, Protocol

import fitz

from qudrat_toolkit.core.models import CropBox
from .pdf import PDF_LOCK

logger = logging.getLogger(__name__)

DEFAULT_PADDING = 15
DEFAULT_ROW_TOLERANCE = 5


@dataclass(frozen=True)
class TextToken:
    """A text run anchored at its baseline origin in native PDF space."""
    text: str
    x: float
    y: float


@dataclass(frozen=True)
class TextFragment:
    """A text run anchored in rendered pixel space."""
    text: str
    x: float
    y: float


class TextLayerSource(Protocol):
    """Yields the embedded text tokens of a page."""

    def tokens(self, page: fitz.Page) -> List[TextToken]:
        ...


class PyMuPdfTextLayer:
    """
    Text layer source backed by PyMuPDF span extraction.

    Each non-blank span becomes one token anchored at the span's
    baseline origin.
    """

    def tokens(self, page: fitz.Page) -> List[TextToken]:
        with PDF_LOCK:
            data = page.get_text("dict")

        tokens: List[TextToken] = []
        for block in data.get("blocks", []):
            for line in block.get("lines", []):
                for span in line.get("spans", []):
                    text = span.get("text", "")
                    if not text or not text.strip():
                        continue
                    origin = span.get("origin")
                    if not origin or len(origin) != 2:
                        continue
                    tokens.append(TextToken(text=text, x=origin[0], y=origin[1]))
        return tokens


def viewport_matrix(page: fitz.Page, scale: float) -> fitz.Matrix:
    """
    Transform from native page coordinates to rendered pixel space.

    Applies the page rotation first, then the render zoom, matching
    what ``page.get_pixmap(matrix=Matrix(scale, scale))`` draws.
    """
    with PDF_LOCK:
        rotation = page.rotation_matrix
    return rotation * fitz.Matrix(scale, scale)


def find_in_box(
    tokens: Iterable[TextToken],
    matrix: fitz.Matrix,
    box: CropBox,
    padding: float = DEFAULT_PADDING,
    row_tolerance: float = DEFAULT_ROW_TOLERANCE,
) -> List[TextFragment]:
    """
    Keep tokens whose mapped anchor lies inside the padded box.

    Args:
        tokens: Tokens in native page space
        matrix: Native -> pixel transform from viewport_matrix()
        box: Target region in pixel space
        padding: Pixels to grow the box by on every side
        row_tolerance: See order_fragments()

    Returns:
        Matching fragments in reading order.

    Example:
        >>> find_in_box([TextToken("B", 60, 80)], fitz.Matrix(2, 2),
        ...             CropBox(100, 100, 200, 100))
        [TextFragment(text='B', x=120.0, y=160.0)]
    """
    found: List[TextFragment] = []
    for token in tokens:
        point = fitz.Point(token.x, token.y) * matrix
        if box.contains(point.x, point.y, padding=padding):
            found.append(TextFragment(text=token.text, x=point.x, y=point.y))
    return order_fragments(found, row_tolerance=row_tolerance)


def order_fragments(
    fragments: List[TextFragment],
    row_tolerance: float = DEFAULT_ROW_TOLERANCE,
) -> List[TextFragment]:
    """
    Sort fragments top-to-bottom, then left-to-right within a row.

    Two fragments share a row when their y differs by at most
    ``row_tolerance`` pixels. Good enough for a one- or two-line caption;
    not a layout engine.
    """
    def compare(a: TextFragment, b: TextFragment) -> int:
        if abs(a.y - b.y) > row_tolerance:
            return -1 if a.y < b.y else 1
        if a.x == b.x:
            return 0
        return -1 if a.x < b.x else 1

    return sorted(fragments, key=functools.cmp_to_key(compare))


def text_in_box(
    source: TextLayerSource,
    page: fitz.Page,
    box: CropBox,
    scale: float,
    padding: float = DEFAULT_PADDING,
    row_tolerance: float = DEFAULT_ROW_TOLERANCE,
) -> str:
    """
    Raw text of the tokens inside a box, joined with no separator.

    Args:
        source: Text layer to read tokens from
        page: Page the box applies to
        box: Region in pixel space at ``scale``
        scale: Render scale the box was defined at
        padding: Pixels to grow the box by
        row_tolerance: Row grouping tolerance in pixels

    Returns:
        Concatenated token text; empty when nothing falls inside.
    """
    tokens = source.tokens(page)
    fragments = find_in_box(
        tokens,
        viewport_matrix(page, scale),
        box,
        padding=padding,
        row_tolerance=row_tolerance,
    )
    logger.debug(f"{len(fragments)}/{len(tokens)} text tokens inside answer box")
    return "".join(fragment.text for fragment in fragments)
