"""
Module: extractor.utils.pdf

Purpose:
    PDF opening and page rendering. Wraps every PyMuPDF call the pipeline
    makes so rendering happens at one fixed scale and under one lock.

Key Functions:
    - open_document(): Open an uploaded PDF from memory
    - count_pages(): Page count without keeping the document open
    - render_page(): Render a full page to an RGB image

Key Classes:
    - SourceDocument: An uploaded file (name + bytes)

Dependencies:
    - fitz (PyMuPDF): PDF parsing and rendering
    - PIL.Image: Image handling

Used By:
    - extractor.page_processor: Renders pages for cropping
    - extractor.pipeline: Opens documents and counts pages
    - calibration.preview: Renders the reference page

Thread safety:
    PyMuPDF is not thread-safe. Callers that touch a fitz object from a
    worker thread hold ``PDF_LOCK`` for the duration of the call.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path

import fitz
from PIL import Image

from ..config import DEFAULT_SCALE
from ..errors import DocumentReadError

logger = logging.getLogger(__name__)

# Serialises all PyMuPDF access across worker threads.
PDF_LOCK = threading.RLock()


@dataclass(frozen=True)
class SourceDocument:
    """
    An uploaded exam file.

    Attributes:
        name: Original filename, used for naming the resulting test
        data: Raw PDF bytes
    """
    name: str
    data: bytes

    @classmethod
    def from_path(cls, path: Path) -> SourceDocument:
        """
        Read a PDF from disk.

        Raises:
            DocumentReadError: If the file cannot be read.
        """
        try:
            return cls(name=path.name, data=path.read_bytes())
        except OSError as e:
            raise DocumentReadError(path.name, str(e)) from e


def open_document(source: SourceDocument) -> fitz.Document:
    """
    Open a source document with PyMuPDF.

    Args:
        source: Uploaded file to open.

    Returns:
        Open fitz.Document; use it as a context manager to close it.

    Raises:
        DocumentReadError: If the bytes are not a readable PDF or the
            document is password protected.

    Example:
        >>> with open_document(source) as doc:
        ...     doc.page_count
        6
    """
    try:
        with PDF_LOCK:
            doc = fitz.open(stream=source.data, filetype="pdf")
    except (RuntimeError, ValueError) as e:
        raise DocumentReadError(source.name, str(e)) from e

    if doc.needs_pass:
        doc.close()
        raise DocumentReadError(source.name, "document is password protected")
    return doc


def count_pages(source: SourceDocument) -> int:
    """
    Count pages of a source document.

    Raises:
        DocumentReadError: If the document cannot be opened.
    """
    with open_document(source) as doc:
        return doc.page_count


def render_page(page: fitz.Page, scale: float = DEFAULT_SCALE) -> Image.Image:
    """
    Render a full page to an RGB image.

    The output pixel space is the one crop boxes are defined in: a point
    at (x, y) in PDF units lands at (x * scale, y * scale) for an
    unrotated page.

    Args:
        page: PyMuPDF page object.
        scale: Zoom relative to 72 dpi. Defaults to 2.0.

    Returns:
        RGB image of the whole page.

    Example:
        >>> image = render_page(doc[1])
        >>> image.size
        (1190, 1684)
    """
    matrix = fitz.Matrix(scale, scale)
    with PDF_LOCK:
        pix = page.get_pixmap(matrix=matrix, alpha=False)
        samples = pix.samples
    mode = "RGB" if pix.n >= 3 else "L"
    image = Image.frombytes(mode, (pix.width, pix.height), samples)
    return image if mode == "RGB" else image.convert("RGB")
