"""
Module: extractor

Purpose:
    Extraction pipeline for turning calibrated exam PDFs into
    multiple-choice questions. Renders each page at a fixed scale, crops
    the calibrated regions, and reads the answer letter from the text
    layer with an OCR fallback.

Key Functions:
    - processable_pages(): Question pages of a document (2..N)

Key Classes:
    - BatchConverter: Multi-document conversion with bounded concurrency
    - PageProcessor: One page -> one Question
    - ExtractionConfig: Configuration for extraction settings

Dependencies:
    - fitz (PyMuPDF): PDF rendering and text extraction
    - PIL / numpy: Image manipulation and binarization
    - pytesseract: OCR fallback

Used By:
    - qudrat_toolkit.cli: Command-line conversion
"""

from .config import ExtractionConfig
from .errors import CalibrationMissingError, DocumentReadError, ExtractionError, OcrError
from .page_processor import PageProcessor
from .pipeline import BatchConverter, BatchProgress, iter_windows, processable_pages
from .utils.pdf import SourceDocument

__all__ = [
    "BatchConverter",
    "BatchProgress",
    "CalibrationMissingError",
    "DocumentReadError",
    "ExtractionConfig",
    "ExtractionError",
    "OcrError",
    "PageProcessor",
    "SourceDocument",
    "iter_windows",
    "processable_pages",
]
