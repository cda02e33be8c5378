"""Exceptions raised by the extraction pipeline.

Page-level failures are never raised past ``PageProcessor``; only the
errors below reach a batch caller.
"""

from __future__ import annotations


class ExtractionError(Exception):
    """Base class for extraction failures."""


class CalibrationMissingError(ExtractionError):
    """Batch started before both crop regions were defined."""

    def __init__(self, message: str = "Define both the question and answer regions before converting.") -> None:
        super().__init__(message)


class DocumentReadError(ExtractionError):
    """A source document could not be opened or its pages counted."""

    def __init__(self, document_name: str, reason: str) -> None:
        self.document_name = document_name
        self.reason = reason
        super().__init__(f"Could not read {document_name}: {reason}")


class OcrError(ExtractionError):
    """The OCR engine failed to run on an image."""
