"""
Detection modules for reading the answer letter of a page.
"""

from .answers import clean_text, extract_answer, find_governing_marker, normalize_answer
from .ocr import OcrAnswerDetector, OcrEngine, TesseractEngine, binarize

__all__ = [
    "OcrAnswerDetector",
    "OcrEngine",
    "TesseractEngine",
    "binarize",
    "clean_text",
    "extract_answer",
    "find_governing_marker",
    "normalize_answer",
]
