"""
Module: extractor.detection.ocr

Purpose:
    OCR fallback for answer detection, used when a page has no usable
    text layer inside the answer region (scanned pages, outlined fonts).

Key Functions:
    - binarize(): BT.709 grayscale + fixed threshold to pure black/white

Key Classes:
    - OcrEngine: Protocol for an image -> text recogniser
    - TesseractEngine: pytesseract-backed engine restricted to the answer alphabet
    - OcrAnswerDetector: binarize -> OCR -> extract_answer, with a terminal default

Dependencies:
    - numpy: Pixel arithmetic
    - PIL: Image handling
    - pytesseract: Tesseract bindings

Used By:
    - extractor.page_processor: Fallback after the text layer
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import numpy as np
import pytesseract
from PIL import Image

from qudrat_toolkit.common.constants import DEFAULT_ANSWER, OCR_WHITELIST
from ..errors import OcrError
from ..utils.images import decode_image, encode_jpeg
from .answers import extract_answer

logger = logging.getLogger(__name__)

# ITU-R BT.709 luma coefficients
LUMA_WEIGHTS = np.array([0.2126, 0.7152, 0.0722], dtype=np.float64)
DEFAULT_THRESHOLD = 140


def binarize(image: Image.Image, threshold: int = DEFAULT_THRESHOLD) -> Image.Image:
    """
    Convert an image to pure black and white.

    Luminance below ``threshold`` becomes 0, everything else 255. The
    result is RGB with all three channels equal, so running it again
    returns the same pixels.

    Args:
        image: Input image in any mode
        threshold: Luminance cutoff, 0-255

    Returns:
        New RGB image containing only 0 and 255 values.
    """
    rgb = np.asarray(image.convert("RGB"), dtype=np.float64)
    gray = rgb @ LUMA_WEIGHTS
    values = np.where(gray < threshold, 0, 255).astype(np.uint8)
    return Image.fromarray(np.stack([values, values, values], axis=-1))


class OcrEngine(Protocol):
    """Recognises text in an image."""

    def recognize(self, image: Image.Image) -> str:
        ...


class TesseractEngine:
    """
    Tesseract via pytesseract, tuned for short answer captions.

    Uses a single-text-block segmentation mode and a whitelist limited to
    the answer letters, their Latin look-alikes, common digit confusions
    and the characters of the marker phrases.
    """

    def __init__(
        self,
        *,
        language: str = "ara",
        psm: int = 6,
        whitelist: str = OCR_WHITELIST,
        tesseract_cmd: Optional[str] = None,
    ) -> None:
        self.language = language
        self.config = f"--psm {psm} -c tessedit_char_whitelist={whitelist}"
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

    def recognize(self, image: Image.Image) -> str:
        try:
            return pytesseract.image_to_string(image, lang=self.language, config=self.config)
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError, OSError) as e:
            raise OcrError(str(e)) from e


class OcrAnswerDetector:
    """
    Reads the answer letter from an answer-region crop with OCR.

    Never returns None: when OCR fails or its text holds no answer, the
    first option letter is returned and the guess is logged.
    """

    def __init__(
        self,
        engine: OcrEngine,
        *,
        threshold: int = DEFAULT_THRESHOLD,
        jpeg_quality: int = 100,
    ) -> None:
        self.engine = engine
        self.threshold = threshold
        self.jpeg_quality = jpeg_quality

    def preprocess(self, image: Image.Image) -> Image.Image:
        """Binarize and round-trip through JPEG, as fed to the engine."""
        binary = binarize(image, self.threshold)
        return decode_image(encode_jpeg(binary, quality=self.jpeg_quality))

    def detect(self, image: Image.Image) -> str:
        """
        Detect the canonical answer letter in an answer crop.

        Args:
            image: Answer-region crop

        Returns:
            Canonical letter; DEFAULT_ANSWER when detection is inconclusive.
        """
        try:
            text = self.engine.recognize(self.preprocess(image))
        except OcrError as e:
            logger.error(f"OCR failed, defaulting answer to {DEFAULT_ANSWER}: {e}")
            return DEFAULT_ANSWER

        answer = extract_answer(text)
        if answer is None:
            logger.warning(
                f"No answer letter in OCR output {text.strip()!r}, "
                f"defaulting to {DEFAULT_ANSWER}"
            )
            return DEFAULT_ANSWER
        return answer
