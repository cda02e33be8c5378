"""
Module: extractor.page_processor

Purpose:
    Turns one exam page into one Question: render, crop the calibrated
    question and answer regions, then read the answer letter from the
    text layer, falling back to OCR on the answer crop.

Key Classes:
    - PageProcessor: page -> Question | None

Dependencies:
    - fitz (PyMuPDF): Page access
    - extractor.utils: Rendering, cropping, text-layer lookup
    - extractor.detection: Answer text extraction and OCR fallback

Used By:
    - extractor.pipeline.BatchConverter
"""

from __future__ import annotations

import logging
from typing import Optional

import fitz

from qudrat_toolkit.common.constants import OPTION_LETTERS, QUESTION_PROMPT
from qudrat_toolkit.core.models import CalibrationConfig, Question
from .config import ExtractionConfig
from .detection.answers import extract_answer
from .detection.ocr import OcrAnswerDetector, OcrEngine, TesseractEngine
from .timing import TimingLog, timed_phase
from .utils.images import crop_region, encode_jpeg
from .utils.pdf import PDF_LOCK, render_page
from .utils.text import PyMuPdfTextLayer, TextLayerSource, text_in_box

logger = logging.getLogger(__name__)


class PageProcessor:
    """
    Converts single pages into Questions.

    The text layer is tried first because it is exact and fast; OCR runs
    only when the layer has nothing recognisable inside the answer box.

    Example:
        >>> processor = PageProcessor()
        >>> with open_document(source) as doc:
        ...     question = processor.process(doc, 2, calibration)
    """

    def __init__(
        self,
        config: Optional[ExtractionConfig] = None,
        *,
        text_layer: Optional[TextLayerSource] = None,
        ocr_engine: Optional[OcrEngine] = None,
        timing_log: Optional[TimingLog] = None,
    ) -> None:
        self.config = config or ExtractionConfig()
        self.text_layer = text_layer or PyMuPdfTextLayer()
        if ocr_engine is None:
            ocr_engine = TesseractEngine(
                language=self.config.ocr_language,
                psm=self.config.ocr_psm,
                tesseract_cmd=self.config.tesseract_cmd,
            )
        self.ocr_detector = OcrAnswerDetector(
            ocr_engine,
            threshold=self.config.binarize_threshold,
            jpeg_quality=self.config.ocr_jpeg_quality,
        )
        self.timing_log = timing_log

    def process(
        self,
        document: fitz.Document,
        page_number: int,
        calibration: CalibrationConfig,
        *,
        document_name: str = "",
    ) -> Optional[Question]:
        """
        Extract the question on one page.

        Args:
            document: Open PDF
            page_number: 1-based page number
            calibration: Complete crop configuration
            document_name: Source filename, for logs and timings

        Returns:
            The Question, or None if anything on this page failed.
        """
        try:
            return self._process(document, page_number, calibration, document_name)
        except Exception as e:
            logger.warning(
                f"Skipping page {page_number} of {document_name or 'document'}: {e}",
                extra={
                    "pdf_name": document_name,
                    "page_number": page_number,
                    "error": str(e),
                },
            )
            return None

    def _process(
        self,
        document: fitz.Document,
        page_number: int,
        calibration: CalibrationConfig,
        document_name: str,
    ) -> Question:
        question_box = calibration.question_box
        answer_box = calibration.answer_box
        if question_box is None or answer_box is None:
            raise ValueError("calibration is incomplete")

        config = self.config
        page_id = f"{document_name}#p{page_number}"

        with timed_phase(self.timing_log, "render", page_id):
            with PDF_LOCK:
                page = document.load_page(page_number - 1)
            page_image = render_page(page, config.scale)

        with timed_phase(self.timing_log, "crop", page_id):
            question_crop = crop_region(page_image, question_box)
            answer_crop = crop_region(page_image, answer_box)
            question_image = encode_jpeg(question_crop, quality=config.crop_jpeg_quality)
            answer_image = encode_jpeg(answer_crop, quality=config.crop_jpeg_quality)

        with timed_phase(self.timing_log, "text_layer", page_id):
            raw_text = text_in_box(
                self.text_layer,
                page,
                answer_box,
                config.scale,
                padding=config.text_padding,
                row_tolerance=config.row_tolerance,
            )
            answer = extract_answer(raw_text)

        if answer is None:
            logger.debug(f"No answer in text layer for {page_id}, falling back to OCR")
            with timed_phase(self.timing_log, "ocr", page_id):
                answer = self.ocr_detector.detect(answer_crop)

        return Question(
            question_text=QUESTION_PROMPT,
            question_image=question_image,
            verification_image=answer_image,
            correct_answer=answer,
            options=OPTION_LETTERS,
        )
