"""
Module: extractor.config

Purpose:
    Configuration dataclass for the extraction pipeline. Provides
    immutable settings for rendering scale, text-layer matching, OCR
    preprocessing, and batch scheduling.

Key Classes:
    - ExtractionConfig: Main configuration for extraction

Dependencies:
    - dataclasses: For frozen dataclass support

Used By:
    - extractor.page_processor: Rendering, cropping and detection settings
    - extractor.pipeline: Window size and progress throttling
    - calibration.preview: Reference page scale
"""

from dataclasses import dataclass
from typing import Optional

# Calibration and extraction must render at the same scale or the stored
# crop boxes no longer line up with the page.
DEFAULT_SCALE = 2.0


@dataclass(frozen=True)
class ExtractionConfig:
    """
    Configuration for the page extraction pipeline.

    Attributes:
        scale: Render scale relative to PDF points (default 2.0)
        window_size: Pages of one document in flight at once (default 5)
        text_padding: Pixels the answer box is grown by when matching
            text-layer tokens (default 15)
        row_tolerance: Max vertical distance in pixels for two tokens to
            count as one row (default 5)
        binarize_threshold: Luminance below which a pixel turns black
            before OCR (default 140)
        crop_jpeg_quality: JPEG quality for stored crops (default 80)
        ocr_jpeg_quality: JPEG quality for the binarized OCR input (default 100)
        progress_every: Report progress every N finished pages (default 5)
        ocr_language: Tesseract language pack (default "ara")
        ocr_psm: Tesseract page segmentation mode; 6 is a single text block
        tesseract_cmd: Path to the tesseract binary, None to use PATH
        section: Storage section tests are created in
    """
    scale: float = DEFAULT_SCALE
    window_size: int = 5
    text_padding: int = 15
    row_tolerance: int = 5
    binarize_threshold: int = 140
    crop_jpeg_quality: int = 80
    ocr_jpeg_quality: int = 100
    progress_every: int = 5
    ocr_language: str = "ara"
    ocr_psm: int = 6
    tesseract_cmd: Optional[str] = None
    section: str = "quantitative"

    def __post_init__(self) -> None:
        if self.scale <= 0:
            raise ValueError(f"scale must be > 0: {self.scale}")
        if self.window_size < 1:
            raise ValueError(f"window_size must be >= 1: {self.window_size}")
        if self.progress_every < 1:
            raise ValueError(f"progress_every must be >= 1: {self.progress_every}")
