"""Crop-region calibration: persistence and reference-page preview."""

from .preview import draw_calibration_overlay, reference_page_number, render_reference_page
from .store import MIN_BOX_SIZE, CalibrationStore

__all__ = [
    "CalibrationStore",
    "MIN_BOX_SIZE",
    "draw_calibration_overlay",
    "reference_page_number",
    "render_reference_page",
]
