"""
Core Models Package

Immutable data models shared by calibration, extraction and storage.
All models are frozen dataclasses so a batch run can hand them between
worker threads without copying.
"""

from .boxes import BoxKind, CalibrationConfig, CropBox
from .questions import Question, Test

__all__ = [
    "BoxKind",
    "CalibrationConfig",
    "CropBox",
    "Question",
    "Test",
]
