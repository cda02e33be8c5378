"""Core data models for the Qudrat question importer."""

from .models import BoxKind, CalibrationConfig, CropBox, Question, Test

__all__ = [
    "BoxKind",
    "CalibrationConfig",
    "CropBox",
    "Question",
    "Test",
]
