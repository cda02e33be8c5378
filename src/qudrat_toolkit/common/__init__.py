"""Common utilities shared across the toolkit."""

from __future__ import annotations

from .constants import (
    ANSWER_ALIASES,
    ANSWER_MARKERS,
    DEFAULT_ANSWER,
    OPTION_LETTERS,
)
from .path_utils import strip_pdf_suffix, test_name_from_filename

__all__ = [
    # constants
    "ANSWER_ALIASES",
    "ANSWER_MARKERS",
    "DEFAULT_ANSWER",
    "OPTION_LETTERS",
    # path_utils
    "strip_pdf_suffix",
    "test_name_from_filename",
]
