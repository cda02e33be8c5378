"""Path and filename utilities.

Provides shared functions for deriving test names from uploaded
exam filenames.
"""

from __future__ import annotations

import re
from pathlib import Path

_PDF_SUFFIX = re.compile(r"\.pdf$", re.IGNORECASE)


def strip_pdf_suffix(filename: str | Path) -> str:
    """Remove a trailing ``.pdf`` (any case) from a filename.

    Args:
        filename: Filename or Path object.

    Returns:
        The bare name without directory or PDF suffix.

    Examples:
        >>> strip_pdf_suffix("Quant 12 - answers.PDF")
        'Quant 12 - answers'
    """
    if isinstance(filename, Path):
        filename = filename.name
    return _PDF_SUFFIX.sub("", filename)


def test_name_from_filename(filename: str | Path) -> str:
    """Derive a test name from an exam filename.

    Takes the text before the first ``-`` and trims it. Uploads are
    usually named ``"<test name> - <anything>.pdf"``.

    Args:
        filename: Filename or Path object.

    Returns:
        Test name; the full bare name when nothing precedes the first dash.

    Examples:
        >>> test_name_from_filename("Quant Set 3 - 1445.pdf")
        'Quant Set 3'
        >>> test_name_from_filename("Model 7.pdf")
        'Model 7'
    """
    raw_name = strip_pdf_suffix(filename)
    name = raw_name.split("-")[0].strip()
    return name or raw_name.strip()


# Not a pytest test despite the name.
test_name_from_filename.__test__ = False  # type: ignore[attr-defined]
