"""Answer-letter extraction from answer-key caption text.

Answer-key captions read like ``"الإجابة الصحيحة: ب"``. The text may come
from the PDF text layer (exact but sometimes fragmented into odd runs) or
from OCR (whole but noisy), so extraction works on a squeezed string with
all spacing and punctuation noise removed:

1. Find the governing marker phrase: the one whose last occurrence is
   rightmost, longer phrase winning a tie.
2. Take the first answer letter after that occurrence. A marker with
   no letter after it is inconclusive; the letters inside the marker
   itself never count.
3. With no marker, a very short string is taken as a bare letter.
"""

from __future__ import annotations

import re
from typing import Optional, Sequence, Tuple

from qudrat_toolkit.common.constants import ANSWER_ALIASES, ANSWER_MARKERS

# Whitespace, NBSP, zero-width and bidi controls, and separator punctuation.
_NOISE_PATTERN = re.compile(
    r"[\s\u00A0\u061C\u200B-\u200F\u202A-\u202E\u2066-\u2069\uFEFF_\-.]"
)
# Every alias is searchable; the alias table is the only letter list.
_LETTER_PATTERN = re.compile("[" + re.escape("".join(ANSWER_ALIASES)) + "]")

# Below this length an unmarked string is treated as a bare answer letter.
SHORT_TEXT_LIMIT = 10


def clean_text(raw_text: str) -> str:
    """Remove spacing, invisible controls, ``_``, ``-`` and ``.``."""
    return _NOISE_PATTERN.sub("", raw_text)


def normalize_answer(char: str) -> Optional[str]:
    """
    Map one alias character to its canonical option letter.

    Returns:
        The canonical letter, or None for characters outside every
        alias group.

    Examples:
        >>> normalize_answer("B")
        'ب'
        >>> normalize_answer("x") is None
        True
    """
    return ANSWER_ALIASES.get(char)


def find_governing_marker(
    clean: str,
    markers: Sequence[str] = ANSWER_MARKERS,
) -> Optional[Tuple[int, str]]:
    """
    Locate the marker occurrence that introduces the answer.

    Each marker is looked up by its last occurrence. The rightmost one
    wins; at equal start index the longer marker wins, so the answer is
    read after the most specific phrase.

    Args:
        clean: Output of clean_text()
        markers: Candidate phrases

    Returns:
        (start_index, marker) or None when no marker occurs.
    """
    best_index = -1
    best_marker = ""
    for marker in markers:
        idx = clean.rfind(marker)
        if idx < 0:
            continue
        if idx > best_index or (idx == best_index and len(marker) > len(best_marker)):
            best_index = idx
            best_marker = marker

    if best_index < 0:
        return None
    return best_index, best_marker


def _first_letter(text: str) -> Optional[str]:
    match = _LETTER_PATTERN.search(text)
    if not match:
        return None
    return normalize_answer(match.group(0))


def extract_answer(
    raw_text: str,
    markers: Sequence[str] = ANSWER_MARKERS,
) -> Optional[str]:
    """
    Pull the canonical answer letter out of caption text.

    Args:
        raw_text: Text-layer or OCR output for the answer region
        markers: Marker phrases, defaults to ANSWER_MARKERS

    Returns:
        Canonical letter, or None when the text is inconclusive.

    Examples:
        >>> extract_answer("الإجابة الصحيحة: ب")
        'ب'
        >>> extract_answer(" C ")
        'ج'
    """
    if not raw_text:
        return None

    clean = clean_text(raw_text)

    governing = find_governing_marker(clean, markers)
    if governing is not None:
        start, marker = governing
        return _first_letter(clean[start + len(marker):])

    if len(clean) < SHORT_TEXT_LIMIT:
        return _first_letter(clean)

    return None
