"""Fixed alphabet, marker and label tables.

Everything here is language data rather than tuning: the four canonical
option letters, the OCR-confusable aliases that map onto them, and the
caption phrases that introduce the answer letter on an answer-key page.
Tunable numbers live in ``extractor.config.ExtractionConfig``.
"""

from __future__ import annotations

from typing import Dict, Tuple

# Canonical option letters, in display order.
OPTION_LETTERS: Tuple[str, ...] = ("أ", "ب", "ج", "د")

# Used when neither the text layer nor OCR finds a letter.
DEFAULT_ANSWER = OPTION_LETTERS[0]

# Alias -> canonical letter. Latin aliases cover OCR reading the Arabic
# glyph as a look-alike Latin letter. Bare alef is left out: it opens every
# "ال" word, so a caption like "الجواب الصحيح ب" would read as أ.
ANSWER_ALIASES: Dict[str, str] = {
    "أ": "أ", "A": "أ", "a": "أ",
    "ب": "ب", "B": "ب", "b": "ب",
    "ج": "ج", "C": "ج", "c": "ج", "J": "ج",
    "د": "د", "D": "د", "d": "د",
}

# Caption phrases ("the correct", "the answer") in their common spellings.
# Order matters only for tie-breaking between equal-length matches.
ANSWER_MARKERS: Tuple[str, ...] = (
    "الصحيحة", "الصحيحه",
    "الاجابة", "الإجابة", "الأجابة",
    "الاجابه", "الإجابه",
    "الجواب",
)

# Characters tesseract may emit for an answer caption crop.
OCR_WHITELIST = "أبجدABCD0oالإجابةالصحيحةالجواب:.-"

QUESTION_PROMPT = "اختر الإجابة الصحيحة"

SOURCE_LABEL_TEMPLATE = "تم الإنشاء من ملف: {filename}"

# Settings key the crop configuration blob is stored under.
CROP_CONFIG_KEY = "quantitative_crop_config"
