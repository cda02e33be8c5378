"""
Module: questions

Purpose:
    Provides the Question and Test dataclasses - the records the extractor
    produces and hands to the test-storage collaborator.

Key Functions:
    - Question.to_dict() / Question.from_dict(): JSON with data-URL images
    - Test.to_dict() / Test.from_dict(): JSON with nested questions

Dependencies:
    - base64 (std)
    - dataclasses (std)
    - common.constants: option letters

Used By:
    - extractor.page_processor
    - extractor.pipeline
    - storage.repository
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from qudrat_toolkit.common.constants import OPTION_LETTERS

_JPEG_DATA_URL_PREFIX = "data:image/jpeg;base64,"


def _to_data_url(image: bytes) -> str:
    return _JPEG_DATA_URL_PREFIX + base64.b64encode(image).decode("ascii")


def _from_data_url(value: str) -> bytes:
    if value.startswith("data:"):
        value = value.split(",", 1)[1]
    return base64.b64decode(value)


@dataclass(frozen=True)
class Question:
    """
    One multiple-choice question cut from one exam page (immutable).

    Attributes:
        question_text: Prompt shown above the question image
        question_image: JPEG bytes of the question-region crop
        verification_image: JPEG bytes of the answer-region crop, kept so a
            human can audit the detected answer
        correct_answer: One of ``options``
        options: The four canonical option letters
        id: Assigned by the storage collaborator; None until stored

    Invariants:
        - correct_answer in options
    """

    question_text: str
    question_image: bytes
    verification_image: bytes
    correct_answer: str
    options: Tuple[str, ...] = OPTION_LETTERS
    id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.correct_answer not in self.options:
            raise ValueError(
                f"correct_answer {self.correct_answer!r} not in options {self.options!r}"
            )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "questionText": self.question_text,
            "questionImage": _to_data_url(self.question_image),
            "verificationImage": _to_data_url(self.verification_image),
            "options": list(self.options),
            "correctAnswer": self.correct_answer,
        }
        if self.id is not None:
            d["id"] = self.id
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Question:
        return cls(
            question_text=data["questionText"],
            question_image=_from_data_url(data["questionImage"]),
            verification_image=_from_data_url(data["verificationImage"]),
            correct_answer=data["correctAnswer"],
            options=tuple(data.get("options", OPTION_LETTERS)),
            id=data.get("id"),
        )


@dataclass(frozen=True)
class Test:
    """
    A named collection of questions created from one source document.

    Attributes:
        id: Identifier assigned by the storage collaborator
        name: Display name, derived from the source filename
        questions: Questions in source page order
        source_text: Provenance note naming the original file
    """

    __test__ = False  # keep pytest from collecting this class

    id: str
    name: str
    questions: Tuple[Question, ...] = field(default_factory=tuple)
    source_text: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "questions": [q.to_dict() for q in self.questions],
        }
        if self.source_text is not None:
            d["sourceText"] = self.source_text
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Test:
        return cls(
            id=data["id"],
            name=data["name"],
            questions=tuple(Question.from_dict(q) for q in data.get("questions", [])),
            source_text=data.get("sourceText"),
        )
