"""
Module: boxes

Purpose:
    Provides CropBox and CalibrationConfig - the pixel-space rectangles an
    operator draws on a reference page, and the pair of them that drives
    every later extraction.

Key Functions:
    - CropBox.from_corners(): Normalise a drag gesture into a rectangle
    - CropBox.as_pil_box(): Integer (left, top, right, bottom) for PIL
    - CalibrationConfig.with_box(): Copy with one box replaced
    - to_dict() / from_dict(): JSON blob in the persisted layout

Dependencies:
    - dataclasses (std)
    - enum (std)

Used By:
    - calibration.store
    - extractor.page_processor
    - extractor.pipeline
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional


class BoxKind(str, Enum):
    """Which calibrated region a box belongs to."""

    QUESTION = "question"
    ANSWER = "answer"


@dataclass(frozen=True, slots=True)
class CropBox:
    """
    Rectangle in the pixel space of a page rendered at the fixed scale.

    Coordinates may be fractional: they come from pointer positions scaled
    back to the rendering's resolution.

    Attributes:
        x: Left edge in pixels
        y: Top edge in pixels
        width: Width in pixels
        height: Height in pixels

    Invariants:
        - x >= 0 and y >= 0
        - width > 0 and height > 0

    Example:
        >>> box = CropBox.from_corners(300, 40, 100, 140)
        >>> box
        CropBox(x=100, y=40, width=200, height=100)
    """

    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        """Validate geometry on construction."""
        if self.x < 0:
            raise ValueError(f"x must be >= 0: {self.x}")
        if self.y < 0:
            raise ValueError(f"y must be >= 0: {self.y}")
        if self.width <= 0:
            raise ValueError(f"width must be > 0: {self.width}")
        if self.height <= 0:
            raise ValueError(f"height must be > 0: {self.height}")

    @classmethod
    def from_corners(cls, x0: float, y0: float, x1: float, y1: float) -> CropBox:
        """
        Build a box from any two opposite corners.

        Args:
            x0, y0: Where the drag started
            x1, y1: Where the drag ended

        Returns:
            CropBox anchored at the top-left of the two points
        """
        return cls(
            x=min(x0, x1),
            y=min(y0, y1),
            width=abs(x1 - x0),
            height=abs(y1 - y0),
        )

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def contains(self, px: float, py: float, padding: float = 0) -> bool:
        """
        Check whether a point lies inside the box grown by ``padding``.

        Edges are inclusive.
        """
        return (
            self.x - padding <= px <= self.right + padding
            and self.y - padding <= py <= self.bottom + padding
        )

    def as_pil_box(self) -> tuple[int, int, int, int]:
        """
        Get as integer (left, top, right, bottom) tuple for PIL.

        Left/top are truncated, so a fractional box never loses its
        first row or column.
        """
        left = int(self.x)
        top = int(self.y)
        return (
            left,
            top,
            left + max(1, int(round(self.width))),
            top + max(1, int(round(self.height))),
        )

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CropBox:
        """
        Deserialize from dictionary.

        Raises:
            KeyError: If a coordinate is missing
            ValueError: If geometry is invalid
        """
        return cls(
            x=float(data["x"]),
            y=float(data["y"]),
            width=float(data["width"]),
            height=float(data["height"]),
        )


@dataclass(frozen=True, slots=True)
class CalibrationConfig:
    """
    The question and answer regions used for every page of every document.

    Being frozen, an instance doubles as the snapshot a batch run reads
    from: later calibration edits produce a new object and never reach a
    run already in progress.

    Attributes:
        question_box: Region holding the question body, or None
        answer_box: Region holding the answer-key caption, or None
    """

    question_box: Optional[CropBox] = None
    answer_box: Optional[CropBox] = None

    @property
    def is_complete(self) -> bool:
        """True when both regions have been defined."""
        return self.question_box is not None and self.answer_box is not None

    def box(self, kind: BoxKind) -> Optional[CropBox]:
        if kind is BoxKind.QUESTION:
            return self.question_box
        return self.answer_box

    def with_box(self, kind: BoxKind, box: Optional[CropBox]) -> CalibrationConfig:
        """Return a copy with the region of ``kind`` replaced."""
        if kind is BoxKind.QUESTION:
            return replace(self, question_box=box)
        return replace(self, answer_box=box)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "questionBox": self.question_box.to_dict() if self.question_box else None,
            "answerBox": self.answer_box.to_dict() if self.answer_box else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CalibrationConfig:
        question = data.get("questionBox")
        answer = data.get("answerBox")
        return cls(
            question_box=CropBox.from_dict(question) if question else None,
            answer_box=CropBox.from_dict(answer) if answer else None,
        )
