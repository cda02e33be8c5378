import sys
import threading
from pathlib import Path
from typing import List, Optional, Sequence

import fitz
import pytest
from PIL import Image

# Add src to sys.path so we can import qudrat_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from qudrat_toolkit.core.models import CalibrationConfig, CropBox  # noqa: E402
from qudrat_toolkit.extractor.utils.pdf import SourceDocument  # noqa: E402

# Native page size used by the synthetic exams; rendered at scale 2 this is 600x800.
PAGE_WIDTH = 300
PAGE_HEIGHT = 400

# The answer letter sits at native (60, 80) -> rendered (120, 160),
# inside ANSWER_BOX.
ANSWER_ORIGIN = (60, 80)
ANSWER_BOX = CropBox(x=100, y=100, width=200, height=100)
QUESTION_BOX = CropBox(x=0, y=300, width=600, height=400)


def build_pdf(
    answers: Sequence[Optional[str]],
    *,
    cover: bool = True,
    width: float = PAGE_WIDTH,
    height: float = PAGE_HEIGHT,
) -> bytes:
    """
    Build an exam PDF in memory.

    Args:
        answers: One entry per question page; the text written at the
            answer position, or None for a page with no text layer there.
        cover: Prepend a cover page
    """
    doc = fitz.open()
    if cover:
        page = doc.new_page(width=width, height=height)
        page.insert_text((40, 40), "Cover", fontsize=14)
    for i, answer in enumerate(answers, start=1):
        page = doc.new_page(width=width, height=height)
        page.insert_text((20, 200), f"Question {i}", fontsize=12)
        if answer is not None:
            page.insert_text(ANSWER_ORIGIN, answer, fontsize=12)
    data = doc.tobytes()
    doc.close()
    return data


class FakeOcrEngine:
    """OCR engine double returning fixed text and recording its inputs."""

    def __init__(self, text: str = "", error: Optional[Exception] = None) -> None:
        self.text = text
        self.error = error
        self.images: List[Image.Image] = []
        self._lock = threading.Lock()

    @property
    def calls(self) -> int:
        return len(self.images)

    def recognize(self, image: Image.Image) -> str:
        with self._lock:
            self.images.append(image)
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def calibration() -> CalibrationConfig:
    """Both regions defined for the synthetic exam layout."""
    return CalibrationConfig(question_box=QUESTION_BOX, answer_box=ANSWER_BOX)


@pytest.fixture
def fake_ocr() -> FakeOcrEngine:
    return FakeOcrEngine()


@pytest.fixture
def six_page_exam() -> SourceDocument:
    """Cover page plus five pages whose answer caption is 'B'."""
    return SourceDocument(name="Quant Set 3 - 1445.pdf", data=build_pdf(["B"] * 5))


@pytest.fixture
def make_exam():
    """Factory for SourceDocuments built with build_pdf()."""
    def factory(name: str, answers: Sequence[Optional[str]], **kwargs) -> SourceDocument:
        return SourceDocument(name=name, data=build_pdf(answers, **kwargs))
    return factory


@pytest.fixture
def settings_path(tmp_path: Path) -> Path:
    return tmp_path / "settings.json"


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    return tmp_path / "tests.json"


@pytest.fixture
def page_image() -> Image.Image:
    """White rendered page at the calibration scale."""
    return Image.new("RGB", (PAGE_WIDTH * 2, PAGE_HEIGHT * 2), color="white")

