"""
Tests for extractor.page_processor.

Pages come from PDFs built in memory; OCR is a fake engine so the
tesseract binary is never needed.
"""

from unittest.mock import Mock

from conftest import FakeOcrEngine
from qudrat_toolkit.common.constants import DEFAULT_ANSWER, OPTION_LETTERS, QUESTION_PROMPT
from qudrat_toolkit.core.models import CalibrationConfig
from qudrat_toolkit.extractor.page_processor import PageProcessor
from qudrat_toolkit.extractor.timing import TimingLog
from qudrat_toolkit.extractor.utils.images import decode_image
from qudrat_toolkit.extractor.utils.pdf import open_document


class TestPageProcessor:
    """Tests for PageProcessor.process()."""

    def test_process_when_text_layer_has_answer_then_ocr_not_used(self, make_exam, calibration, fake_ocr):
        # Arrange
        source = make_exam("a.pdf", ["C"])
        processor = PageProcessor(ocr_engine=fake_ocr)

        # Act
        with open_document(source) as doc:
            question = processor.process(doc, 2, calibration, document_name=source.name)

        # Assert
        assert question is not None
        assert question.correct_answer == "ج"
        assert question.question_text == QUESTION_PROMPT
        assert question.options == OPTION_LETTERS
        assert fake_ocr.calls == 0

    def test_process_when_crops_rendered_then_sizes_match_boxes(self, make_exam, calibration, fake_ocr):
        source = make_exam("a.pdf", ["B"])
        processor = PageProcessor(ocr_engine=fake_ocr)

        with open_document(source) as doc:
            question = processor.process(doc, 2, calibration)

        assert decode_image(question.question_image).size == (600, 400)
        assert decode_image(question.verification_image).size == (200, 100)

    def test_process_when_no_text_layer_then_falls_back_to_ocr(self, make_exam, calibration):
        source = make_exam("scan.pdf", [None])
        engine = FakeOcrEngine("الإجابة الصحيحة: د")
        processor = PageProcessor(ocr_engine=engine)

        with open_document(source) as doc:
            question = processor.process(doc, 2, calibration)

        assert question.correct_answer == "د"
        assert engine.calls == 1
        assert engine.images[0].size == (200, 100)

    def test_process_when_ocr_gibberish_then_default_answer(self, make_exam, calibration):
        source = make_exam("scan.pdf", [None])
        processor = PageProcessor(ocr_engine=FakeOcrEngine("0o0o 0o0o 0o0o"))

        with open_document(source) as doc:
            question = processor.process(doc, 2, calibration)

        assert question is not None
        assert question.correct_answer == DEFAULT_ANSWER

    def test_process_when_text_layer_raises_then_returns_none(self, make_exam, calibration, fake_ocr):
        source = make_exam("a.pdf", ["B"])
        broken_layer = Mock()
        broken_layer.tokens.side_effect = RuntimeError("corrupt content stream")
        processor = PageProcessor(text_layer=broken_layer, ocr_engine=fake_ocr)

        with open_document(source) as doc:
            assert processor.process(doc, 2, calibration, document_name=source.name) is None

    def test_process_when_page_out_of_range_then_returns_none(self, make_exam, calibration, fake_ocr):
        source = make_exam("a.pdf", ["B"])
        processor = PageProcessor(ocr_engine=fake_ocr)

        with open_document(source) as doc:
            assert processor.process(doc, 9, calibration) is None

    def test_process_when_calibration_incomplete_then_returns_none(self, make_exam, fake_ocr):
        source = make_exam("a.pdf", ["B"])
        processor = PageProcessor(ocr_engine=fake_ocr)

        with open_document(source) as doc:
            assert processor.process(doc, 2, CalibrationConfig()) is None

    def test_process_when_timing_log_then_phases_recorded(self, make_exam, calibration, fake_ocr):
        source = make_exam("a.pdf", [None])
        timing = TimingLog()
        processor = PageProcessor(ocr_engine=fake_ocr, timing_log=timing)

        with open_document(source) as doc:
            processor.process(doc, 2, calibration, document_name="a.pdf")

        phases = timing.page_timings["a.pdf#p2"]
        assert set(phases) == {"render", "crop", "text_layer", "ocr"}
