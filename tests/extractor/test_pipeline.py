"""
Tests for extractor.pipeline.

Covers page selection, windowing, progress reporting and the hand-off
to the test repository.
"""

import threading
import time
from typing import List

import pytest

from conftest import FakeOcrEngine
from qudrat_toolkit.common.constants import SOURCE_LABEL_TEMPLATE
from qudrat_toolkit.core.models import CalibrationConfig
from qudrat_toolkit.extractor import (
    BatchConverter,
    BatchProgress,
    CalibrationMissingError,
    DocumentReadError,
    ExtractionConfig,
    PageProcessor,
    SourceDocument,
    iter_windows,
    processable_pages,
)
from qudrat_toolkit.storage import InMemoryTestRepository


def _converter(repository=None, engine=None, **config_kwargs) -> BatchConverter:
    config = ExtractionConfig(**config_kwargs)
    processor = PageProcessor(config, ocr_engine=engine or FakeOcrEngine())
    return BatchConverter(repository or InMemoryTestRepository(), config=config, processor=processor)


class TestPageSelection:

    @pytest.mark.parametrize("page_count, expected", [
        (0, []),
        (1, []),
        (2, [2]),
        (6, [2, 3, 4, 5, 6]),
    ])
    def test_processable_pages_skips_cover(self, page_count, expected):
        assert processable_pages(page_count) == expected

    def test_iter_windows_when_twelve_pages_then_three_windows(self):
        windows = list(iter_windows(list(range(2, 14)), 5))

        assert [len(w) for w in windows] == [5, 5, 2]
        assert [p for w in windows for p in w] == list(range(2, 14))

    def test_iter_windows_when_empty_then_no_windows(self):
        assert list(iter_windows([], 5)) == []


class TestBatchProgress:

    def test_percent_when_halfway_then_fifty(self):
        assert BatchProgress(processed=5, total=10).percent == 50

    def test_percent_when_total_zero_then_complete(self):
        assert BatchProgress(processed=0, total=0).percent == 100


class TestBatchConverter:
    """Tests for BatchConverter.run()."""

    def test_run_when_six_page_exam_then_five_questions_in_one_test(self, six_page_exam, calibration):
        # Arrange
        repository = InMemoryTestRepository()
        converter = _converter(repository)

        # Act
        tests = converter.run([six_page_exam], calibration)

        # Assert
        assert len(tests) == 1
        test = tests[0]
        assert test.name == "Quant Set 3"
        assert test.source_text == SOURCE_LABEL_TEMPLATE.format(filename="Quant Set 3 - 1445.pdf")
        assert len(test.questions) == 5
        assert all(q.correct_answer == "ب" for q in test.questions)
        assert all(q.id for q in test.questions)
        assert repository.list_tests("quantitative") == [test]

    def test_run_when_answers_differ_then_questions_keep_page_order(self, make_exam, calibration):
        answers = ["A", "B", "C", "D", "B", "C", "A"]
        source = make_exam("Ordered - x.pdf", answers)

        tests = _converter().run([source], calibration)

        expected = ["أ", "ب", "ج", "د", "ب", "ج", "أ"]
        assert [q.correct_answer for q in tests[0].questions] == expected

    def test_run_when_calibration_incomplete_then_raises_before_work(self, six_page_exam):
        repository = InMemoryTestRepository()
        converter = _converter(repository)
        partial = CalibrationConfig(question_box=None, answer_box=None)

        with pytest.raises(CalibrationMissingError):
            converter.run([six_page_exam], partial)

        assert repository.list_tests("quantitative") == []

    def test_run_when_single_page_document_then_no_test_created(self, make_exam, calibration):
        repository = InMemoryTestRepository()
        progress: List[BatchProgress] = []

        tests = _converter(repository).run([make_exam("Cover only.pdf", [])], calibration, progress.append)

        assert tests == []
        assert repository.list_tests("quantitative") == []
        assert progress == []

    def test_run_when_twelve_pages_then_progress_every_five_and_at_end(self, make_exam, calibration):
        """Two documents, 12 processable pages: reports at 5, 10 and 12."""
        documents = [make_exam("One - a.pdf", ["B"] * 7), make_exam("Two - b.pdf", ["C"] * 5)]
        progress: List[BatchProgress] = []

        tests = _converter().run(documents, calibration, progress.append)

        assert [p.processed for p in progress] == [5, 10, 12]
        assert all(p.total == 12 for p in progress)
        assert progress[-1].percent == 100
        assert [t.name for t in tests] == ["One", "Two"]
        assert [len(t.questions) for t in tests] == [7, 5]

    def test_run_when_one_page_fails_then_others_still_stored(self, make_exam, calibration):
        source = make_exam("Partial - x.pdf", ["B"] * 5)
        config = ExtractionConfig()
        real = PageProcessor(config, ocr_engine=FakeOcrEngine())

        class FlakyProcessor:
            def process(self, document, page_number, calibration, *, document_name=""):
                if page_number == 4:
                    return None
                return real.process(document, page_number, calibration, document_name=document_name)

        converter = BatchConverter(InMemoryTestRepository(), config=config, processor=FlakyProcessor())
        progress: List[BatchProgress] = []

        tests = converter.run([source], calibration, progress.append)

        assert len(tests[0].questions) == 4
        assert progress[-1].processed == 5

    def test_run_when_unreadable_document_then_raises_after_earlier_tests_kept(self, make_exam, calibration):
        repository = InMemoryTestRepository()
        documents = [make_exam("Good - a.pdf", ["B"] * 2), SourceDocument("Bad - b.pdf", b"not a pdf")]

        with pytest.raises(DocumentReadError, match="Bad - b.pdf"):
            _converter(repository).run(documents, calibration)

        assert [t.name for t in repository.list_tests("quantitative")] == ["Good"]

    def test_run_when_page_blocks_then_next_window_waits_for_it(self, make_exam, calibration):
        """Page 7 opens the second window, so it must not start while page 2 is running."""
        # Arrange
        source = make_exam("Busy - x.pdf", ["B"] * 7)
        release_page_2 = threading.Event()
        first_window_started = threading.Event()
        lock = threading.Lock()
        started: List[int] = []

        class BlockingProcessor:
            def process(self, document, page_number, calibration, *, document_name=""):
                with lock:
                    started.append(page_number)
                    if set(started) >= {2, 3, 4, 5, 6}:
                        first_window_started.set()
                if page_number == 2:
                    release_page_2.wait(timeout=5)
                return None

        converter = BatchConverter(
            InMemoryTestRepository(),
            config=ExtractionConfig(window_size=5),
            processor=BlockingProcessor(),
        )
        runner = threading.Thread(target=converter.run, args=([source], calibration))

        # Act
        runner.start()
        try:
            assert first_window_started.wait(timeout=5)
            # Pages 3-6 are done and their workers idle; page 7 must still wait.
            time.sleep(0.2)
            with lock:
                started_while_blocked = list(started)
        finally:
            release_page_2.set()
            runner.join(timeout=5)

        # Assert
        assert 7 not in started_while_blocked
        assert not runner.is_alive()
        assert sorted(started) == list(range(2, 9))

    def test_run_when_no_text_layer_then_ocr_default_applied(self, make_exam, calibration):
        source = make_exam("Scanned - x.pdf", [None, None])
        engine = FakeOcrEngine("###########")

        tests = _converter(engine=engine).run([source], calibration)

        assert [q.correct_answer for q in tests[0].questions] == ["أ", "أ"]
        assert engine.calls == 2

    def test_run_when_custom_section_then_stored_there(self, six_page_exam, calibration):
        repository = InMemoryTestRepository()

        _converter(repository, section="verbal").run([six_page_exam], calibration)

        assert len(repository.list_tests("verbal")) == 1
        assert repository.list_tests("quantitative") == []
