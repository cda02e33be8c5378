"""
Module: extractor.pipeline

Purpose:
    Batch orchestrator. Converts any number of uploaded exam PDFs into
    Tests, running page extraction in bounded windows and reporting
    aggregate progress.

Key Functions:
    - processable_pages(): Page numbers that hold questions (2..N)
    - iter_windows(): Split pages into fixed-size scheduling windows

Key Classes:
    - BatchConverter: documents -> list[Test]
    - BatchProgress: Progress snapshot handed to the callback

Dependencies:
    - concurrent.futures: Worker pool for in-window fan-out
    - extractor.page_processor: Per-page extraction
    - storage.repository: Test persistence

Used By:
    - qudrat_toolkit.cli: ``qudrat convert``
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Sequence

import fitz

from qudrat_toolkit.common.constants import SOURCE_LABEL_TEMPLATE
from qudrat_toolkit.common.path_utils import test_name_from_filename
from qudrat_toolkit.core.models import CalibrationConfig, Question, Test
from qudrat_toolkit.storage.repository import TestRepository
from .config import ExtractionConfig
from .errors import CalibrationMissingError, DocumentReadError
from .page_processor import PageProcessor
from .timing import TimingLog, timed_phase
from .utils.pdf import SourceDocument, count_pages, open_document

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchProgress:
    """
    Progress of a batch run.

    Attributes:
        processed: Pages finished so far, successful or not
        total: Processable pages across all documents
        document_name: File currently being converted
    """
    processed: int
    total: int
    document_name: str = ""

    @property
    def percent(self) -> int:
        """Whole-number completion percentage."""
        if self.total <= 0:
            return 100
        return min(100, round(self.processed / self.total * 100))


ProgressCallback = Callable[[BatchProgress], None]


def processable_pages(page_count: int) -> List[int]:
    """
    1-based page numbers that carry questions.

    Page 1 is always a cover page, so a document of P pages yields
    pages 2..P, and nothing for a single-page document.

    Examples:
        >>> processable_pages(6)
        [2, 3, 4, 5, 6]
        >>> processable_pages(1)
        []
    """
    return list(range(2, page_count + 1))


def iter_windows(pages: Sequence[int], size: int) -> Iterator[List[int]]:
    """
    Yield consecutive windows of at most ``size`` pages.

    Examples:
        >>> list(iter_windows([2, 3, 4, 5, 6, 7, 8], 5))
        [[2, 3, 4, 5, 6], [7, 8]]
    """
    for start in range(0, len(pages), size):
        yield list(pages[start:start + size])


class BatchConverter:
    """
    Converts uploaded documents into stored Tests.

    Each document's pages are processed in windows: every page of a
    window runs on the worker pool at once, and the next window starts
    only after the whole window has finished. Results keep source page
    order.

    Example:
        >>> converter = BatchConverter(JsonTestRepository(store_path))
        >>> tests = converter.run(documents, calibration_store.current(), print)
    """

    def __init__(
        self,
        repository: TestRepository,
        *,
        config: Optional[ExtractionConfig] = None,
        processor: Optional[PageProcessor] = None,
        timing_log: Optional[TimingLog] = None,
    ) -> None:
        self.repository = repository
        self.config = config or ExtractionConfig()
        self.timing_log = timing_log if timing_log is not None else TimingLog()
        self.processor = processor or PageProcessor(self.config, timing_log=self.timing_log)

    def run(
        self,
        documents: Sequence[SourceDocument],
        calibration: CalibrationConfig,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[Test]:
        """
        Convert every document into a Test.

        Args:
            documents: Uploaded PDFs, converted in the given order
            calibration: Snapshot of the crop configuration for this run
            on_progress: Called with a BatchProgress every
                ``progress_every`` pages and after the last page

        Returns:
            Tests created, one per document that produced questions.

        Raises:
            CalibrationMissingError: If either crop region is undefined.
            DocumentReadError: If a document cannot be opened. Tests
                created for earlier documents are kept.
        """
        if not calibration.is_complete:
            raise CalibrationMissingError()

        with timed_phase(self.timing_log, "page_count"):
            page_counts = self._count_pages(documents)
        total = sum(len(processable_pages(count)) for count in page_counts)
        logger.info(f"Converting {len(documents)} document(s), {total} question page(s)")

        created: List[Test] = []
        processed = 0

        with ThreadPoolExecutor(max_workers=self.config.window_size) as pool:
            for source, page_count in zip(documents, page_counts):
                test_name = test_name_from_filename(source.name)
                logger.info(
                    f"Processing {test_name} ({len(processable_pages(page_count))} pages)",
                    extra={"pdf_name": source.name},
                )

                questions: List[Question] = []
                with timed_phase(self.timing_log, "documents"):
                    with open_document(source) as doc:
                        pages = processable_pages(doc.page_count)
                        for window in iter_windows(pages, self.config.window_size):
                            results, processed = self._run_window(
                                pool, doc, source.name, window, calibration,
                                processed, total, on_progress,
                            )
                            questions.extend(q for q in results if q is not None)

                if not questions:
                    logger.warning(
                        f"No questions extracted from {source.name}; no test created",
                        extra={"pdf_name": source.name},
                    )
                    continue

                created.append(self._store_test(source, test_name, questions))

        logger.info(self.timing_log.summary())
        logger.info(f"Conversion finished: {len(created)} test(s) created")
        return created

    def _count_pages(self, documents: Sequence[SourceDocument]) -> List[int]:
        """
        Processable-page pre-pass for the progress total.

        A document that cannot be read counts as zero here; it fails the
        batch when its turn comes.
        """
        counts: List[int] = []
        for source in documents:
            try:
                counts.append(count_pages(source))
            except DocumentReadError as e:
                logger.error(f"Error reading page count: {e}", extra={"pdf_name": source.name})
                counts.append(0)
        return counts

    def _run_window(
        self,
        pool: ThreadPoolExecutor,
        doc: fitz.Document,
        document_name: str,
        window: List[int],
        calibration: CalibrationConfig,
        processed: int,
        total: int,
        on_progress: Optional[ProgressCallback],
    ) -> tuple[List[Optional[Question]], int]:
        futures: List[Future] = [
            pool.submit(
                self.processor.process,
                doc,
                page_number,
                calibration,
                document_name=document_name,
            )
            for page_number in window
        ]

        for _ in as_completed(futures):
            processed += 1
            if on_progress and (
                processed % self.config.progress_every == 0 or processed == total
            ):
                on_progress(BatchProgress(processed, total, document_name))

        return [future.result() for future in futures], processed

    def _store_test(
        self,
        source: SourceDocument,
        test_name: str,
        questions: List[Question],
    ) -> Test:
        section = self.config.section
        test_id = self.repository.create_test(
            section,
            test_name,
            SOURCE_LABEL_TEMPLATE.format(filename=source.name),
        )
        self.repository.add_questions(section, test_id, questions)
        logger.info(
            f"Created test {test_name!r} with {len(questions)} questions",
            extra={"pdf_name": source.name, "test_id": test_id, "question_count": len(questions)},
        )
        return self.repository.get_test(section, test_id)
