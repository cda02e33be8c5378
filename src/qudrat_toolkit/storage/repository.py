"""
Module: storage.repository

Purpose:
    The test-storage collaborator the batch converter hands its results
    to. Tests live in named sections ("quantitative", "verbal"); the
    converter only ever creates tests and appends questions.

Key Classes:
    - TestRepository: Protocol consumed by extractor.pipeline
    - InMemoryTestRepository: Process-local store for embedding and tests
    - JsonTestRepository: Single JSON file, every change under a file lock

Dependencies:
    - common.file_locking: Locked JSON read-modify-write (portalocker)
    - core.models: Question, Test

Used By:
    - extractor.pipeline.BatchConverter
    - qudrat_toolkit.cli
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence

from qudrat_toolkit.common.file_locking import locked_read_modify_write_json, read_json
from qudrat_toolkit.core.models import Question, Test

logger = logging.getLogger(__name__)


class TestNotFoundError(KeyError):
    """No test with the given id exists in the section."""

    __test__ = False


class TestRepository(Protocol):
    """Storage operations the extraction pipeline depends on."""

    def create_test(self, section: str, name: str, source_label: Optional[str] = None) -> str:
        ...

    def add_questions(self, section: str, test_id: str, questions: Sequence[Question]) -> None:
        ...

    def delete_test(self, section: str, test_id: str) -> None:
        ...

    def get_test(self, section: str, test_id: str) -> Test:
        ...

    def list_tests(self, section: str) -> List[Test]:
        ...


def _new_test_id() -> str:
    return f"test_{uuid.uuid4().hex}"


def _with_ids(questions: Sequence[Question]) -> List[Question]:
    return [q if q.id else replace(q, id=f"q_{uuid.uuid4().hex}") for q in questions]


class InMemoryTestRepository:
    """Keeps tests in a dict; nothing survives the process."""

    def __init__(self) -> None:
        self._sections: Dict[str, List[Test]] = {}
        self._lock = threading.Lock()

    def create_test(self, section: str, name: str, source_label: Optional[str] = None) -> str:
        test = Test(id=_new_test_id(), name=name, source_text=source_label)
        with self._lock:
            self._sections.setdefault(section, []).append(test)
        return test.id

    def add_questions(self, section: str, test_id: str, questions: Sequence[Question]) -> None:
        stored = _with_ids(questions)
        with self._lock:
            tests = self._sections.get(section, [])
            for i, test in enumerate(tests):
                if test.id == test_id:
                    tests[i] = replace(test, questions=test.questions + tuple(stored))
                    return
        logger.warning(f"add_questions: no test {test_id} in section {section}")

    def delete_test(self, section: str, test_id: str) -> None:
        with self._lock:
            tests = self._sections.get(section, [])
            self._sections[section] = [t for t in tests if t.id != test_id]

    def get_test(self, section: str, test_id: str) -> Test:
        with self._lock:
            for test in self._sections.get(section, []):
                if test.id == test_id:
                    return test
        raise TestNotFoundError(f"{section}/{test_id}")

    def list_tests(self, section: str) -> List[Test]:
        with self._lock:
            return list(self._sections.get(section, []))


class JsonTestRepository:
    """
    Stores all sections in one JSON document.

    Layout: ``{"<section>": [<test>, ...], ...}`` with tests in the
    ``Test.to_dict()`` format. Each mutation is a locked
    read-modify-write, so two processes appending to the same store do
    not lose each other's tests.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def _modify(self, section: str, fn) -> None:
        def modifier(data: Dict[str, Any]) -> Dict[str, Any]:
            data[section] = fn(data.get(section, []))
            return data

        locked_read_modify_write_json(self.path, modifier)

    def create_test(self, section: str, name: str, source_label: Optional[str] = None) -> str:
        test = Test(id=_new_test_id(), name=name, source_text=source_label)
        self._modify(section, lambda tests: tests + [test.to_dict()])
        logger.debug(f"Created test {test.id} in {section}")
        return test.id

    def add_questions(self, section: str, test_id: str, questions: Sequence[Question]) -> None:
        payload = [q.to_dict() for q in _with_ids(questions)]

        def append(tests: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
            for test in tests:
                if test.get("id") == test_id:
                    test.setdefault("questions", []).extend(payload)
                    return tests
            logger.warning(f"add_questions: no test {test_id} in section {section}")
            return tests

        self._modify(section, append)

    def delete_test(self, section: str, test_id: str) -> None:
        self._modify(section, lambda tests: [t for t in tests if t.get("id") != test_id])

    def get_test(self, section: str, test_id: str) -> Test:
        for test in self.list_tests(section):
            if test.id == test_id:
                return test
        raise TestNotFoundError(f"{section}/{test_id}")

    def list_tests(self, section: str) -> List[Test]:
        data = read_json(self.path)
        return [Test.from_dict(t) for t in data.get(section, [])]
