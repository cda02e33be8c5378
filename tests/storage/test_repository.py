"""
Tests for storage.repository.

Both repositories are run through the same behaviour checks.
"""

import json

import pytest

from qudrat_toolkit.core.models import Question
from qudrat_toolkit.storage import InMemoryTestRepository, JsonTestRepository, TestNotFoundError


def _question(answer: str = "ب") -> Question:
    return Question(
        question_text="اختر الإجابة الصحيحة",
        question_image=b"\xff\xd8q",
        verification_image=b"\xff\xd8a",
        correct_answer=answer,
    )


@pytest.fixture(params=["memory", "json"])
def repository(request, store_path):
    if request.param == "memory":
        return InMemoryTestRepository()
    return JsonTestRepository(store_path)


class TestRepositoryBehaviour:

    def test_create_test_when_called_then_listed_empty(self, repository):
        test_id = repository.create_test("quantitative", "Quant 1", "from a.pdf")

        tests = repository.list_tests("quantitative")

        assert [t.id for t in tests] == [test_id]
        assert tests[0].name == "Quant 1"
        assert tests[0].source_text == "from a.pdf"
        assert tests[0].questions == ()

    def test_add_questions_when_called_twice_then_appended_in_order(self, repository):
        test_id = repository.create_test("quantitative", "Quant 1")

        repository.add_questions("quantitative", test_id, [_question("أ"), _question("ب")])
        repository.add_questions("quantitative", test_id, [_question("د")])

        test = repository.get_test("quantitative", test_id)
        assert [q.correct_answer for q in test.questions] == ["أ", "ب", "د"]
        assert all(q.id and q.id.startswith("q_") for q in test.questions)
        assert len({q.id for q in test.questions}) == 3

    def test_sections_when_different_then_isolated(self, repository):
        repository.create_test("quantitative", "Quant 1")
        repository.create_test("verbal", "Verbal 1")

        assert [t.name for t in repository.list_tests("quantitative")] == ["Quant 1"]
        assert [t.name for t in repository.list_tests("verbal")] == ["Verbal 1"]

    def test_delete_test_when_exists_then_removed(self, repository):
        keep = repository.create_test("quantitative", "Keep")
        drop = repository.create_test("quantitative", "Drop")

        repository.delete_test("quantitative", drop)

        assert [t.id for t in repository.list_tests("quantitative")] == [keep]

    def test_get_test_when_unknown_then_raises(self, repository):
        with pytest.raises(TestNotFoundError):
            repository.get_test("quantitative", "test_missing")

    def test_list_tests_when_empty_section_then_empty_list(self, repository):
        assert repository.list_tests("quantitative") == []


class TestJsonTestRepository:

    def test_create_test_when_reopened_then_persisted(self, store_path):
        test_id = JsonTestRepository(store_path).create_test("quantitative", "اختبار 1")
        JsonTestRepository(store_path).add_questions("quantitative", test_id, [_question()])

        test = JsonTestRepository(store_path).get_test("quantitative", test_id)

        assert test.name == "اختبار 1"
        assert test.questions[0].question_image == b"\xff\xd8q"

    def test_layout_when_written_then_sections_hold_test_dicts(self, store_path):
        repository = JsonTestRepository(store_path)
        test_id = repository.create_test("quantitative", "Quant 1", "label")

        data = json.loads(store_path.read_text(encoding="utf-8"))

        assert data == {
            "quantitative": [
                {"id": test_id, "name": "Quant 1", "questions": [], "sourceText": "label"},
            ]
        }
