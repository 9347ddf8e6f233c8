import pytest

from qknou.exceptions import ExamNotFoundError, ValidationError
from qknou.models import Exam, Question, Subject
from qknou.models.enums import ExamType, QuestionMode
from qknou.services.exam_service import ExamService


@pytest.fixture
def stored_exam(test_db):
    subject = Subject(name="컴퓨터의이해")
    test_db.add(subject)
    test_db.flush()

    exam = Exam(
        subject_id=subject.id,
        year=2023,
        exam_type=int(ExamType.SECOND_SEMESTER_FINAL),
        title="컴퓨터의이해",
        total_questions=3,
    )
    test_db.add(exam)
    test_db.flush()

    for number, answers in [(3, [3]), (1, [1, 2]), (2, [4])]:
        test_db.add(Question(
            exam_id=exam.id,
            question_number=number,
            question_text=f"문제 {number}",
            choices=[{"number": n, "text": f"보기 {n}", "image_url": None} for n in range(1, 5)],
            correct_answers=answers,
            explanation=f"해설 {number}",
        ))
    test_db.commit()
    return exam


class TestFindQuestions:
    @pytest.fixture(autouse=True)
    def setup_service(self, test_db):
        self.service = ExamService(test_db)

    def test_test_mode_hides_answers(self, stored_exam):
        result = self.service.find_questions(stored_exam.id)

        assert result["exam"]["title"] == "컴퓨터의이해"
        assert result["exam"]["exam_type_label"] == "2학기 기말"
        assert [q["question_number"] for q in result["questions"]] == [1, 2, 3]
        assert all("correct_answers" not in q for q in result["questions"])
        assert all("explanation" not in q for q in result["questions"])
        assert "pagination" not in result

    def test_study_mode_shows_answers(self, stored_exam):
        result = self.service.find_questions(stored_exam.id, mode=QuestionMode.STUDY)

        first = result["questions"][0]
        assert first["correct_answers"] == [1, 2]
        assert first["explanation"] == "해설 1"

    def test_pagination(self, stored_exam):
        result = self.service.find_questions(stored_exam.id, page=2, limit=2)

        assert [q["question_number"] for q in result["questions"]] == [3]
        assert result["pagination"] == {
            "page": 2,
            "limit": 2,
            "total": 3,
            "total_pages": 2,
            "has_next": False,
        }

    def test_pagination_needs_both_values(self, stored_exam):
        result = self.service.find_questions(stored_exam.id, page=1)

        assert len(result["questions"]) == 3
        assert "pagination" not in result

    def test_invalid_page(self, stored_exam):
        with pytest.raises(ValidationError):
            self.service.find_questions(stored_exam.id, page=0, limit=10)

    def test_unknown_exam(self):
        with pytest.raises(ExamNotFoundError):
            self.service.find_questions(999)


class TestSubmitExam:
    @pytest.fixture(autouse=True)
    def setup_service(self, test_db):
        self.db = test_db
        self.service = ExamService(test_db)

    def question_ids(self, exam):
        return {q.question_number: q.id for q in self.db.query(Question).filter(Question.exam_id == exam.id)}

    def test_scoring(self, stored_exam):
        ids = self.question_ids(stored_exam)

        result = self.service.submit_exam(stored_exam.id, [
            {"question_id": ids[1], "selected_answer": 2},
            {"question_id": ids[2], "selected_answer": 3},
            {"question_id": ids[3], "selected_answer": 3},
        ])

        assert result["correct_count"] == 2
        assert result["total_questions"] == 3
        assert result["score"] == 67
        assert [r["is_correct"] for r in result["results"]] == [True, False, True]
        assert result["results"][0]["correct_answers"] == [1, 2]

    def test_multiple_correct_answers(self, stored_exam):
        ids = self.question_ids(stored_exam)

        first = self.service.submit_exam(stored_exam.id, [{"question_id": ids[1], "selected_answer": 1}])
        other = self.service.submit_exam(stored_exam.id, [{"question_id": ids[1], "selected_answer": 3}])

        assert first["results"][0]["is_correct"] is True
        assert other["results"][0]["is_correct"] is False

    def test_unanswered_questions_are_wrong(self, stored_exam):
        ids = self.question_ids(stored_exam)

        result = self.service.submit_exam(stored_exam.id, [
            {"question_id": ids[1], "selected_answer": None},
            {"question_id": 12345, "selected_answer": 1},
        ])

        assert result["correct_count"] == 0
        assert result["score"] == 0
        assert all(r["selected_answer"] is None for r in result["results"])

    def test_unknown_exam(self):
        with pytest.raises(ExamNotFoundError):
            self.service.submit_exam(999, [{"question_id": 1, "selected_answer": 1}])


class TestQuestionIsCorrect:
    def test_membership(self):
        question = Question(correct_answers=[1, 2])
        assert question.is_correct(2)
        assert not question.is_correct(3)
        assert not question.is_correct(None)
