import math
from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy.orm import Session

from ..exceptions import ExamNotFoundError, ValidationError
from ..models.enums import QuestionMode
from ..models.exam import Exam
from ..repositories.exam_repository import ExamRepository
from ..repositories.question_repository import QuestionRepository

logger = structlog.get_logger(__name__)


class ExamService:
    """
    Serves stored exams to test takers and scores their submissions
    """

    def __init__(self, session: Session):
        self.session = session
        self.exam_repo = ExamRepository(session)
        self.question_repo = QuestionRepository(session)

    def find_questions(
        self,
        exam_id: int,
        mode: QuestionMode = QuestionMode.TEST,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Get the questions of an exam. Study mode includes the answers and explanations."""
        exam = self._get_exam(exam_id)
        include_answers = mode == QuestionMode.STUDY
        paginate = page is not None and limit is not None

        if paginate:
            if page < 1 or limit < 1:
                raise ValidationError("page and limit must be positive")
            questions = self.question_repo.get_by_exam(exam_id, limit=limit, offset=(page - 1) * limit)
        else:
            questions = self.question_repo.get_by_exam(exam_id)

        response: Dict[str, Any] = {
            "exam": self._exam_summary(exam),
            "questions": [question.to_dict(include_answers=include_answers) for question in questions],
        }

        if paginate:
            total = self.question_repo.count_by_exam(exam_id)
            total_pages = math.ceil(total / limit) if total else 0
            response["pagination"] = {
                "page": page,
                "limit": limit,
                "total": total,
                "total_pages": total_pages,
                "has_next": page < total_pages,
            }

        logger.debug("Questions served", exam_id=exam_id, mode=mode.value, count=len(questions))
        return response

    def submit_exam(self, exam_id: int, answers: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Score a submission.

        ``answers`` holds ``{"question_id", "selected_answer"}`` items. Questions left
        unanswered count as wrong; answers for questions outside the exam are ignored.
        """
        exam = self._get_exam(exam_id)
        questions = self.question_repo.get_by_exam(exam_id)

        selected_by_question = {}
        for answer in answers:
            selected_by_question[answer["question_id"]] = answer.get("selected_answer")

        results = []
        correct_count = 0
        for question in questions:
            selected = selected_by_question.get(question.id)
            is_correct = question.is_correct(selected)
            if is_correct:
                correct_count += 1
            results.append({
                "question_id": question.id,
                "question_number": question.question_number,
                "selected_answer": selected,
                "correct_answers": list(question.correct_answers or []),
                "is_correct": is_correct,
            })

        total = len(questions)
        score = round(correct_count / total * 100) if total else 0

        logger.info(
            "Exam submitted",
            exam_id=exam.id,
            correct_count=correct_count,
            total_questions=total,
            score=score,
        )
        return {
            "exam_id": exam.id,
            "score": score,
            "correct_count": correct_count,
            "total_questions": total,
            "results": results,
        }

    def _get_exam(self, exam_id: int) -> Exam:
        exam = self.exam_repo.get_by_id(exam_id)
        if not exam:
            raise ExamNotFoundError(exam_id)
        return exam

    def _exam_summary(self, exam: Exam) -> Dict[str, Any]:
        return {
            "id": exam.id,
            "title": exam.title,
            "year": exam.year,
            "exam_type": exam.exam_type,
            "exam_type_label": exam.exam_type_enum.label,
            "display_name": exam.display_name,
            "total_questions": exam.total_questions,
            "subject_id": exam.subject_id,
        }
