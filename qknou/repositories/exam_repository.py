from typing import Optional

from sqlalchemy import and_
from sqlalchemy.orm import Session

from ..models.exam import Exam
from ..models.question import Question


class ExamRepository:
    def __init__(self, session: Session):
        self.session = session

    def add(self, exam: Exam) -> Exam:
        """Stage a new exam and assign its id without committing"""
        self.session.add(exam)
        self.session.flush()
        return exam

    def get_by_id(self, exam_id: int) -> Optional[Exam]:
        """Get exam by ID"""
        return self.session.query(Exam).filter(Exam.id == exam_id).first()

    def get_by_key(self, subject_id: int, year: int, exam_type: int) -> Optional[Exam]:
        """Get exam by its (subject, year, exam type) identity"""
        return (
            self.session.query(Exam)
            .filter(
                and_(
                    Exam.subject_id == subject_id,
                    Exam.year == year,
                    Exam.exam_type == exam_type,
                )
            )
            .first()
        )

    def delete_questions(self, exam_id: int) -> int:
        """Remove every question of an exam, returning how many were deleted"""
        deleted = (
            self.session.query(Question)
            .filter(Question.exam_id == exam_id)
            .delete(synchronize_session=False)
        )
        self.session.expire_all()
        return deleted
