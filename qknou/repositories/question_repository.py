from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.question import Question


class QuestionRepository:
    def __init__(self, session: Session):
        self.session = session

    def add(self, question: Question) -> Question:
        self.session.add(question)
        return question

    def count_by_exam(self, exam_id: int) -> int:
        return self.session.query(Question).filter(Question.exam_id == exam_id).count()

    def get_by_exam(
        self,
        exam_id: int,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> List[Question]:
        """Get questions of an exam ordered by question number, optionally one page of them"""
        query = (
            self.session.query(Question)
            .filter(Question.exam_id == exam_id)
            .order_by(Question.question_number, Question.id)
        )
        if limit is not None:
            query = query.offset(offset).limit(limit)
        return query.all()
