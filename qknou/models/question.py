from typing import Any, Dict, Optional

from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.database import Base


class Question(Base):
    """
    A multiple-choice question. Choices and accepted answers are stored inline as JSON
    so a question is read in a single row.
    """
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    exam_id = Column(Integer, ForeignKey("exams.id", ondelete="CASCADE"), nullable=False, index=True)
    question_number = Column(Integer, nullable=False)
    question_text = Column(Text, nullable=False)
    example_text = Column(Text, nullable=True)
    question_image_url = Column(Text, nullable=True)
    # [{"number": 1, "text": "...", "image_url": null}, ...]
    choices = Column(JSON, nullable=False, default=list)
    correct_answers = Column(JSON, nullable=False)
    explanation = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    exam = relationship("Exam", back_populates="questions")

    def is_correct(self, selected_answer: Optional[int]) -> bool:
        if selected_answer is None:
            return False
        return selected_answer in (self.correct_answers or [])

    def to_dict(self, include_answers: bool = False) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "question_number": self.question_number,
            "question_text": self.question_text,
            "example_text": self.example_text,
            "question_image_url": self.question_image_url,
            "choices": list(self.choices or []),
        }
        if include_answers:
            data["correct_answers"] = list(self.correct_answers or [])
            data["explanation"] = self.explanation
        return data

    def __repr__(self):
        return f"<Question(id={self.id}, exam_id={self.exam_id}, number={self.question_number})>"
