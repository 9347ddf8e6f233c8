from sqlalchemy import Column, Integer, SmallInteger, String, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..core.database import Base
from .enums import ExamType


class Exam(Base):
    """
    One archived exam paper. (subject_id, year, exam_type) identifies it across re-crawls.
    """
    __tablename__ = "exams"

    id = Column(Integer, primary_key=True, index=True)
    subject_id = Column(Integer, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True)
    year = Column(Integer, nullable=False)
    exam_type = Column(SmallInteger, nullable=False)
    title = Column(String(255), nullable=False)
    total_questions = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    subject = relationship("Subject", back_populates="exams")
    questions = relationship(
        "Question",
        back_populates="exam",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Question.question_number",
    )

    __table_args__ = (
        UniqueConstraint("subject_id", "year", "exam_type", name="uq_exams_subject_year_type"),
        Index("ix_exams_year_exam_type", "year", "exam_type"),
    )

    @property
    def exam_type_enum(self) -> ExamType:
        return ExamType(self.exam_type)

    @property
    def display_name(self) -> str:
        return f"{self.title} {self.exam_type_enum.label} {self.year}년도"

    def __repr__(self):
        return f"<Exam(id={self.id}, title='{self.title}', year={self.year}, exam_type={self.exam_type})>"
