from .subject_repository import SubjectRepository
from .exam_repository import ExamRepository
from .question_repository import QuestionRepository

__all__ = ["SubjectRepository", "ExamRepository", "QuestionRepository"]
