from .department import Department
from .subject import Subject
from .exam import Exam
from .question import Question
from .user import User
from .enums import ExamType, QuestionMode, CrawlStatus, CrawlErrorType

__all__ = [
    "Department", "Subject", "Exam", "Question", "User",
    "ExamType", "QuestionMode", "CrawlStatus", "CrawlErrorType",
]
