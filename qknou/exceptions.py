from typing import Any, Dict, Optional


class QknouError(Exception):
    pass


class ValidationError(QknouError):
    pass


class NetworkError(QknouError):
    pass


class DatabaseError(QknouError):
    pass


class ParsingError(QknouError):
    pass


class MissingYearError(ParsingError):
    def __init__(self, url: Optional[str] = None):
        self.url = url
        super().__init__("Could not extract the exam year from the page")


class MissingSubjectNameError(ParsingError):
    def __init__(self, url: Optional[str] = None):
        self.url = url
        super().__init__("Could not extract the subject name from the page")


class AnswerTableNotFoundError(ParsingError):
    def __init__(self, url: Optional[str] = None, question_count: int = 0):
        self.url = url
        self.question_count = question_count
        super().__init__(f"Answer table not found for {question_count} scraped questions")


class MalformedAnswerError(ParsingError):
    def __init__(self, answer_text: str):
        self.answer_text = answer_text
        super().__init__(f"Malformed answer: {answer_text!r}")


class ExamTypeError(ParsingError):
    def __init__(self, message: str, exam_type_text: str):
        self.exam_type_text = exam_type_text
        super().__init__(f"{message}: {exam_type_text!r}")


class AmbiguousExamTypeError(ExamTypeError):
    def __init__(self, exam_type_text: str):
        super().__init__("Cannot tell summer from winter intersession", exam_type_text)


class AmbiguousSemesterError(ExamTypeError):
    def __init__(self, exam_type_text: str):
        super().__init__("Cannot tell the semester of the final exam", exam_type_text)


class UnknownExamTypeError(ExamTypeError):
    def __init__(self, exam_type_text: str):
        super().__init__("Unknown exam type", exam_type_text)


class ExamConflictError(QknouError):
    def __init__(self, existing_exam_id: int, title: str, year: int, exam_type: int):
        self.existing_exam_id = existing_exam_id
        self.title = title
        self.year = year
        self.exam_type = exam_type
        super().__init__(
            "An exam with the same subject, year and type already exists; use force retry to replace it. "
            f"existing_exam_id={existing_exam_id}, title={title}, year={year}, exam_type={exam_type}"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "existing_exam_id": self.existing_exam_id,
            "title": self.title,
            "year": self.year,
            "exam_type": self.exam_type,
        }


class ExamNotFoundError(QknouError):
    def __init__(self, exam_id: int):
        self.exam_id = exam_id
        super().__init__(f"Exam {exam_id} not found")
