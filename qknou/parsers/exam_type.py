from typing import Optional

from ..exceptions import AmbiguousExamTypeError, AmbiguousSemesterError, UnknownExamTypeError
from ..models.enums import ExamType

INTERSESSION_MARKER = "계절"
SUMMER_MARKER = "하계"
WINTER_MARKER = "동계"
FINAL_MARKER = "기말"
FIRST_SEMESTER_MARKERS = ("1학기", "1 학기")
SECOND_SEMESTER_MARKERS = ("2학기", "2 학기")


def parse_exam_type(exam_type_text: str) -> ExamType:
    """Classify free exam-type text such as "2학기 기말" or "하계 계절학기"."""
    text = exam_type_text.lower()

    if INTERSESSION_MARKER in text:
        if SUMMER_MARKER in text:
            return ExamType.SUMMER_SESSION
        if WINTER_MARKER in text:
            return ExamType.WINTER_SESSION
        raise AmbiguousExamTypeError(exam_type_text)

    if FINAL_MARKER in text:
        if any(marker in text for marker in SECOND_SEMESTER_MARKERS):
            return ExamType.SECOND_SEMESTER_FINAL
        if any(marker in text for marker in FIRST_SEMESTER_MARKERS):
            return ExamType.FIRST_SEMESTER_FINAL
        raise AmbiguousSemesterError(exam_type_text)

    raise UnknownExamTypeError(exam_type_text)


def with_semester_prefix(exam_type_text: str, semester: Optional[int]) -> str:
    """Prefix the semester found in the info table when the type text lacks one."""
    if semester and "학기" not in exam_type_text:
        return f"{semester}학기 {exam_type_text}"
    return exam_type_text
