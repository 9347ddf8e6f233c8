from enum import Enum, IntEnum


class ExamType(IntEnum):
    FIRST_SEMESTER_FINAL = 1
    SECOND_SEMESTER_FINAL = 2
    SUMMER_SESSION = 3
    WINTER_SESSION = 4

    @property
    def label(self) -> str:
        return EXAM_TYPE_LABELS[self]


EXAM_TYPE_LABELS = {
    ExamType.FIRST_SEMESTER_FINAL: "1학기 기말",
    ExamType.SECOND_SEMESTER_FINAL: "2학기 기말",
    ExamType.SUMMER_SESSION: "하계 계절학기",
    ExamType.WINTER_SESSION: "동계 계절학기",
}


class QuestionMode(str, Enum):
    STUDY = "study"
    TEST = "test"


class CrawlStatus(str, Enum):
    SAVED = "saved"
    UPDATED = "updated"


class CrawlErrorType(str, Enum):
    SUBJECT = "subject"
    EXAM = "exam"
    PARSING = "parsing"
    MISSING_ANSWER = "missing_answer"
