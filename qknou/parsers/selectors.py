"""
CSS selector profiles for the two page layouts used by the exam archive.

Older posts use the ``alla*`` class family, newer posts the ``alla6*`` family. Detection
happens once per page and every extractor reads its selectors from the chosen profile.
"""

from dataclasses import dataclass
from enum import Enum


class SchemaVersion(str, Enum):
    PRIMARY = "alla6"
    SECONDARY = "alla"

    @property
    def alternate(self) -> "SchemaVersion":
        return SchemaVersion.SECONDARY if self is SchemaVersion.PRIMARY else SchemaVersion.PRIMARY


@dataclass(frozen=True)
class SelectorProfile:
    info_table: str
    question_table: str
    question_number: str
    question_row: str
    answer_row: str


PROFILES = {
    SchemaVersion.PRIMARY: SelectorProfile(
        info_table="table.alla6TitleTbl tbody",
        question_table="table.alla6BasicTbl",
        question_number="span.alla6QuestionNo",
        question_row="tr.alla6QuestionTr td",
        answer_row="tr.alla6AnswerTr",
    ),
    SchemaVersion.SECONDARY: SelectorProfile(
        info_table="table.allaTitleTbl tbody",
        question_table="table.allaBasicTbl",
        question_number="span.allaQuestionNo",
        question_row="tr.allaQuestionTr td",
        answer_row="tr.allaAnswerTr",
    ),
}

# The example box uses the same markup in both layouts
EXAMPLE_TEXT = "tr.alla6ExampleTr_Txt .allaExampleList_p, tr.allaExampleTr_Txt .allaExampleList_p"

# Fallback when a page carries no classed info table
GENERIC_TABLE_BODY = "table tbody"

STRUCTURED_ANSWER_ROWS = ".allaAnswerTableDiv table tr"
ANSWER_HEADER_MARKER = "정답"
ANSWER_STRING_MARKER = "문제답안"

SUBJECT_LINKS = "#allaGmObjectList li a"
EXAM_LINKS = "article#content div.inner div.post-item a"


def profile_for(version: SchemaVersion) -> SelectorProfile:
    return PROFILES[version]
