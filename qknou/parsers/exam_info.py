import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

import structlog
from bs4 import BeautifulSoup, Tag

from .selectors import GENERIC_TABLE_BODY, SchemaVersion, profile_for

logger = structlog.get_logger(__name__)

YEAR_PATTERN = re.compile(r"(\d{4})\s*학년도")
SEMESTER_PATTERN = re.compile(r"(\d+)\s*학기")
QUESTION_COUNT_PATTERN = re.compile(r"학년\s*(\d+)\s*문항")

SUBJECT_ROW_INDEX = 1
EXAM_TYPE_ROW_INDEX = 2
EXAM_TYPE_LABEL = "시험종류"


@dataclass(frozen=True)
class ExamInfo:
    schema_version: SchemaVersion
    year: Optional[int]
    semester: Optional[int]
    question_count_hint: int
    subject_name: str
    exam_type_text: str


def detect_schema(soup: BeautifulSoup) -> Tuple[SchemaVersion, List[Tag]]:
    """
    Decide which layout the page uses and return the info table bodies found for it.

    The secondary layout falls back to the first table body that has any rows, since
    some posts drop the ``allaTitleTbl`` class entirely.
    """
    primary = soup.select(profile_for(SchemaVersion.PRIMARY).info_table)
    if primary:
        return SchemaVersion.PRIMARY, primary

    secondary = soup.select(profile_for(SchemaVersion.SECONDARY).info_table)
    if not secondary or not _rows(secondary):
        for tbody in soup.select(GENERIC_TABLE_BODY):
            if tbody.select("tr"):
                secondary = [tbody]
                break
    return SchemaVersion.SECONDARY, secondary


def extract_exam_info(soup: BeautifulSoup) -> ExamInfo:
    version, tables = detect_schema(soup)
    rows = _rows(tables)

    if version is SchemaVersion.PRIMARY:
        info_text = "".join(table.get_text() for table in tables)
        exam_type_text = (
            _row_text(rows, EXAM_TYPE_ROW_INDEX)
            .replace(EXAM_TYPE_LABEL, "", 1)
            .replace(":", "", 1)
            .strip()
        )
    else:
        info_text = ""
        if rows:
            first_cell = rows[0].select_one("td")
            info_text = first_cell.get_text() if first_cell else ""
        exam_type_text = _row_text(rows, EXAM_TYPE_ROW_INDEX).strip()

    info = ExamInfo(
        schema_version=version,
        year=_search_int(YEAR_PATTERN, info_text),
        semester=_search_int(SEMESTER_PATTERN, info_text),
        question_count_hint=_search_int(QUESTION_COUNT_PATTERN, info_text) or 0,
        subject_name=_row_text(rows, SUBJECT_ROW_INDEX).strip(),
        exam_type_text=exam_type_text,
    )
    logger.debug(
        "exam_info_extracted",
        schema_version=version.value,
        year=info.year,
        semester=info.semester,
        subject=info.subject_name,
        exam_type_text=info.exam_type_text,
        question_count_hint=info.question_count_hint,
    )
    return info


def _rows(tables: List[Tag]) -> List[Tag]:
    return [row for table in tables for row in table.select("tr")]


def _row_text(rows: List[Tag], index: int) -> str:
    if index >= len(rows):
        return ""
    return "".join(cell.get_text() for cell in rows[index].select("td"))


def _search_int(pattern: re.Pattern, text: str) -> Optional[int]:
    match = pattern.search(text)
    return int(match.group(1)) if match else None
