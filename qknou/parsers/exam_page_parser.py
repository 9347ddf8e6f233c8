from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

import structlog
from bs4 import BeautifulSoup

from .answer_table import AnswerMap, extract_answer_map
from .exam_info import ExamInfo, extract_exam_info
from .exam_type import with_semester_prefix
from .page_fetcher import PageFetcher, parse_html
from .question_extractor import ScrapedQuestion, iter_questions

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ParsedExamPage:
    """Everything scraped from one exam page, before any validation or persistence."""

    url: str
    info: ExamInfo
    questions: Tuple[ScrapedQuestion, ...]
    answer_map: AnswerMap

    @property
    def exam_type_text(self) -> str:
        return with_semester_prefix(self.info.exam_type_text, self.info.semester)

    @property
    def first_question_number(self) -> int:
        return self.questions[0].question_number if self.questions else 1

    def answers_for(self, question_number: int) -> Optional[List[int]]:
        answers = self.answer_map.get(question_number)
        return answers or None


def parse_exam_page(document: Union[str, BeautifulSoup], url: str = "") -> ParsedExamPage:
    soup = parse_html(document) if isinstance(document, str) else document

    info = extract_exam_info(soup)
    questions = tuple(iter_questions(soup, info.schema_version))
    first_question_number = questions[0].question_number if questions else 1
    answer_map = extract_answer_map(soup, first_question_number)

    logger.info(
        "exam_page_parsed",
        url=url,
        subject=info.subject_name,
        year=info.year,
        question_count=len(questions),
        question_count_hint=info.question_count_hint,
        answer_count=len(answer_map),
    )
    return ParsedExamPage(url=url, info=info, questions=questions, answer_map=answer_map)


async def fetch_exam_page(url: str, fetcher: Optional[PageFetcher] = None) -> ParsedExamPage:
    fetcher = fetcher or PageFetcher()
    soup = await fetcher.fetch_document(url)
    return parse_exam_page(soup, url)
