"""
Answer key extraction.

Archive pages publish the answer key in one of three shapes. Each shape has its own
strategy; strategies are tried in order and the first one producing a non-empty map wins.
"""

from typing import Callable, Dict, List, Optional

import structlog
from bs4 import BeautifulSoup, Tag

from .answer_notation import decode_answer
from .selectors import (
    ANSWER_HEADER_MARKER,
    ANSWER_STRING_MARKER,
    GENERIC_TABLE_BODY,
    STRUCTURED_ANSWER_ROWS,
)
from ..exceptions import MalformedAnswerError
from ..utils.string_utils import parse_int_prefix, preview_numbers

logger = structlog.get_logger(__name__)

AnswerMap = Dict[int, List[int]]
AnswerTableStrategy = Callable[[BeautifulSoup, int], Optional[AnswerMap]]


def structured_table(soup: BeautifulSoup, first_question_number: int) -> Optional[AnswerMap]:
    """
    ``.allaAnswerTableDiv`` table with a header row followed by (number, answer) rows.

    Tables that restart numbering at 1 on pages whose questions start later get shifted
    so the keys line up with the scraped question numbers.
    """
    rows = soup.select(STRUCTURED_ANSWER_ROWS)
    if len(rows) <= 1:
        return None

    data_rows = rows[1:]
    table_first_number = None
    for row in data_rows:
        cells = row.select("td")
        if len(cells) >= 2:
            table_first_number = parse_int_prefix(cells[0].get_text().strip())
            if table_first_number is not None:
                break

    offset = first_question_number - 1 if table_first_number == 1 else 0
    logger.debug(
        "structured_answer_table_found",
        first_question_number=first_question_number,
        table_first_number=table_first_number,
        offset=offset,
    )

    answer_map: AnswerMap = {}
    for row in data_rows:
        _read_row(row, answer_map, offset)
    return answer_map


def header_keyed_table(soup: BeautifulSoup, first_question_number: int) -> Optional[AnswerMap]:
    """Table body whose header cell reads "정답"; numbers are used as written."""
    bodies: List[Tag] = []
    for header in soup.select(f'tbody tr th:-soup-contains("{ANSWER_HEADER_MARKER}")'):
        body = header.find_parent("tbody")
        if body is not None and body not in bodies:
            bodies.append(body)

    if not bodies:
        return None

    logger.debug("header_keyed_answer_table_found", table_count=len(bodies))
    answer_map: AnswerMap = {}
    for body in bodies:
        for row in body.select("tr"):
            _read_row(row, answer_map, 0)
    return answer_map


def answer_string(soup: BeautifulSoup, first_question_number: int) -> Optional[AnswerMap]:
    """
    Compact key such as "3142A..." in the row after the "문제답안" marker row.

    Character ``i`` answers question ``first_question_number + i``. Characters that do not
    decode only lose their own position.
    """
    marker_rows = soup.select(f'{GENERIC_TABLE_BODY} tr:-soup-contains("{ANSWER_STRING_MARKER}")')
    if not marker_rows:
        return None

    next_row = marker_rows[0].find_next_sibling("tr")
    if next_row is None:
        return None

    key = "".join(cell.get_text() for cell in next_row.select("td")).strip()
    logger.debug("answer_string_found", answer_string=key, first_question_number=first_question_number)

    answer_map: AnswerMap = {}
    for index, char in enumerate(key):
        question_number = first_question_number + index
        try:
            answer_map[question_number] = decode_answer(char)
        except MalformedAnswerError:
            logger.warning("answer_decode_failed", question_number=question_number, answer_text=char)
    return answer_map


ANSWER_TABLE_STRATEGIES: List[AnswerTableStrategy] = [
    structured_table,
    header_keyed_table,
    answer_string,
]


def extract_answer_map(soup: BeautifulSoup, first_question_number: int = 1) -> AnswerMap:
    """Run the strategies in order. An empty dict means no answer key was recognised."""
    for strategy in ANSWER_TABLE_STRATEGIES:
        answer_map = strategy(soup, first_question_number)
        if answer_map:
            logger.info(
                "answer_map_extracted",
                strategy=strategy.__name__,
                answer_count=len(answer_map),
                question_numbers=preview_numbers(list(answer_map)),
            )
            return answer_map

    logger.debug("answer_map_not_found")
    return {}


def _read_row(row: Tag, answer_map: AnswerMap, offset: int) -> None:
    cells = row.select("td")
    if len(cells) < 2:
        return

    number = parse_int_prefix(cells[0].get_text().strip())
    answer_text = cells[1].get_text().strip()
    if number is None or not answer_text:
        return

    question_number = number + offset
    try:
        answer_map[question_number] = decode_answer(answer_text)
    except MalformedAnswerError:
        logger.warning("answer_decode_failed", question_number=question_number, answer_text=answer_text)
