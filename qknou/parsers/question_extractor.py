from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

import structlog
from bs4 import BeautifulSoup, Tag

from .answer_notation import MAX_CHOICE, MIN_CHOICE
from .selectors import EXAMPLE_TEXT, SchemaVersion, SelectorProfile, profile_for
from ..utils.string_utils import parse_int_prefix

logger = structlog.get_logger(__name__)

# Radio value used by the archive for the "don't know" option
UNKNOWN_CHOICE_VALUE = 5


@dataclass(frozen=True)
class ScrapedChoice:
    number: int
    text: str
    image_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"number": self.number, "text": self.text, "image_url": self.image_url}


@dataclass(frozen=True)
class ScrapedQuestion:
    question_number: int
    question_text: str
    example_text: Optional[str] = None
    question_image_url: Optional[str] = None
    choices: Tuple[ScrapedChoice, ...] = field(default_factory=tuple)


def select_question_tables(soup: BeautifulSoup, version: SchemaVersion) -> Tuple[SchemaVersion, List[Tag]]:
    """Find the per-question tables, trying the alternate layout when the detected one has none."""
    tables = soup.select(profile_for(version).question_table)
    if tables:
        return version, tables

    alternate = version.alternate
    return alternate, soup.select(profile_for(alternate).question_table)


def iter_questions(soup: BeautifulSoup, version: SchemaVersion) -> Iterator[ScrapedQuestion]:
    """Yield questions in document order. Blocks without a numeric label are skipped."""
    table_version, tables = select_question_tables(soup, version)
    profile = profile_for(table_version)
    logger.debug("question_tables_selected", schema_version=table_version.value, table_count=len(tables))

    for table in tables:
        question = extract_question(table, profile)
        if question is not None:
            yield question


def extract_question(table: Tag, profile: SelectorProfile) -> Optional[ScrapedQuestion]:
    label = _joined_text(table.select(profile.question_number)).strip()
    question_number = parse_int_prefix(label)
    if question_number is None:
        logger.debug("question_block_skipped", reason="unparseable number label", label=label)
        return None

    example_nodes = table.select(EXAMPLE_TEXT)
    example_text = _joined_text(example_nodes).strip() if example_nodes else None

    question_cells = table.select(profile.question_row)
    full_text = _joined_text(question_cells).strip()
    # Plain substring removal; the label normally leads the row text
    question_text = full_text.replace(label, "", 1).strip()

    return ScrapedQuestion(
        question_number=question_number,
        question_text=question_text,
        example_text=example_text,
        question_image_url=_first_image_src(question_cells),
        choices=tuple(_extract_choices(table, profile)),
    )


def _extract_choices(table: Tag, profile: SelectorProfile) -> Iterator[ScrapedChoice]:
    for row in table.select(profile.answer_row):
        radio = row.select_one("input[type=radio]")
        value = radio.get("value") if radio is not None else None
        choice_number = parse_int_prefix(value or "0")

        if choice_number == UNKNOWN_CHOICE_VALUE:
            continue
        if choice_number is None or not MIN_CHOICE <= choice_number <= MAX_CHOICE:
            continue

        labels = row.select("label")
        yield ScrapedChoice(
            number=choice_number,
            text=_joined_text(labels).strip(),
            image_url=_first_image_src(labels),
        )


def _joined_text(nodes: List[Tag]) -> str:
    return "".join(node.get_text() for node in nodes)


def _first_image_src(nodes: List[Tag]) -> Optional[str]:
    for node in nodes:
        image = node.find("img")
        if image is not None:
            return image.get("src") or None
    return None
