from dataclasses import dataclass
from typing import List, Optional

import structlog

from .page_fetcher import PageFetcher
from .selectors import EXAM_LINKS, SUBJECT_LINKS
from ..utils.url_utils import to_absolute_url

logger = structlog.get_logger(__name__)

# Index headings in the subject list, not subjects
INDEX_LABELS = frozenset([
    "가", "나", "다", "라", "마", "바", "사", "아", "자", "차", "카", "타", "파", "하", "기타",
])


@dataclass(frozen=True)
class SubjectLink:
    name: str
    url: str


async def get_subject_links(main_url: str, fetcher: Optional[PageFetcher] = None) -> List[SubjectLink]:
    fetcher = fetcher or PageFetcher()
    soup = await fetcher.fetch_document(main_url)

    subjects = []
    for anchor in soup.select(SUBJECT_LINKS):
        href = anchor.get("href")
        name = anchor.get_text().strip()
        if href and name not in INDEX_LABELS:
            subjects.append(SubjectLink(name=name, url=to_absolute_url(href, main_url)))

    logger.info("subject_links_collected", main_url=main_url, subject_count=len(subjects))
    return subjects


async def get_exam_links(subject_url: str, fetcher: Optional[PageFetcher] = None) -> List[str]:
    fetcher = fetcher or PageFetcher()
    soup = await fetcher.fetch_document(subject_url)

    links = [
        to_absolute_url(anchor["href"], subject_url)
        for anchor in soup.select(EXAM_LINKS)
        if anchor.get("href")
    ]
    logger.debug("exam_links_collected", subject_url=subject_url, exam_count=len(links))
    return links
