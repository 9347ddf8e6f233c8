import asyncio
from dataclasses import dataclass, field
from typing import List, Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.database import unit_of_work
from ..exceptions import (
    AnswerTableNotFoundError,
    DatabaseError,
    ExamConflictError,
    MissingSubjectNameError,
    MissingYearError,
)
from ..models.enums import CrawlStatus, ExamType
from ..models.exam import Exam
from ..models.question import Question
from ..parsers.exam_page_parser import ParsedExamPage, fetch_exam_page
from ..parsers.exam_type import parse_exam_type
from ..parsers.page_fetcher import PageFetcher
from ..repositories.exam_repository import ExamRepository
from ..repositories.question_repository import QuestionRepository
from ..repositories.subject_repository import SubjectRepository

logger = structlog.get_logger(__name__)


@dataclass
class CrawlExamResult:
    exam_id: int
    title: str
    status: CrawlStatus
    saved_question_count: int
    total_scraped_question_count: int
    skipped_question_numbers: List[int] = field(default_factory=list)

    def to_dict(self):
        return {
            "exam_id": self.exam_id,
            "title": self.title,
            "status": self.status.value,
            "saved_question_count": self.saved_question_count,
            "total_scraped_question_count": self.total_scraped_question_count,
            "skipped_question_numbers": list(self.skipped_question_numbers),
        }


class ExamCrawlerService:
    """
    Scrapes one exam page and stores it.

    An exam is identified by (subject, year, exam type). Crawling an exam that already
    exists raises ExamConflictError unless force_retry is set, in which case its questions
    are replaced and the exam row keeps its id.
    """

    def __init__(self, session: Session, fetcher: Optional[PageFetcher] = None):
        self.session = session
        self.fetcher = fetcher or PageFetcher()
        self.subject_repo = SubjectRepository(session)
        self.exam_repo = ExamRepository(session)
        self.question_repo = QuestionRepository(session)

    async def crawl_exam(self, url: str, force_retry: bool = False) -> CrawlExamResult:
        logger.info("Crawling exam", url=url, force_retry=force_retry)
        page = await fetch_exam_page(url, self.fetcher)
        # Session work is blocking; keep it off the event loop
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.save_parsed_exam, page, force_retry)

    def save_parsed_exam(self, page: ParsedExamPage, force_retry: bool = False) -> CrawlExamResult:
        exam_type = self._validate(page)
        info = page.info
        title = info.subject_name

        try:
            with unit_of_work(self.session):
                subject = self.subject_repo.find_or_create_by_name(info.subject_name)
                existing = self.exam_repo.get_by_key(subject.id, info.year, int(exam_type))

                if existing and not force_retry:
                    raise ExamConflictError(
                        existing_exam_id=existing.id,
                        title=existing.title,
                        year=existing.year,
                        exam_type=existing.exam_type,
                    )

                if existing:
                    deleted = self.exam_repo.delete_questions(existing.id)
                    exam = self.exam_repo.get_by_id(existing.id)
                    exam.title = title
                    exam.total_questions = len(page.questions)
                    status = CrawlStatus.UPDATED
                    logger.info("Replacing existing exam", exam_id=exam.id, title=title, deleted_questions=deleted)
                else:
                    exam = self.exam_repo.add(Exam(
                        subject_id=subject.id,
                        year=info.year,
                        exam_type=int(exam_type),
                        title=title,
                        total_questions=len(page.questions),
                    ))
                    status = CrawlStatus.SAVED

                saved_count, skipped = self._save_questions(exam, page)
                self.session.flush()
                exam_id = exam.id
        except SQLAlchemyError as e:
            logger.error("Failed to save exam", url=page.url, subject=title, error=str(e), exc_info=e)
            raise DatabaseError(f"Failed to save exam from {page.url}: {str(e)}")

        if skipped:
            logger.warning(
                "Questions without answers skipped",
                url=page.url,
                exam_id=exam_id,
                skipped_count=len(skipped),
                skipped=skipped,
            )

        logger.info(
            "Exam saved",
            exam_id=exam_id,
            title=title,
            status=status.value,
            year=info.year,
            exam_type=exam_type.label,
            saved_questions=saved_count,
            total_questions=len(page.questions),
        )
        return CrawlExamResult(
            exam_id=exam_id,
            title=title,
            status=status,
            saved_question_count=saved_count,
            total_scraped_question_count=len(page.questions),
            skipped_question_numbers=skipped,
        )

    def _validate(self, page: ParsedExamPage) -> ExamType:
        info = page.info
        if not info.year:
            raise MissingYearError(page.url)
        if not info.subject_name.strip():
            raise MissingSubjectNameError(page.url)
        if page.questions and not page.answer_map:
            raise AnswerTableNotFoundError(page.url, question_count=len(page.questions))
        return parse_exam_type(page.exam_type_text)

    def _save_questions(self, exam: Exam, page: ParsedExamPage):
        saved_count = 0
        skipped: List[int] = []

        for scraped in page.questions:
            correct_answers = page.answers_for(scraped.question_number)
            if not correct_answers:
                logger.warning("Question has no answer, skipping", exam_id=exam.id, question_number=scraped.question_number)
                skipped.append(scraped.question_number)
                continue

            self.question_repo.add(Question(
                exam_id=exam.id,
                question_number=scraped.question_number,
                question_text=scraped.question_text,
                example_text=scraped.example_text,
                question_image_url=scraped.question_image_url,
                choices=[choice.to_dict() for choice in scraped.choices],
                correct_answers=list(correct_answers),
            ))
            saved_count += 1

        return saved_count, skipped
