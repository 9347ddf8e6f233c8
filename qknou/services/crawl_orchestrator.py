import asyncio
import traceback
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy.orm import Session

from ..config import get_settings
from ..exceptions import ExamConflictError, ParsingError
from ..models.enums import CrawlErrorType
from ..parsers.page_fetcher import PageFetcher
from ..parsers.site_links import SubjectLink, get_exam_links, get_subject_links
from .crawl_log_writer import CrawlErrorLog, CrawlLogWriter
from .exam_crawler_service import ExamCrawlerService

logger = structlog.get_logger(__name__)


@dataclass
class CrawlAllResult:
    success_count: int = 0
    fail_count: int = 0
    conflict_count: int = 0
    error_logs: List[CrawlErrorLog] = field(default_factory=list)
    failed_urls: List[str] = field(default_factory=list)
    error_log_file: Optional[Path] = None
    failed_url_file: Optional[Path] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success_count": self.success_count,
            "fail_count": self.fail_count,
            "conflict_count": self.conflict_count,
            "error_logs": [entry.model_dump(mode="json") for entry in self.error_logs],
            "failed_urls": list(self.failed_urls),
            "error_log_file": str(self.error_log_file) if self.error_log_file else None,
            "failed_url_file": str(self.failed_url_file) if self.failed_url_file else None,
        }


class CrawlOrchestrator:
    """
    Crawls every exam reachable from the archive's subject index.

    Exams are processed one at a time. A failing subject or exam is recorded and the
    batch moves on; only cancellation stops it.
    """

    def __init__(
        self,
        session: Session,
        fetcher: Optional[PageFetcher] = None,
        exam_crawler: Optional[ExamCrawlerService] = None,
        log_writer: Optional[CrawlLogWriter] = None,
    ):
        self.fetcher = fetcher or PageFetcher()
        self.exam_crawler = exam_crawler or ExamCrawlerService(session, self.fetcher)
        self.log_writer = log_writer or CrawlLogWriter()

    async def crawl_all(
        self,
        main_url: str,
        force_retry: bool = False,
        subject_filter: Optional[List[str]] = None,
        delay_ms: Optional[int] = None,
    ) -> CrawlAllResult:
        delay_ms = get_settings().crawl_delay_ms if delay_ms is None else delay_ms
        result = CrawlAllResult()

        subjects = await get_subject_links(main_url, self.fetcher)
        if subject_filter:
            wanted = set(subject_filter)
            subjects = [subject for subject in subjects if subject.name in wanted]
            logger.info("Subject filter applied", selected=len(subjects), requested=len(wanted))

        for index, subject in enumerate(subjects, start=1):
            logger.info("Crawling subject", subject=subject.name, position=index, total=len(subjects))
            try:
                exam_links = await get_exam_links(subject.url, self.fetcher)
            except Exception as e:
                logger.error("Failed to process subject", subject=subject.name, url=subject.url, error=str(e))
                self._record_failure(result, subject.url, subject, CrawlErrorType.SUBJECT, e)
                continue

            logger.info("Exam links found", subject=subject.name, exam_count=len(exam_links))
            for position, exam_url in enumerate(exam_links):
                await self._crawl_one(result, exam_url, subject, force_retry)
                if position < len(exam_links) - 1 and delay_ms > 0:
                    await asyncio.sleep(delay_ms / 1000)

        self._finish(result)
        return result

    async def _crawl_one(self, result: CrawlAllResult, url: str, subject: SubjectLink, force_retry: bool) -> None:
        try:
            outcome = await self.exam_crawler.crawl_exam(url, force_retry=force_retry)
        except ExamConflictError as e:
            logger.warning("Exam already stored", url=url, existing_exam_id=e.existing_exam_id)
            result.conflict_count += 1
            result.error_logs.append(CrawlErrorLog(
                url=url,
                subject_name=subject.name,
                error_type=CrawlErrorType.EXAM,
                error_message=str(e),
            ))
            return
        except ParsingError as e:
            logger.error("Failed to parse exam", url=url, error=str(e))
            self._record_failure(result, url, subject, CrawlErrorType.PARSING, e)
            return
        except Exception as e:
            logger.error("Failed to crawl exam", url=url, error=str(e))
            self._record_failure(result, url, subject, CrawlErrorType.EXAM, e)
            return

        result.success_count += 1
        if outcome.skipped_question_numbers:
            result.error_logs.append(CrawlErrorLog(
                url=url,
                subject_name=subject.name,
                error_type=CrawlErrorType.MISSING_ANSWER,
                error_message=f"Skipped {len(outcome.skipped_question_numbers)} questions without answers",
                skipped_questions=list(outcome.skipped_question_numbers),
            ))
            result.failed_urls.append(url)

    def _record_failure(
        self,
        result: CrawlAllResult,
        url: str,
        subject: SubjectLink,
        error_type: CrawlErrorType,
        error: Exception,
    ) -> None:
        result.fail_count += 1
        result.failed_urls.append(url)
        result.error_logs.append(CrawlErrorLog(
            url=url,
            subject_name=subject.name,
            error_type=error_type,
            error_message=str(error),
            stack_trace="".join(traceback.format_exception(type(error), error, error.__traceback__)),
        ))

    def _finish(self, result: CrawlAllResult) -> None:
        logger.info(
            "Crawl finished",
            success_count=result.success_count,
            fail_count=result.fail_count,
            conflict_count=result.conflict_count,
            error_count=len(result.error_logs),
        )
        if not result.error_logs:
            return

        for entry in result.error_logs:
            logger.warning(
                "Crawl failure",
                error_type=entry.error_type.value,
                target=entry.subject_name or entry.url,
                reason=entry.error_message,
            )

        result.error_log_file = self.log_writer.write_error_logs(result.error_logs)
        result.failed_url_file = self.log_writer.write_failed_urls(result.failed_urls)
