import json
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import structlog
from pydantic import BaseModel, Field

from ..config import get_settings
from ..models.enums import CrawlErrorType

logger = structlog.get_logger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CrawlErrorLog(BaseModel):
    timestamp: datetime = Field(default_factory=_utc_now)
    url: str
    subject_name: Optional[str] = None
    error_type: CrawlErrorType
    error_message: str
    stack_trace: Optional[str] = None
    skipped_questions: Optional[List[int]] = None


class CrawlLogWriter:
    """
    Persists the outcome of a batch crawl next to the application logs.

    Error entries for one UTC day accumulate in ``crawl-errors-YYYY-MM-DD.json``; every
    batch with failures also gets its own ``failed-urls-...txt`` listing one URL per line
    so it can be fed back to the single-exam crawler.
    """

    def __init__(self, log_dir: Optional[str] = None):
        self.log_dir = Path(log_dir or get_settings().crawl_log_dir)

    def write_error_logs(self, errors: List[CrawlErrorLog], now: Optional[datetime] = None) -> Optional[Path]:
        if not errors:
            return None

        now = now or _utc_now()
        self.log_dir.mkdir(parents=True, exist_ok=True)
        log_file = self.log_dir / f"crawl-errors-{now.strftime('%Y-%m-%d')}.json"

        entries = self._read_existing(log_file)
        entries.extend(error.model_dump(mode="json") for error in errors)

        log_file.write_text(json.dumps(entries, ensure_ascii=False, indent=2), encoding="utf-8")
        logger.info("Crawl error log written", path=str(log_file), new_entries=len(errors), total_entries=len(entries))
        return log_file

    def write_failed_urls(self, urls: List[str], now: Optional[datetime] = None) -> Optional[Path]:
        if not urls:
            return None

        now = now or _utc_now()
        self.log_dir.mkdir(parents=True, exist_ok=True)
        stamp = now.strftime("%Y-%m-%dT%H-%M-%S-%f")
        url_file = self.log_dir / f"failed-urls-{now.strftime('%Y-%m-%d')}-{stamp}.txt"

        url_file.write_text("\n".join(urls), encoding="utf-8")
        logger.info("Failed URL list written", path=str(url_file), url_count=len(urls))
        return url_file

    def _read_existing(self, log_file: Path) -> list:
        if not log_file.exists():
            return []
        try:
            entries = json.loads(log_file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Existing crawl error log unreadable, starting a new one", path=str(log_file), error=str(e))
            return []
        if not isinstance(entries, list):
            logger.warning("Existing crawl error log is not a list, starting a new one", path=str(log_file))
            return []
        return entries
