"""qknou crawler CLI - scrape archived exam pages into the database."""

import argparse
import asyncio
import sys
from typing import List, Optional

import structlog

from .config import get_settings
from .core.database import SessionLocal, create_tables
from .core.logging_config import configure_logging
from .exceptions import QknouError
from .services.crawl_orchestrator import CrawlOrchestrator
from .services.exam_crawler_service import ExamCrawlerService

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qknou-crawl",
        description="Scrape KNOU past exams from the archive blog",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s https://allaclass.tistory.com/855                     # One exam page
  %(prog)s https://allaclass.tistory.com/855 --retry             # Replace it if already stored
  %(prog)s https://allaclass.tistory.com/2365 --all --delay=2000 # Every subject on the main page
  %(prog)s https://allaclass.tistory.com/2365 --all --subject 컴퓨터의이해
        """,
    )
    parser.add_argument("url", help="Exam page URL, or the subject index page with --all")
    parser.add_argument("--all", action="store_true", help="Crawl every exam linked from the subject index")
    parser.add_argument("-r", "--retry", action="store_true", help="Overwrite exams that are already stored")
    parser.add_argument("--delay", type=int, metavar="MS", help="Pause between exam pages (default: setting crawl_delay_ms)")
    parser.add_argument(
        "--subject", action="append", metavar="NAME", dest="subjects",
        help="Only crawl this subject (exact name, repeatable)"
    )
    return parser


async def run_single(url: str, force_retry: bool) -> int:
    db = SessionLocal()
    try:
        result = await ExamCrawlerService(db).crawl_exam(url, force_retry=force_retry)
    except QknouError as e:
        print(f"Crawl failed: {e}", file=sys.stderr)
        return 1
    finally:
        db.close()

    print("Crawl finished")
    print(f"  exam id:          {result.exam_id}")
    print(f"  title:            {result.title}")
    print(f"  status:           {result.status.value}")
    print(f"  saved questions:  {result.saved_question_count}/{result.total_scraped_question_count}")
    if result.skipped_question_numbers:
        skipped = ", ".join(str(n) for n in result.skipped_question_numbers)
        print(f"  skipped ({len(result.skipped_question_numbers)}): {skipped}")
        print("  The answer table and question numbers may not line up; check the page by hand.")
    return 0


async def run_all(main_url: str, force_retry: bool, delay_ms: Optional[int], subjects: Optional[List[str]]) -> int:
    db = SessionLocal()
    try:
        result = await CrawlOrchestrator(db).crawl_all(
            main_url,
            force_retry=force_retry,
            subject_filter=subjects,
            delay_ms=delay_ms,
        )
    except QknouError as e:
        print(f"Crawl failed: {e}", file=sys.stderr)
        return 1
    finally:
        db.close()

    print("=" * 60)
    print(f"Succeeded: {result.success_count}")
    print(f"Failed:    {result.fail_count}")
    print(f"Conflicts: {result.conflict_count}")
    for entry in result.error_logs:
        print(f"  [{entry.error_type.value}] {entry.subject_name or entry.url}")
        print(f"      {entry.error_message.splitlines()[0] if entry.error_message else ''}")
    if result.error_log_file:
        print(f"Error log:   {result.error_log_file}")
    if result.failed_url_file:
        print(f"Failed URLs: {result.failed_url_file}")
        print(f"Retry with:  while read url; do qknou-crawl \"$url\" --retry; done < {result.failed_url_file}")
    print("=" * 60)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format)
    create_tables()

    if args.delay is not None and args.delay < 0:
        print("--delay must not be negative", file=sys.stderr)
        return 2

    logger.info("Crawl started", url=args.url, mode="all" if args.all else "single", force_retry=args.retry)
    if args.all:
        return asyncio.run(run_all(args.url, args.retry, args.delay, args.subjects))
    return asyncio.run(run_single(args.url, args.retry))


if __name__ == "__main__":
    sys.exit(main())
