import threading

import pytest
from unittest.mock import patch

from qknou.exceptions import (
    AnswerTableNotFoundError,
    ExamConflictError,
    MissingSubjectNameError,
    MissingYearError,
    UnknownExamTypeError,
)
from qknou.models import Exam, Question, Subject
from qknou.models.enums import CrawlStatus, ExamType
from qknou.parsers.exam_page_parser import parse_exam_page
from qknou.repositories.question_repository import QuestionRepository
from qknou.repositories.subject_repository import SubjectRepository
from qknou.services.exam_crawler_service import ExamCrawlerService

EXAM_URL = "https://allaclass.tistory.com/855"


def without_answer_table(html):
    start = html.index('<div class="allaAnswerTableDiv">')
    end = html.index("</table></div>", start) + len("</table></div>")
    return html[:start] + html[end:]


class TestCrawlExam:
    @pytest.fixture(autouse=True)
    def setup_service(self, test_db, mock_fetcher):
        self.db = test_db
        self.fetcher = mock_fetcher
        self.service = ExamCrawlerService(test_db, fetcher=mock_fetcher)

    @pytest.mark.asyncio
    async def test_new_exam_saved(self, primary_exam_html):
        self.fetcher.pages[EXAM_URL] = primary_exam_html

        result = await self.service.crawl_exam(EXAM_URL)

        assert result.status == CrawlStatus.SAVED
        assert result.title == "컴퓨터의이해"
        assert result.saved_question_count == 2
        assert result.total_scraped_question_count == 2
        assert result.skipped_question_numbers == []

        exam = self.db.query(Exam).one()
        assert exam.id == result.exam_id
        assert exam.year == 2023
        assert exam.exam_type == ExamType.SECOND_SEMESTER_FINAL
        assert exam.total_questions == 2
        assert exam.subject.name == "컴퓨터의이해"

        questions = self.db.query(Question).order_by(Question.question_number).all()
        assert [q.correct_answers for q in questions] == [[1, 2], [3]]
        assert questions[0].choices[0] == {"number": 1, "text": "키보드", "image_url": None}
        assert questions[1].question_image_url == "https://img.example.com/q2.png"

    @pytest.mark.asyncio
    async def test_storage_runs_off_event_loop(self, primary_exam_html):
        self.fetcher.pages[EXAM_URL] = primary_exam_html
        original_save = ExamCrawlerService.save_parsed_exam
        save_threads = []

        def recording_save(service, page, force_retry=False):
            save_threads.append(threading.get_ident())
            return original_save(service, page, force_retry)

        with patch.object(ExamCrawlerService, "save_parsed_exam", recording_save):
            result = await self.service.crawl_exam(EXAM_URL)

        assert result.status == CrawlStatus.SAVED
        assert len(save_threads) == 1
        assert save_threads[0] != threading.get_ident()

    @pytest.mark.asyncio
    async def test_conflict_without_force(self, primary_exam_html):
        self.fetcher.pages[EXAM_URL] = primary_exam_html
        first = await self.service.crawl_exam(EXAM_URL)
        question_ids = sorted(q.id for q in self.db.query(Question).all())

        with pytest.raises(ExamConflictError) as exc_info:
            await self.service.crawl_exam(EXAM_URL)

        error = exc_info.value
        assert error.existing_exam_id == first.exam_id
        assert error.title == "컴퓨터의이해"
        assert error.year == 2023
        assert error.exam_type == ExamType.SECOND_SEMESTER_FINAL
        assert self.db.query(Exam).count() == 1
        assert sorted(q.id for q in self.db.query(Question).all()) == question_ids

    @pytest.mark.asyncio
    async def test_force_retry_keeps_exam_id(self, primary_exam_html):
        self.fetcher.pages[EXAM_URL] = primary_exam_html
        first = await self.service.crawl_exam(EXAM_URL)
        second = await self.service.crawl_exam(EXAM_URL, force_retry=True)

        assert second.status == CrawlStatus.UPDATED
        assert second.exam_id == first.exam_id
        assert self.db.query(Exam).count() == 1
        assert self.db.query(Subject).count() == 1
        assert self.db.query(Question).count() == 2

    @pytest.mark.asyncio
    async def test_questions_without_answers_skipped(self, secondary_exam_html):
        self.fetcher.pages[EXAM_URL] = secondary_exam_html

        result = await self.service.crawl_exam(EXAM_URL)

        assert result.saved_question_count == 2
        assert result.total_scraped_question_count == 3
        assert result.skipped_question_numbers == [7]
        exam = self.db.query(Exam).one()
        assert exam.exam_type == ExamType.FIRST_SEMESTER_FINAL
        assert exam.total_questions == 3
        assert [q.question_number for q in self.db.query(Question).order_by(Question.question_number)] == [5, 6]

    @pytest.mark.asyncio
    async def test_missing_answer_table(self, primary_exam_html):
        self.fetcher.pages[EXAM_URL] = without_answer_table(primary_exam_html)

        with pytest.raises(AnswerTableNotFoundError) as exc_info:
            await self.service.crawl_exam(EXAM_URL)

        assert exc_info.value.question_count == 2
        assert self.db.query(Exam).count() == 0
        assert self.db.query(Question).count() == 0
        assert self.db.query(Subject).count() == 0


class TestSaveParsedExam:
    @pytest.fixture(autouse=True)
    def setup_service(self, test_db, mock_fetcher):
        self.db = test_db
        self.service = ExamCrawlerService(test_db, fetcher=mock_fetcher)

    def test_missing_year_checked_first(self, primary_exam_html):
        html = primary_exam_html.replace("2023학년도", "").replace("컴퓨터의이해", "")
        page = parse_exam_page(without_answer_table(html), EXAM_URL)

        with pytest.raises(MissingYearError):
            self.service.save_parsed_exam(page)

    def test_missing_subject_checked_before_answers(self, primary_exam_html):
        html = without_answer_table(primary_exam_html.replace("컴퓨터의이해", ""))
        page = parse_exam_page(html, EXAM_URL)

        with pytest.raises(MissingSubjectNameError):
            self.service.save_parsed_exam(page)
        assert self.db.query(Subject).count() == 0

    def test_unknown_exam_type(self, primary_exam_html):
        html = primary_exam_html.replace("시험종류 : 기말시험", "시험종류 : 출석수업대체")
        page = parse_exam_page(html, EXAM_URL)

        with pytest.raises(UnknownExamTypeError):
            self.service.save_parsed_exam(page)
        assert self.db.query(Exam).count() == 0

    def test_exam_without_questions(self, primary_exam_html):
        html = primary_exam_html.replace("alla6BasicTbl", "unusedTbl")
        page = parse_exam_page(html, EXAM_URL)

        result = self.service.save_parsed_exam(page)

        assert result.saved_question_count == 0
        assert result.total_scraped_question_count == 0
        assert self.db.query(Exam).one().total_questions == 0

    def test_failure_mid_loop_leaves_no_exam(self, primary_exam_html):
        page = parse_exam_page(primary_exam_html, EXAM_URL)
        original_add = QuestionRepository.add
        calls = []

        def failing_add(repo, question):
            calls.append(question.question_number)
            if len(calls) == 2:
                raise RuntimeError("disk full")
            return original_add(repo, question)

        with patch.object(QuestionRepository, "add", failing_add):
            with pytest.raises(RuntimeError):
                self.service.save_parsed_exam(page)

        assert self.db.query(Exam).count() == 0
        assert self.db.query(Question).count() == 0

    def test_failure_during_forced_update_keeps_previous_questions(self, primary_exam_html):
        page = parse_exam_page(primary_exam_html, EXAM_URL)
        first = self.service.save_parsed_exam(page)
        previous_ids = sorted(q.id for q in self.db.query(Question).all())

        with patch.object(QuestionRepository, "add", side_effect=RuntimeError("disk full")):
            with pytest.raises(RuntimeError):
                self.service.save_parsed_exam(page, force_retry=True)

        assert self.db.query(Exam).one().id == first.exam_id
        assert sorted(q.id for q in self.db.query(Question).all()) == previous_ids


class TestSubjectRepository:
    def test_find_or_create_reuses_existing(self, test_db):
        repo = SubjectRepository(test_db)
        created = repo.find_or_create_by_name("자료구조")
        test_db.commit()

        assert repo.find_or_create_by_name("자료구조").id == created.id
        assert test_db.query(Subject).count() == 1

    def test_names_are_exact(self, test_db):
        repo = SubjectRepository(test_db)
        repo.find_or_create_by_name("자료구조")
        repo.find_or_create_by_name("자료구조 ")
        test_db.commit()

        assert test_db.query(Subject).count() == 2

    def test_concurrent_insert_recovers(self, test_db):
        repo = SubjectRepository(test_db)
        existing = repo.find_or_create_by_name("운영체제")
        test_db.commit()

        with patch.object(repo, "get_by_name", side_effect=[None, existing]):
            subject = repo.find_or_create_by_name("운영체제")

        assert subject.id == existing.id
        assert test_db.query(Subject).count() == 1
