import pytest
from unittest.mock import MagicMock, AsyncMock

from qknou.parsers.page_fetcher import parse_html


PRIMARY_EXAM_HTML = """
<html><body>
<table class="alla6TitleTbl"><tbody>
  <tr><td>2023학년도 2학기 기말시험 3학년 2문항</td></tr>
  <tr><td>컴퓨터의이해</td></tr>
  <tr><td>시험종류 : 기말시험</td></tr>
</tbody></table>

<table class="alla6BasicTbl">
  <tr class="alla6QuestionTr"><td><span class="alla6QuestionNo">1</span> 다음 중 입력장치는?</td></tr>
  <tr class="alla6ExampleTr_Txt"><td><p class="allaExampleList_p">가. 키보드</p></td></tr>
  <tr class="alla6AnswerTr"><td><input type="radio" value="1"><label>키보드</label></td></tr>
  <tr class="alla6AnswerTr"><td><input type="radio" value="2"><label>모니터</label></td></tr>
  <tr class="alla6AnswerTr"><td><input type="radio" value="3"><label>프린터</label></td></tr>
  <tr class="alla6AnswerTr"><td><input type="radio" value="4"><label>스피커</label></td></tr>
  <tr class="alla6AnswerTr"><td><input type="radio" value="5"><label>모르겠음</label></td></tr>
</table>

<table class="alla6BasicTbl">
  <tr class="alla6QuestionTr"><td><span class="alla6QuestionNo">2</span> 그림의 회로는?<img src="https://img.example.com/q2.png"></td></tr>
  <tr class="alla6AnswerTr"><td><input type="radio" value="1"><label>AND</label></td></tr>
  <tr class="alla6AnswerTr"><td><input type="radio" value="2"><label>OR</label></td></tr>
  <tr class="alla6AnswerTr"><td><input type="radio" value="3"><label><img src="https://img.example.com/c3.png">XOR</label></td></tr>
  <tr class="alla6AnswerTr"><td><input type="radio" value="4"><label>NAND</label></td></tr>
</table>

<div class="allaAnswerTableDiv"><table>
  <tr><th>No</th><th>정답</th></tr>
  <tr><td>1</td><td>A</td></tr>
  <tr><td>2</td><td>3</td></tr>
</table></div>
</body></html>
"""


SECONDARY_EXAM_HTML = """
<html><body>
<table class="allaTitleTbl"><tbody>
  <tr><td>2022학년도 1학기 기말시험 2학년 3문항</td></tr>
  <tr><td>자료구조</td></tr>
  <tr><td>기말시험</td></tr>
</tbody></table>

<table class="allaBasicTbl">
  <tr class="allaQuestionTr"><td><span class="allaQuestionNo">5</span> 스택의 특징은?</td></tr>
  <tr class="allaAnswerTr"><td><input type="radio" value="1"><label>LIFO</label></td></tr>
  <tr class="allaAnswerTr"><td><input type="radio" value="2"><label>FIFO</label></td></tr>
</table>
<table class="allaBasicTbl">
  <tr class="allaQuestionTr"><td><span class="allaQuestionNo">6</span> 큐의 특징은?</td></tr>
  <tr class="allaAnswerTr"><td><input type="radio" value="1"><label>LIFO</label></td></tr>
  <tr class="allaAnswerTr"><td><input type="radio" value="2"><label>FIFO</label></td></tr>
</table>
<table class="allaBasicTbl">
  <tr class="allaQuestionTr"><td><span class="allaQuestionNo">7</span> 트리의 루트 수는?</td></tr>
  <tr class="allaAnswerTr"><td><input type="radio" value="1"><label>1개</label></td></tr>
  <tr class="allaAnswerTr"><td><input type="radio" value="2"><label>2개</label></td></tr>
</table>

<table><tbody>
  <tr><td>문제답안</td></tr>
  <tr><td>12X</td></tr>
</tbody></table>
</body></html>
"""


SUBJECT_INDEX_HTML = """
<html><body>
<ul id="allaGmObjectList">
  <li><a href="https://allaclass.tistory.com/category/ga">가</a></li>
  <li><a href="https://allaclass.tistory.com/100">컴퓨터의이해</a></li>
  <li><a href="/200">자료구조</a></li>
  <li><a href="https://allaclass.tistory.com/category/etc">기타</a></li>
  <li><a>링크없음</a></li>
</ul>
</body></html>
"""


SUBJECT_PAGE_HTML = """
<html><body>
<article id="content"><div class="inner">
  <div class="post-item"><a href="/855">2023 기말</a></div>
  <div class="post-item"><a href="https://allaclass.tistory.com/856">2022 기말</a></div>
  <div class="post-item"><a>no link</a></div>
</div></article>
</body></html>
"""


@pytest.fixture
def primary_exam_html():
    return PRIMARY_EXAM_HTML


@pytest.fixture
def secondary_exam_html():
    return SECONDARY_EXAM_HTML


@pytest.fixture
def primary_soup():
    return parse_html(PRIMARY_EXAM_HTML)


@pytest.fixture
def secondary_soup():
    return parse_html(SECONDARY_EXAM_HTML)


@pytest.fixture
def mock_fetcher():
    """PageFetcher stand-in serving HTML from a url -> html dict set by the test"""
    pages = {}

    async def fetch_html(url):
        if url not in pages:
            from qknou.exceptions import NetworkError
            raise NetworkError(f"HTTP 404: {url}")
        return pages[url]

    async def fetch_document(url):
        return parse_html(await fetch_html(url))

    fetcher = MagicMock()
    fetcher.pages = pages
    fetcher.fetch_html = AsyncMock(side_effect=fetch_html)
    fetcher.fetch_document = AsyncMock(side_effect=fetch_document)
    return fetcher


@pytest.fixture
def test_db():
    from sqlalchemy import create_engine
    from sqlalchemy.orm import sessionmaker
    from sqlalchemy.pool import StaticPool
    from qknou.core.database import Base, configure_sqlite
    from qknou import models  # noqa: F401

    # Use in-memory SQLite for tests
    SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
    engine = configure_sqlite(create_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    ))
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def mock_current_user(test_db):
    from qknou.models.user import User
    user = User(
        user_id="test_user_id",
        provider_uid="test_provider_uid",
        provider="google",
        email="test@example.com",
        full_name="Test User"
    )
    test_db.add(user)
    test_db.commit()
    test_db.refresh(user)
    return user


@pytest.fixture
async def async_client(test_db, mock_current_user):
    from httpx import AsyncClient, ASGITransport
    from qknou.main import app
    from qknou.core.database import get_db
    from qknou.api.dependencies import get_current_user_conditional

    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user_conditional] = lambda: mock_current_user

    # Use ASGITransport for direct app interaction
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def subject_index_html():
    return SUBJECT_INDEX_HTML


@pytest.fixture
def subject_page_html():
    return SUBJECT_PAGE_HTML
