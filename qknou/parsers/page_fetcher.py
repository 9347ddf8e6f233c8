import time
from typing import Optional

import httpx
import structlog
from bs4 import BeautifulSoup

from ..config import get_settings
from ..exceptions import NetworkError, ParsingError
from ..utils.url_utils import validate_url


logger = structlog.get_logger(__name__)


class PageFetcher:
    """Downloads archive pages. Transport failures and non-2xx answers raise NetworkError."""

    def __init__(self, timeout_seconds: Optional[float] = None, user_agent: Optional[str] = None):
        settings = get_settings()
        self.timeout_seconds = timeout_seconds or settings.crawl_request_timeout_seconds
        self.user_agent = user_agent or settings.crawl_user_agent

    async def fetch_html(self, url: str) -> str:
        validate_url(url)
        start_time = time.time()

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds,
                headers={"User-Agent": self.user_agent},
                follow_redirects=True,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.TimeoutException:
            raise NetworkError(f"Request timed out: {url}")
        except httpx.HTTPStatusError as e:
            raise NetworkError(f"HTTP {e.response.status_code}: {url}")
        except httpx.HTTPError as e:
            raise NetworkError(f"Request failed: {url} ({e})")

        html = response.text
        if not html or not html.strip():
            raise ParsingError(f"Empty page body: {url}")

        logger.debug(
            "page_fetched",
            url=url,
            status_code=response.status_code,
            content_length=len(html),
            fetch_time=round(time.time() - start_time, 2),
        )
        return html

    async def fetch_document(self, url: str) -> BeautifulSoup:
        html = await self.fetch_html(url)
        return parse_html(html)


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")
