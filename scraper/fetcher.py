"""
페이지 수집 파이프라인

BrowserFetcher: Playwright 헤드리스 브라우저로 렌더링된 HTML 수집
HttpFetcher: httpx로 원본 HTML 수집
FetchPipeline: 브라우저 방식을 먼저 시도하고, 실패하면 HTTP 방식으로 폴백
"""

import asyncio
import logging
from abc import ABC, abstractmethod

import httpx
from playwright.async_api import Browser, Playwright, async_playwright

from scraper.exception import FetchError
from scraper.model.fetch import FetchConfig, FetchOutcome
from storage.model import FetchMethod, Job

logger = logging.getLogger(__name__)


class BaseFetcher(ABC):
    """수집 방식 기본 클래스"""

    name: str = "base"

    @abstractmethod
    async def fetch(self, url: str, job: Job) -> str:
        """
        url의 HTML 반환

        Raises:
            Exception: 수집 실패 시 (원인 예외 그대로)
        """

    async def close(self) -> None:
        pass


class BrowserFetcher(BaseFetcher):
    """
    헤드리스 브라우저 수집

    브라우저는 첫 호출 시 한 번만 띄우고 이후 호출에서 재사용합니다.
    페이지는 호출마다 새로 열고, 성공/실패와 관계없이 반드시 닫습니다.
    """

    name = "browser"

    def __init__(self, config: FetchConfig | None = None):
        self._config = config or FetchConfig()
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._lock = asyncio.Lock()

    async def _get_browser(self) -> Browser:
        if self._browser is not None and self._browser.is_connected():
            return self._browser

        async with self._lock:
            # 대기하는 동안 다른 호출이 이미 띄웠을 수 있음
            if self._browser is None or not self._browser.is_connected():
                self._browser = await self._launch()
        return self._browser

    async def _launch(self) -> Browser:
        if self._playwright is None:
            self._playwright = await async_playwright().start()
        browser = await self._playwright.chromium.launch(
            headless=self._config.headless,
            args=self._config.browser_args,
        )
        logger.info("Headless browser launched")
        return browser

    async def fetch(self, url: str, job: Job) -> str:
        browser = await self._get_browser()
        page = await browser.new_page(user_agent=self._config.user_agent)
        try:
            await page.goto(url, wait_until="networkidle", timeout=self._config.navigation_timeout_ms)
            # 동적 콘텐츠 로딩 대기
            if job.delay > 0:
                await page.wait_for_timeout(job.delay * 1000)
            return await page.content()
        finally:
            await page.close()

    async def close(self) -> None:
        async with self._lock:
            if self._browser is not None:
                try:
                    await self._browser.close()
                finally:
                    self._browser = None
            if self._playwright is not None:
                try:
                    await self._playwright.stop()
                finally:
                    self._playwright = None
        logger.info("Headless browser closed")


class HttpFetcher(BaseFetcher):
    """단순 HTTP 수집 (스크립트 실행 없음)"""

    name = "http"

    def __init__(self, config: FetchConfig | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self._config = config or FetchConfig()
        self._transport = transport

    async def fetch(self, url: str, job: Job) -> str:
        headers = {
            "User-Agent": self._config.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
        }
        async with httpx.AsyncClient(
            headers=headers,
            timeout=self._config.request_timeout_seconds,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            response = await client.get(url)

        if not response.is_success:
            raise FetchError(url, message=f"HTTP {response.status_code} for {url}")
        return response.text


class FetchPipeline:
    """
    수집 파이프라인

    job.method가 browser면 [browser, http] 순서로, http면 [http]만 시도합니다.
    모든 방식이 실패하면 방식별 원인을 담은 FetchError를 발생시킵니다.
    """

    def __init__(
        self,
        config: FetchConfig | None = None,
        *,
        browser: BaseFetcher | None = None,
        http: BaseFetcher | None = None,
    ):
        config = config or FetchConfig()
        self._browser = browser or BrowserFetcher(config)
        self._http = http or HttpFetcher(config)

    def variants_for(self, job: Job) -> list[BaseFetcher]:
        if job.method == FetchMethod.HTTP:
            return [self._http]
        return [self._browser, self._http]

    async def attempt(self, job: Job, url: str) -> FetchOutcome:
        """방식별로 순서대로 시도하고 결과 반환 (예외를 던지지 않음)"""
        outcome = FetchOutcome(url=url)

        for fetcher in self.variants_for(job):
            try:
                outcome.markup = await fetcher.fetch(url, job)
            except Exception as e:
                outcome.causes[fetcher.name] = e
                logger.warning(f"{fetcher.name} fetch failed for {url}: {e}")
                continue

            outcome.fetcher = fetcher.name
            if outcome.causes:
                logger.info(f"Fetched {url} via {fetcher.name} fallback")
            return outcome

        return outcome

    async def fetch(self, job: Job, url: str) -> str:
        """
        url의 HTML 반환

        Raises:
            FetchError: 모든 방식이 실패한 경우
        """
        outcome = await self.attempt(job, url)
        if not outcome.ok:
            raise FetchError(url, outcome.causes)
        return outcome.markup

    async def close(self) -> None:
        for fetcher in (self._browser, self._http):
            try:
                await fetcher.close()
            except Exception as e:
                logger.error(f"Error closing {fetcher.name} fetcher: {e}")
