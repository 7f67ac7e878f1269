"""
JobRunner: 스크래퍼 잡 실행 모듈

잡 하나를 처음부터 끝까지 실행합니다.
1. 잡 조회 (없으면 JobNotFoundError)
2. 상태 running, last_run 기록
3. 대상 URL 목록 생성 (max_pages로 제한)
4. URL마다 수집 -> 추출 -> PageRecord 저장 (페이지 실패는 로그만 남기고 계속)
5. 상태 completed
URL 루프 밖에서 실패하면 상태를 failed로 바꾸고 예외를 그대로 전달합니다.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Awaitable, Callable, Mapping

from pydantic import ValidationError

from scraper.exception import JobValidationError
from scraper.extractor import extract
from scraper.fetcher import FetchPipeline
from scraper.model.run import RunSummary
from storage.base import Repository
from storage.exception import JobNotFoundError
from storage.model import FetchMethod, FieldValue, Job, JobStatus, PageRecord, utcnow

logger = logging.getLogger(__name__)

PAGE_PLACEHOLDER = "{page}"

# 테스트 실행 기본값
TEST_DEFAULT_DELAY = 2


def enumerate_urls(job: Job) -> list[str]:
    """
    잡의 수집 대상 URL 목록

    URL에 {page}가 있으면 1..max_pages 페이지로 펼치고, 없으면 URL 하나만 반환합니다.
    """
    if PAGE_PLACEHOLDER in job.url:
        return [job.url.replace(PAGE_PLACEHOLDER, str(page)) for page in range(1, job.max_pages + 1)]
    return [job.url][:job.max_pages]


class JobRunner:
    """스크래퍼 잡 실행기"""

    def __init__(
        self,
        repository: Repository,
        pipeline: FetchPipeline,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._repository = repository
        self._pipeline = pipeline
        self._sleep = sleep
        self._clock = clock

    async def run(self, job_id: int) -> RunSummary:
        """
        잡 실행

        Returns:
            RunSummary: 저장 건수와 실패 URL 목록

        Raises:
            JobNotFoundError: 잡이 없는 경우
            Exception: 페이지 루프 밖에서 발생한 오류 (상태는 failed로 기록됨)
        """
        job = await self._repository.get_job(job_id)
        if job is None:
            raise JobNotFoundError(job_id)

        logger.info(f"Starting job run: id={job_id}, name={job.name}", extra={"job_id": job_id})

        try:
            await self._repository.update_job(job_id, status=JobStatus.RUNNING, last_run=self._clock())

            summary = RunSummary(job_id=job_id, urls=enumerate_urls(job))
            last_index = len(summary.urls) - 1

            # 페이지는 순차 처리 (delay 간격 유지)
            for index, url in enumerate(summary.urls):
                try:
                    await self._scrape_page(job, url)
                    summary.saved += 1
                except Exception as e:
                    summary.failed_urls.append(url)
                    logger.warning(f"Skipping page {url} (job_id={job_id}): {e}", exc_info=True, extra={"job_id": job_id})

                if index < last_index and job.delay > 0:
                    await self._sleep(job.delay)

            await self._repository.update_job(job_id, status=JobStatus.COMPLETED)

        except Exception as e:
            logger.error(f"Job run failed: id={job_id}, error={e}", exc_info=True, extra={"job_id": job_id})
            try:
                await self._repository.update_job(job_id, status=JobStatus.FAILED)
            except Exception as status_error:
                logger.error(f"Failed to record failed status for job {job_id}: {status_error}")
            raise

        logger.info(
            f"Job run completed: id={job_id}, saved={summary.saved}, failed={summary.failed}"
        )
        return summary

    async def _scrape_page(self, job: Job, url: str) -> PageRecord:
        markup = await self._pipeline.fetch(job, url)
        result = extract(markup, job.selectors)
        for field_name, error in result.errors.items():
            logger.warning(f"Field '{field_name}' skipped on {url}: {error}")

        record = PageRecord(job_id=job.id, url=url, data=result.fields, scraped_at=self._clock())
        saved = await self._repository.create_page_record(record)
        logger.debug(f"Saved page record: job_id={job.id}, url={url}, fields={len(result.fields)}")
        return saved

    async def test_run(self, draft: Mapping[str, Any]) -> dict[str, FieldValue]:
        """
        저장하지 않는 임시 잡으로 1페이지 수집/추출 결과 반환 (설정 확인용)

        Args:
            draft: url, selectors 필수 / method, delay 선택

        Raises:
            JobValidationError: url 또는 selectors가 없거나 잘못된 경우 (수집하지 않음, 빈 selectors는 허용)
            FetchError: 수집 실패
        """
        url = draft.get("url")
        selectors = draft.get("selectors")
        if not url or selectors is None:
            raise JobValidationError("URL and selectors are required for testing")

        delay = draft.get("delay")
        try:
            job = Job(
                name="Test",
                url=url,
                method=draft.get("method") or FetchMethod.BROWSER,
                selectors=selectors,
                delay=TEST_DEFAULT_DELAY if delay is None else delay,
                max_pages=1,
                status=JobStatus.TESTING,
            )
        except ValidationError as e:
            raise JobValidationError(f"Invalid test configuration: {e}") from e

        markup = await self._pipeline.fetch(job, url)
        result = extract(markup, job.selectors)
        for field_name, error in result.errors.items():
            logger.warning(f"Test run field '{field_name}' skipped: {error}")
        return result.fields
