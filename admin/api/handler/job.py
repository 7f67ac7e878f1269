"""스크래퍼 잡 / 수집 결과 비즈니스 로직 핸들러"""

import logging

from admin.api.model.common import PageResponse
from admin.api.model.job import (
    JobCreateRequest,
    JobUpdateRequest,
    JobTestRequest,
    JobTestResponse,
    RunResponse,
)
from scraper.runner import JobRunner
from storage.base import Repository
from storage.exception import JobNotFoundError
from storage.model import Job, PageRecord

logger = logging.getLogger(__name__)


class JobHandler:
    """스크래퍼 잡 핸들러"""

    def __init__(self, repository: Repository, runner: JobRunner):
        self._repository = repository
        self._runner = runner

    async def get_list(self) -> list[Job]:
        return await self._repository.list_jobs()

    async def get_by_id(self, job_id: int) -> Job:
        job = await self._repository.get_job(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    async def create(self, request: JobCreateRequest) -> Job:
        job = await self._repository.create_job(Job(**request.model_dump()))
        logger.info(f"Job created via admin: id={job.id}, name={job.name}")
        return job

    async def update(self, job_id: int, request: JobUpdateRequest) -> Job:
        """지정한 필드만 수정 (없으면 JobNotFoundError)"""
        changes = request.model_dump(exclude_unset=True)
        return await self._repository.update_job(job_id, **changes)

    async def delete(self, job_id: int) -> None:
        await self.get_by_id(job_id)
        await self._repository.delete_job(job_id)

    async def test(self, request: JobTestRequest) -> JobTestResponse:
        """
        저장하지 않고 1페이지만 수집해서 추출 결과 반환

        Raises:
            JobValidationError: url/selectors 누락
            FetchError: 수집 실패
        """
        data = await self._runner.test_run(request.model_dump())
        return JobTestResponse(data=data)

    async def run(self, job_id: int) -> RunResponse:
        summary = await self._runner.run(job_id)
        return RunResponse(job_id=job_id, saved=summary.saved, failed_urls=summary.failed_urls)

    async def get_records(
        self,
        page: int = 1,
        size: int = 20,
        job_id: int | None = None,
    ) -> PageResponse[PageRecord]:
        """수집 결과 목록 (최신순)"""
        offset = (page - 1) * size
        items = await self._repository.list_page_records(job_id=job_id, limit=size, offset=offset)
        total = await self._repository.count_page_records(job_id=job_id)
        return PageResponse[PageRecord].create(items=items, total=total, page=page, size=size)

    async def get_stats(self) -> dict[str, int]:
        return await self._repository.get_stats()
