"""
Repository: 스케줄러/러너가 사용하는 저장소 인터페이스
"""

from abc import ABC, abstractmethod
from typing import Any

from storage.model import Job, JobStatus, PageRecord, ScheduleEntry


class Repository(ABC):
    """
    잡, 스케줄, 수집 결과 저장소

    get_* 은 레코드가 없으면 None을 반환하고,
    update_* 는 JobNotFoundError / ScheduleNotFoundError를 발생시킵니다.
    """

    # Job
    @abstractmethod
    async def get_job(self, job_id: int) -> Job | None: ...

    @abstractmethod
    async def list_jobs(self) -> list[Job]: ...

    @abstractmethod
    async def create_job(self, job: Job) -> Job: ...

    @abstractmethod
    async def update_job(self, job_id: int, **changes: Any) -> Job: ...

    @abstractmethod
    async def delete_job(self, job_id: int) -> None: ...

    # ScheduleEntry
    @abstractmethod
    async def get_schedule(self, schedule_id: int) -> ScheduleEntry | None: ...

    @abstractmethod
    async def list_schedules(self, is_active: bool | None = None) -> list[ScheduleEntry]: ...

    @abstractmethod
    async def create_schedule(self, entry: ScheduleEntry) -> ScheduleEntry: ...

    @abstractmethod
    async def update_schedule(self, schedule_id: int, **changes: Any) -> ScheduleEntry: ...

    @abstractmethod
    async def delete_schedule(self, schedule_id: int) -> None: ...

    # PageRecord
    @abstractmethod
    async def create_page_record(self, record: PageRecord) -> PageRecord: ...

    @abstractmethod
    async def list_page_records(
        self,
        job_id: int | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[PageRecord]: ...

    @abstractmethod
    async def count_page_records(self, job_id: int | None = None) -> int: ...

    async def get_stats(self) -> dict[str, int]:
        """대시보드용 집계 (전체 수집 건수, 활성 잡 수)"""
        jobs = await self.list_jobs()
        return {
            "total_records": await self.count_page_records(),
            "active_jobs": sum(1 for job in jobs if job.status == JobStatus.ACTIVE),
        }
