"""
공용 테스트 도구

MemoryRepository: 메모리 기반 Repository (스케줄러/러너/Admin 테스트용)
StubFetcher: URL별 HTML 또는 예외를 돌려주는 수집기
FakeSleep: 실제로 기다리지 않고 요청된 시간만 기록하는 sleep
"""

import asyncio
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

# 프로젝트 루트 경로 추가
sys.path.insert(0, str(Path(__file__).parent.parent))

from scraper.fetcher import BaseFetcher
from storage.base import Repository
from storage.exception import JobNotFoundError, ScheduleNotFoundError
from storage.model import Job, PageRecord, ScheduleEntry


class MemoryRepository(Repository):
    """메모리 저장소 (반환 값은 항상 복사본)"""

    def __init__(self):
        self.jobs: dict[int, Job] = {}
        self.schedules: dict[int, ScheduleEntry] = {}
        self.records: dict[int, PageRecord] = {}
        self._next_id = 0

    def _new_id(self) -> int:
        self._next_id += 1
        return self._next_id

    # Job
    async def get_job(self, job_id: int) -> Job | None:
        job = self.jobs.get(job_id)
        return job.model_copy(deep=True) if job else None

    async def list_jobs(self) -> list[Job]:
        return [job.model_copy(deep=True) for job in self.jobs.values()]

    async def create_job(self, job: Job) -> Job:
        created = job.model_copy(update={"id": self._new_id()}, deep=True)
        self.jobs[created.id] = created
        return created.model_copy(deep=True)

    async def update_job(self, job_id: int, **changes: Any) -> Job:
        if job_id not in self.jobs:
            raise JobNotFoundError(job_id)
        updated = Job.model_validate({**self.jobs[job_id].model_dump(), **changes})
        self.jobs[job_id] = updated
        return updated.model_copy(deep=True)

    async def delete_job(self, job_id: int) -> None:
        self.jobs.pop(job_id, None)
        for record_id in [rid for rid, r in self.records.items() if r.job_id == job_id]:
            del self.records[record_id]
        for entry in self.schedules.values():
            if entry.job_id == job_id:
                entry.job_id = None

    # ScheduleEntry
    async def get_schedule(self, schedule_id: int) -> ScheduleEntry | None:
        entry = self.schedules.get(schedule_id)
        return entry.model_copy(deep=True) if entry else None

    async def list_schedules(self, is_active: bool | None = None) -> list[ScheduleEntry]:
        return [
            entry.model_copy(deep=True)
            for entry in self.schedules.values()
            if is_active is None or entry.is_active == is_active
        ]

    async def create_schedule(self, entry: ScheduleEntry) -> ScheduleEntry:
        created = entry.model_copy(update={"id": self._new_id()}, deep=True)
        self.schedules[created.id] = created
        return created.model_copy(deep=True)

    async def update_schedule(self, schedule_id: int, **changes: Any) -> ScheduleEntry:
        if schedule_id not in self.schedules:
            raise ScheduleNotFoundError(schedule_id)
        updated = ScheduleEntry.model_validate({**self.schedules[schedule_id].model_dump(), **changes})
        self.schedules[schedule_id] = updated
        return updated.model_copy(deep=True)

    async def delete_schedule(self, schedule_id: int) -> None:
        self.schedules.pop(schedule_id, None)

    # PageRecord
    async def create_page_record(self, record: PageRecord) -> PageRecord:
        created = record.model_copy(update={"id": self._new_id()}, deep=True)
        self.records[created.id] = created
        return created.model_copy(deep=True)

    async def list_page_records(
        self,
        job_id: int | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[PageRecord]:
        records = [r for r in self.records.values() if job_id is None or r.job_id == job_id]
        records.sort(key=lambda r: (r.scraped_at, r.id), reverse=True)
        return [r.model_copy(deep=True) for r in records[offset:offset + limit]]

    async def count_page_records(self, job_id: int | None = None) -> int:
        return sum(1 for r in self.records.values() if job_id is None or r.job_id == job_id)


class StubFetcher(BaseFetcher):
    """
    테스트용 수집기

    pages에 있는 URL은 해당 HTML을, failures에 있는 URL은 예외를,
    그 외에는 default HTML을 반환합니다.
    """

    def __init__(
        self,
        name: str,
        pages: dict[str, str] | None = None,
        failures: dict[str, Exception] | None = None,
        default: str | None = "<html></html>",
        error: Exception | None = None,
    ):
        self.name = name
        self.pages = pages or {}
        self.failures = failures or {}
        self.default = default
        self.error = error
        self.calls: list[str] = []
        self.jobs: list[Job] = []
        self.closed = False

    async def fetch(self, url: str, job: Job) -> str:
        self.calls.append(url)
        self.jobs.append(job)
        if self.error is not None:
            raise self.error
        if url in self.failures:
            raise self.failures[url]
        if url in self.pages:
            return self.pages[url]
        if self.default is None:
            raise RuntimeError(f"{self.name} has no page for {url}")
        return self.default

    async def close(self) -> None:
        self.closed = True


class FakeSleep:
    """
    sleep 대체

    처음 immediate번 호출은 이벤트 루프에 한 번 양보한 뒤 바로 반환하고,
    그 이후 호출은 취소될 때까지 대기합니다.
    """

    def __init__(self, immediate: int | None = None):
        self.immediate = immediate
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        if self.immediate is not None and len(self.delays) > self.immediate:
            await asyncio.Event().wait()
        await asyncio.sleep(0)


class FixedClock:
    """고정 시각 (now 속성을 바꿔서 이동)"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


async def settle(rounds: int = 20) -> None:
    """대기 중인 태스크가 진행되도록 이벤트 루프에 여러 번 양보"""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def repository() -> MemoryRepository:
    return MemoryRepository()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc))
