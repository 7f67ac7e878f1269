"""
SQLiteRepository: aiosql 기반 저장소 구현

selectors / data는 JSON 문자열, 시간 값은 ISO-8601 문자열로 저장합니다.
각 메서드는 자체 트랜잭션(@transactional)에서 실행되며,
이미 열린 트랜잭션 안에서 호출되면 그 트랜잭션을 재사용합니다.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from aiosql.queries import Queries

from database import get_db, get_connection, transactional, transactional_readonly
from storage.base import Repository
from storage.exception import JobNotFoundError, ScheduleNotFoundError
from storage.model import Job, PageRecord, ScheduleEntry

logger = logging.getLogger(__name__)

SQL_PATH = Path(__file__).parent / "sql" / "storage.sql"


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


class SQLiteRepository(Repository):
    """SQLite 저장소"""

    def __init__(self):
        self._queries: Queries | None = None

    def _get_queries(self) -> Queries:
        if self._queries is None:
            db = get_db()
            self._queries = db.get_queries("storage")
            if self._queries is None:
                self._queries = db.load_queries("storage", str(SQL_PATH))
        return self._queries

    async def _last_insert_id(self, conn) -> int:
        row = await self._get_queries().last_insert_id(conn)
        return row["id"]

    # ============================================
    # row 변환
    # ============================================

    @staticmethod
    def _row_to_job(row) -> Job:
        data = dict(row)
        data["selectors"] = json.loads(data["selectors"] or "{}")
        return Job(**data)

    @staticmethod
    def _row_to_schedule(row) -> ScheduleEntry:
        data = dict(row)
        data["is_active"] = bool(data["is_active"])
        return ScheduleEntry(**data)

    @staticmethod
    def _row_to_record(row) -> PageRecord:
        data = dict(row)
        data["data"] = json.loads(data["data"] or "{}")
        return PageRecord(**data)

    @staticmethod
    def _job_params(job: Job) -> dict[str, Any]:
        return dict(
            name=job.name,
            url=job.url,
            method=job.method.value,
            selectors=json.dumps(job.selectors, ensure_ascii=False),
            delay=job.delay,
            max_pages=job.max_pages,
            concurrent_requests=job.concurrent_requests,
            status=job.status.value,
            last_run=_iso(job.last_run),
        )

    @staticmethod
    def _schedule_params(entry: ScheduleEntry) -> dict[str, Any]:
        return dict(
            job_id=entry.job_id,
            name=entry.name,
            frequency=entry.frequency,
            cron_expression=entry.cron_expression,
            next_run=_iso(entry.next_run),
            is_active=int(entry.is_active),
        )

    # ============================================
    # Job
    # ============================================

    @transactional_readonly
    async def get_job(self, job_id: int) -> Job | None:
        conn = get_connection().connection
        row = await self._get_queries().get_job_by_id(conn, job_id=job_id)
        return self._row_to_job(row) if row else None

    @transactional_readonly
    async def list_jobs(self) -> list[Job]:
        conn = get_connection().connection
        rows = await self._get_queries().get_all_jobs(conn)
        return [self._row_to_job(row) for row in rows]

    @transactional
    async def create_job(self, job: Job) -> Job:
        queries = self._get_queries()
        conn = get_connection().connection

        await queries.insert_job(conn, created_at=_iso(job.created_at), **self._job_params(job))
        job_id = await self._last_insert_id(conn)
        logger.info(f"Created job: id={job_id}, name={job.name}")
        return job.model_copy(update={"id": job_id})

    @transactional
    async def update_job(self, job_id: int, **changes: Any) -> Job:
        queries = self._get_queries()
        conn = get_connection().connection

        row = await queries.get_job_by_id(conn, job_id=job_id)
        if not row:
            raise JobNotFoundError(job_id)

        # 부분 업데이트: 기존 값에 변경분을 덮어쓴 뒤 재검증
        merged = self._row_to_job(row).model_dump()
        merged.update(changes)
        job = Job.model_validate(merged)

        await queries.update_job(conn, job_id=job_id, **self._job_params(job))
        logger.debug(f"Updated job: id={job_id}, fields={list(changes)}")
        return job

    @transactional
    async def delete_job(self, job_id: int) -> None:
        await self._get_queries().delete_job(get_connection().connection, job_id=job_id)
        logger.info(f"Deleted job: id={job_id}")

    # ============================================
    # ScheduleEntry
    # ============================================

    @transactional_readonly
    async def get_schedule(self, schedule_id: int) -> ScheduleEntry | None:
        conn = get_connection().connection
        row = await self._get_queries().get_schedule_by_id(conn, schedule_id=schedule_id)
        return self._row_to_schedule(row) if row else None

    @transactional_readonly
    async def list_schedules(self, is_active: bool | None = None) -> list[ScheduleEntry]:
        queries = self._get_queries()
        conn = get_connection().connection

        if is_active is None:
            rows = await queries.get_all_schedules(conn)
        else:
            rows = await queries.get_schedules_by_active(conn, is_active=int(is_active))
        return [self._row_to_schedule(row) for row in rows]

    @transactional
    async def create_schedule(self, entry: ScheduleEntry) -> ScheduleEntry:
        queries = self._get_queries()
        conn = get_connection().connection

        await queries.insert_schedule(
            conn, created_at=_iso(entry.created_at), **self._schedule_params(entry)
        )
        schedule_id = await self._last_insert_id(conn)
        logger.info(f"Created schedule: id={schedule_id}, name={entry.name}")
        return entry.model_copy(update={"id": schedule_id})

    @transactional
    async def update_schedule(self, schedule_id: int, **changes: Any) -> ScheduleEntry:
        queries = self._get_queries()
        conn = get_connection().connection

        row = await queries.get_schedule_by_id(conn, schedule_id=schedule_id)
        if not row:
            raise ScheduleNotFoundError(schedule_id)

        merged = self._row_to_schedule(row).model_dump()
        merged.update(changes)
        entry = ScheduleEntry.model_validate(merged)

        await queries.update_schedule(conn, schedule_id=schedule_id, **self._schedule_params(entry))
        logger.debug(f"Updated schedule: id={schedule_id}, fields={list(changes)}")
        return entry

    @transactional
    async def delete_schedule(self, schedule_id: int) -> None:
        await self._get_queries().delete_schedule(get_connection().connection, schedule_id=schedule_id)
        logger.info(f"Deleted schedule: id={schedule_id}")

    # ============================================
    # PageRecord
    # ============================================

    @transactional
    async def create_page_record(self, record: PageRecord) -> PageRecord:
        queries = self._get_queries()
        conn = get_connection().connection

        await queries.insert_page_record(
            conn,
            job_id=record.job_id,
            url=record.url,
            data=json.dumps(record.data, ensure_ascii=False),
            scraped_at=_iso(record.scraped_at),
        )
        record_id = await self._last_insert_id(conn)
        return record.model_copy(update={"id": record_id})

    @transactional_readonly
    async def list_page_records(
        self,
        job_id: int | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[PageRecord]:
        queries = self._get_queries()
        conn = get_connection().connection

        if job_id is None:
            rows = await queries.get_page_records_paged(conn, limit=limit, offset=offset)
        else:
            rows = await queries.get_page_records_by_job(conn, job_id=job_id, limit=limit, offset=offset)
        return [self._row_to_record(row) for row in rows]

    @transactional_readonly
    async def count_page_records(self, job_id: int | None = None) -> int:
        queries = self._get_queries()
        conn = get_connection().connection

        if job_id is None:
            row = await queries.count_page_records(conn)
        else:
            row = await queries.count_page_records_by_job(conn, job_id=job_id)
        return row["cnt"] if row else 0
