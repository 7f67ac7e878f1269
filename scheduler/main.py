"""
ScheduleManager: 스케줄 타이머 관리 모듈

활성 스케줄마다 크론 타이머를 하나씩 등록하고, 타이머가 울리면
JobRunner로 스크래퍼 잡을 실행한 뒤 다음 실행 시각을 저장합니다.
타이머는 프로세스 메모리에만 존재하며, 시작 시 저장된 활성 스케줄로부터 다시 만들어집니다.
"""

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable

from scheduler.exception import InvalidRecurrenceError
from scheduler.model.scheduler import SchedulerConfig
from scheduler.recurrence import next_fire_time, resolve_expression
from scheduler.timer import CronTimer, TimerTable
from scraper.runner import JobRunner
from storage.base import Repository
from storage.exception import NotFoundError, ScheduleNotFoundError
from storage.model import ScheduleEntry

logger = logging.getLogger(__name__)


class ScheduleManager:
    """
    스케줄 매니저

    상태 전이 (스케줄 ID 기준):
        미등록 --register--> 타이머 동작 --pause/stop--> 미등록
        타이머 동작 --fire--> 타이머 동작 (next_run 갱신)

    타이머 테이블의 키는 항상 활성 스케줄 ID의 부분집합이며,
    ID당 타이머는 최대 하나입니다.
    """

    def __init__(
        self,
        repository: Repository,
        runner: JobRunner,
        config: SchedulerConfig | None = None,
        timers: TimerTable | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._repository = repository
        self._runner = runner
        self._config = config or SchedulerConfig()
        self._timers = timers if timers is not None else TimerTable()
        self._clock = clock or (lambda: datetime.now(self._config.tzinfo))
        self._sleep = sleep
        self._inflight: set[asyncio.Task] = set()
        self._locks: dict[int, asyncio.Lock] = {}

    @property
    def timers(self) -> TimerTable:
        return self._timers

    @property
    def inflight_count(self) -> int:
        return len(self._inflight)

    def is_registered(self, schedule_id: int) -> bool:
        return schedule_id in self._timers

    def now(self) -> datetime:
        """스케줄러 타임존 기준 현재 시각"""
        return self._clock()

    async def initialize(self) -> int:
        """
        저장된 활성 스케줄 전체 등록

        개별 스케줄 등록 실패는 로그만 남기고 나머지는 계속 등록합니다.

        Returns:
            등록된 타이머 수
        """
        entries = await self._repository.list_schedules(is_active=True)
        registered = 0

        for entry in entries:
            try:
                self.register(entry)
                registered += 1
            except InvalidRecurrenceError as e:
                logger.error(f"Skipping schedule '{entry.name}' (id={entry.id}): {e}")
            except Exception as e:
                logger.error(f"Failed to register schedule '{entry.name}' (id={entry.id}): {e}", exc_info=True)

        logger.info(f"ScheduleManager initialized: {registered}/{len(entries)} schedules registered")
        return registered

    def register(self, entry: ScheduleEntry) -> CronTimer | None:
        """
        스케줄 타이머 등록 (재등록 시 기존 타이머 교체)

        Raises:
            InvalidRecurrenceError: 주기/크론 표현식이 잘못된 경우 (기존 타이머는 유지)
        """
        if entry.id is None:
            raise ValueError("Cannot register a schedule without id")

        expression = resolve_expression(entry)

        if not entry.is_active:
            # 비활성 스케줄은 타이머를 가질 수 없음
            self.stop(entry.id)
            logger.info(f"Schedule '{entry.name}' (id={entry.id}) is inactive, timer not installed")
            return None

        timer = CronTimer(
            entry.id,
            expression,
            lambda: self._spawn_fire(entry),
            clock=self._clock,
            sleep=self._sleep,
        )
        previous = self._timers.install(timer)

        logger.info(
            f"{'Rescheduled' if previous else 'Scheduled'} task '{entry.name}' "
            f"(id={entry.id}, cron='{expression}')"
        )
        return timer

    def stop(self, schedule_id: int) -> bool:
        """타이머 중지 (없으면 아무것도 하지 않음)"""
        stopped = self._timers.discard(schedule_id)
        if stopped:
            logger.info(f"Stopped timer: schedule_id={schedule_id}")
        return stopped

    def _lock(self, schedule_id: int) -> asyncio.Lock:
        # 같은 스케줄에 대한 저장 후 등록/중지 순서를 직렬화
        lock = self._locks.get(schedule_id)
        if lock is None:
            lock = self._locks[schedule_id] = asyncio.Lock()
        return lock

    async def pause(self, schedule_id: int) -> None:
        """is_active=False 저장 후 타이머 중지"""
        async with self._lock(schedule_id):
            try:
                await self._repository.update_schedule(schedule_id, is_active=False)
            finally:
                self.stop(schedule_id)
        logger.info(f"Paused schedule: id={schedule_id}")

    async def resume(self, schedule_id: int) -> ScheduleEntry:
        """
        is_active=True 저장 후 다시 읽어서 타이머 등록

        Raises:
            ScheduleNotFoundError: 스케줄이 존재하지 않는 경우
        """
        async with self._lock(schedule_id):
            await self._repository.update_schedule(schedule_id, is_active=True)
            entry = await self._load(schedule_id)
            self.register(entry)
        logger.info(f"Resumed schedule: id={schedule_id}")
        return entry

    async def reregister(self, schedule_id: int) -> ScheduleEntry:
        """
        저장된 최신 상태로 타이머 재등록 (수정 직후 호출)

        Raises:
            ScheduleNotFoundError: 스케줄이 존재하지 않는 경우
            InvalidRecurrenceError: 저장된 주기가 잘못된 경우
        """
        async with self._lock(schedule_id):
            entry = await self._load(schedule_id)
            self.register(entry)
        return entry

    async def remove(self, schedule_id: int) -> None:
        """타이머 중지 후 스케줄 삭제"""
        async with self._lock(schedule_id):
            self.stop(schedule_id)
            await self._repository.delete_schedule(schedule_id)

    async def _load(self, schedule_id: int) -> ScheduleEntry:
        entry = await self._repository.get_schedule(schedule_id)
        if entry is None:
            raise ScheduleNotFoundError(schedule_id)
        return entry

    def _spawn_fire(self, entry: ScheduleEntry) -> None:
        """타이머 콜백: 잡 실행을 별도 태스크로 시작"""
        task = asyncio.create_task(self.fire(entry), name=f"schedule-fire-{entry.id}")
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def fire(self, entry: ScheduleEntry) -> None:
        """
        스케줄 1회 실행

        잡 실행 실패는 로그만 남기며 타이머에 영향을 주지 않습니다.
        실행 결과와 관계없이 다음 실행 시각을 계산해 저장합니다.
        """
        logger.info(
            f"Running scheduled task: {entry.name} (id={entry.id}, job_id={entry.job_id})",
            extra={"schedule_id": entry.id, "job_id": entry.job_id},
        )

        if entry.job_id is not None:
            try:
                await self._runner.run(entry.job_id)
            except Exception as e:
                logger.error(f"Error running scheduled task {entry.name}: {e}", exc_info=True)

        try:
            next_run = next_fire_time(entry, self._clock())
            await self._repository.update_schedule(entry.id, next_run=next_run)
            logger.debug(f"Schedule {entry.id} next_run={next_run.isoformat()}")
        except NotFoundError:
            logger.warning(f"Schedule {entry.id} no longer exists, stopping its timer")
            self.stop(entry.id)
        except Exception as e:
            logger.error(f"Failed to update next_run for schedule {entry.id}: {e}", exc_info=True)

    async def shutdown(self) -> None:
        """모든 타이머 중지 후 실행 중인 잡 완료 대기 (graceful shutdown)"""
        count = self._timers.cancel_all()
        logger.info(f"Stopped {count} timers")

        if not self._inflight:
            return

        logger.info(f"Waiting for {len(self._inflight)} running tasks...")
        try:
            await asyncio.wait_for(
                asyncio.gather(*self._inflight, return_exceptions=True),
                timeout=self._config.shutdown_timeout_seconds,
            )
            logger.info("All tasks completed")
        except asyncio.TimeoutError:
            logger.warning(
                f"Shutdown timeout ({self._config.shutdown_timeout_seconds}s), "
                f"{len(self._inflight)} tasks still running"
            )
            for task in list(self._inflight):
                task.cancel()
