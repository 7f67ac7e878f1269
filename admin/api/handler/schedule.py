"""스케줄 비즈니스 로직 핸들러"""

import logging

from admin.api.model.schedule import ScheduleCreateRequest, ScheduleUpdateRequest
from scheduler.main import ScheduleManager
from scheduler.recurrence import next_fire_time
from storage.base import Repository
from storage.exception import JobNotFoundError, ScheduleNotFoundError
from storage.model import ScheduleEntry

logger = logging.getLogger(__name__)


class ScheduleHandler:
    """
    스케줄 핸들러

    저장소 변경과 타이머 등록을 함께 처리합니다.
    생성/수정 시 주기를 먼저 검증하므로 잘못된 주기는 저장되지 않습니다.
    """

    def __init__(self, repository: Repository, manager: ScheduleManager):
        self._repository = repository
        self._manager = manager

    async def get_list(self, is_active: bool | None = None) -> list[ScheduleEntry]:
        return await self._repository.list_schedules(is_active=is_active)

    async def get_by_id(self, schedule_id: int) -> ScheduleEntry:
        entry = await self._repository.get_schedule(schedule_id)
        if entry is None:
            raise ScheduleNotFoundError(schedule_id)
        return entry

    async def _check_job(self, job_id: int | None) -> None:
        if job_id is not None and await self._repository.get_job(job_id) is None:
            raise JobNotFoundError(job_id)

    async def create(self, request: ScheduleCreateRequest) -> ScheduleEntry:
        """
        스케줄 생성 후 타이머 등록

        Raises:
            InvalidRecurrenceError: 주기/크론 표현식 오류
            JobNotFoundError: 연결할 잡이 없는 경우
        """
        entry = ScheduleEntry(**request.model_dump())
        entry.next_run = next_fire_time(entry, self._manager.now())
        await self._check_job(entry.job_id)

        created = await self._repository.create_schedule(entry)
        self._manager.register(created)
        return created

    async def update(self, schedule_id: int, request: ScheduleUpdateRequest) -> ScheduleEntry:
        """지정한 필드만 수정 후 타이머 재등록 (다음 실행 시각 재계산)"""
        current = await self.get_by_id(schedule_id)
        changes = request.model_dump(exclude_unset=True)

        draft = ScheduleEntry.model_validate({**current.model_dump(), **changes})
        changes["next_run"] = next_fire_time(draft, self._manager.now())
        if "job_id" in changes:
            await self._check_job(draft.job_id)

        await self._repository.update_schedule(schedule_id, **changes)
        # 저장 후 다시 읽은 상태로 등록 (동시에 들어온 pause 반영)
        return await self._manager.reregister(schedule_id)

    async def delete(self, schedule_id: int) -> None:
        await self.get_by_id(schedule_id)
        await self._manager.remove(schedule_id)

    async def pause(self, schedule_id: int) -> ScheduleEntry:
        await self.get_by_id(schedule_id)
        await self._manager.pause(schedule_id)
        return await self.get_by_id(schedule_id)

    async def resume(self, schedule_id: int) -> ScheduleEntry:
        return await self._manager.resume(schedule_id)
