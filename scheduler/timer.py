"""
크론 타이머

CronTimer: 크론 표현식에 맞춰 콜백을 반복 호출하는 asyncio 태스크 (스케줄당 하나)
TimerTable: 스케줄 ID -> CronTimer 매핑 (ScheduleManager가 소유)
"""

import asyncio
import logging
from datetime import datetime, timezone, tzinfo
from typing import Awaitable, Callable

from scheduler.recurrence import next_fire_time_for

logger = logging.getLogger(__name__)


class CronTimer:
    """
    크론 타이머

    다음 실행 시각까지 sleep한 뒤 on_fire를 호출하고 다시 대기합니다.
    on_fire는 동기 함수이며 실제 잡 실행은 호출 측에서 별도 태스크로 띄웁니다.
    cancel()은 이후 실행만 막고 이미 시작된 실행은 건드리지 않습니다.
    """

    def __init__(
        self,
        key: int,
        cron_expression: str,
        on_fire: Callable[[], None],
        *,
        tz: tzinfo = timezone.utc,
        clock: Callable[[], datetime] | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.key = key
        self.cron_expression = cron_expression
        self._on_fire = on_fire
        self._clock = clock or (lambda: datetime.now(tz))
        self._sleep = sleep
        self._task: asyncio.Task | None = None
        self._cancelled = False
        self._last_fire_at: datetime | None = None
        self._next_fire_at: datetime | None = None
        self.fire_count = 0

    def start(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._loop(), name=f"cron-timer-{self.key}")

    def cancel(self) -> None:
        self._cancelled = True
        if self._task is not None and not self._task.done():
            self._task.cancel()

    @property
    def active(self) -> bool:
        return self._task is not None and not self._cancelled and not self._task.done()

    @property
    def next_fire_at(self) -> datetime | None:
        return self._next_fire_at

    async def _loop(self) -> None:
        while not self._cancelled:
            now = self._clock()
            # sleep이 일찍 깨어나도 같은 시각에 두 번 실행하지 않도록 기준 시각 보정
            base = max(now, self._last_fire_at) if self._last_fire_at else now
            fire_at = next_fire_time_for(self.cron_expression, base)
            self._next_fire_at = fire_at

            await self._sleep(max(0.0, (fire_at - now).total_seconds()))
            if self._cancelled:
                break

            self._last_fire_at = fire_at
            self.fire_count += 1
            try:
                self._on_fire()
            except Exception as e:
                logger.error(f"Timer {self.key} fire callback error: {e}", exc_info=True)


class TimerTable:
    """
    스케줄 ID별 타이머 테이블

    install()은 기존 타이머 취소와 새 타이머 등록을 await 없이 처리하므로
    같은 ID에 두 개의 타이머가 동시에 살아있을 수 없습니다.
    """

    def __init__(self):
        self._timers: dict[int, CronTimer] = {}

    def install(self, timer: CronTimer) -> CronTimer | None:
        """타이머 등록 (기존 타이머가 있으면 취소 후 교체, 교체된 타이머 반환)"""
        previous = self._timers.pop(timer.key, None)
        if previous is not None:
            previous.cancel()
        self._timers[timer.key] = timer
        timer.start()
        return previous

    def discard(self, key: int) -> bool:
        """타이머 취소 및 제거 (없으면 False)"""
        timer = self._timers.pop(key, None)
        if timer is None:
            return False
        timer.cancel()
        return True

    def cancel_all(self) -> int:
        count = len(self._timers)
        for timer in self._timers.values():
            timer.cancel()
        self._timers.clear()
        return count

    def get(self, key: int) -> CronTimer | None:
        return self._timers.get(key)

    def keys(self) -> set[int]:
        return set(self._timers)

    def __contains__(self, key: int) -> bool:
        return key in self._timers

    def __len__(self) -> int:
        return len(self._timers)
