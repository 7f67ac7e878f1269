"""Scheduler 모듈 - 크론 기반 스크래퍼 잡 스케줄링"""

from scheduler.exception import SchedulerError, InvalidRecurrenceError
from scheduler.main import ScheduleManager
from scheduler.model.scheduler import SchedulerConfig
from scheduler.recurrence import (
    FREQUENCY_EXPRESSIONS,
    next_fire_time,
    resolve_expression,
    validate_expression,
)
from scheduler.timer import CronTimer, TimerTable

__all__ = [
    "SchedulerError",
    "InvalidRecurrenceError",
    "ScheduleManager",
    "SchedulerConfig",
    "FREQUENCY_EXPRESSIONS",
    "next_fire_time",
    "resolve_expression",
    "validate_expression",
    "CronTimer",
    "TimerTable",
]
