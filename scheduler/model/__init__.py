"""Scheduler 모델"""

from scheduler.model.scheduler import SchedulerConfig

__all__ = ["SchedulerConfig"]
