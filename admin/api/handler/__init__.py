"""Admin API 핸들러 패키지"""

from admin.api.handler.job import JobHandler
from admin.api.handler.schedule import ScheduleHandler

__all__ = ['JobHandler', 'ScheduleHandler']
