"""Admin API 모델 패키지"""

from admin.api.model.common import (
    PageResponse,
    StatsResponse,
)
from admin.api.model.job import (
    JobCreateRequest,
    JobUpdateRequest,
    JobTestRequest,
    JobTestResponse,
    RunResponse,
)
from admin.api.model.schedule import (
    ScheduleCreateRequest,
    ScheduleUpdateRequest,
)

__all__ = [
    'PageResponse',
    'StatsResponse',
    'JobCreateRequest',
    'JobUpdateRequest',
    'JobTestRequest',
    'JobTestResponse',
    'RunResponse',
    'ScheduleCreateRequest',
    'ScheduleUpdateRequest',
]
