"""스토리지 모듈 - 잡/스케줄/수집 결과 저장소"""

from storage.base import Repository
from storage.exception import (
    StorageError,
    NotFoundError,
    JobNotFoundError,
    ScheduleNotFoundError,
)
from storage.model import (
    FetchMethod,
    FieldValue,
    Frequency,
    Job,
    JobStatus,
    PageRecord,
    ScheduleEntry,
)

__all__ = [
    "Repository",
    "StorageError",
    "NotFoundError",
    "JobNotFoundError",
    "ScheduleNotFoundError",
    "FetchMethod",
    "FieldValue",
    "Frequency",
    "Job",
    "JobStatus",
    "PageRecord",
    "ScheduleEntry",
]
