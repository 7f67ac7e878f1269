"""
스크래퍼 잡, 스케줄, 수집 결과 모델 정의
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Union

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobStatus(str, Enum):
    """잡 상태"""
    INACTIVE = "inactive"
    ACTIVE = "active"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    TESTING = "testing"


class FetchMethod(str, Enum):
    """페이지 수집 방식"""
    BROWSER = "browser"  # 헤드리스 브라우저 렌더링 (실패 시 HTTP로 폴백)
    HTTP = "http"        # 단순 HTTP 요청만 사용


class Frequency(str, Enum):
    """스케줄 반복 주기"""
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    CRON = "cron"  # cron_expression 직접 지정


# 필드 하나의 추출 결과: 단일 문자열 또는 문자열 목록
FieldValue = Union[str, list[str]]


class Job(BaseModel):
    """스크래퍼 잡 엔티티"""
    id: int | None = None
    name: str = ""
    url: str
    method: FetchMethod = FetchMethod.BROWSER
    selectors: dict[str, str] = Field(default_factory=dict)
    delay: int = Field(default=2, ge=0)
    max_pages: int = Field(default=100, ge=1)
    concurrent_requests: int = Field(default=1, ge=1)
    status: JobStatus = JobStatus.INACTIVE
    created_at: datetime = Field(default_factory=utcnow)
    last_run: datetime | None = None


class ScheduleEntry(BaseModel):
    """스케줄 엔티티 (cron_expression이 있으면 frequency보다 우선)"""
    id: int | None = None
    job_id: int | None = None
    name: str
    frequency: str
    cron_expression: str | None = None
    next_run: datetime | None = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=utcnow)


class PageRecord(BaseModel):
    """페이지 하나의 수집 결과 (생성 후 변경되지 않음)"""
    id: int | None = None
    job_id: int | None = None
    url: str
    data: dict[str, FieldValue] = Field(default_factory=dict)
    scraped_at: datetime = Field(default_factory=utcnow)
