"""스케줄 관련 모델 정의"""

from pydantic import BaseModel, Field


class ScheduleCreateRequest(BaseModel):
    """스케줄 생성 요청"""
    name: str = Field(..., min_length=1, max_length=200)
    job_id: int | None = None
    frequency: str = Field(..., min_length=1, max_length=20)
    cron_expression: str | None = Field(default=None, max_length=100)
    is_active: bool = True


class ScheduleUpdateRequest(BaseModel):
    """스케줄 수정 요청 (지정한 필드만 변경)"""
    name: str | None = Field(default=None, min_length=1, max_length=200)
    job_id: int | None = None
    frequency: str | None = Field(default=None, min_length=1, max_length=20)
    cron_expression: str | None = Field(default=None, max_length=100)
    is_active: bool | None = None
