"""
Scheduler 설정 모델
"""

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, Field, field_validator


class SchedulerConfig(BaseModel):
    """ScheduleManager 설정"""
    timezone: str = Field(default="UTC", description="크론 시각 해석 기준 타임존 (IANA)")
    shutdown_timeout_seconds: float = Field(default=30.0, ge=0, le=600)

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {value}")
        return value

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)
