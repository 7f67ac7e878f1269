"""스크래퍼 잡 관련 모델 정의"""

from pydantic import BaseModel, Field

from storage.model import FetchMethod, FieldValue, JobStatus


class JobCreateRequest(BaseModel):
    """잡 생성 요청"""
    name: str = Field(..., min_length=1, max_length=200)
    url: str = Field(..., min_length=1)
    method: FetchMethod = FetchMethod.BROWSER
    selectors: dict[str, str] = Field(default_factory=dict)
    delay: int = Field(default=2, ge=0, le=3600)
    max_pages: int = Field(default=100, ge=1, le=10000)
    concurrent_requests: int = Field(default=1, ge=1, le=100)
    status: JobStatus = JobStatus.INACTIVE


class JobUpdateRequest(BaseModel):
    """잡 수정 요청 (지정한 필드만 변경)"""
    name: str | None = Field(default=None, min_length=1, max_length=200)
    url: str | None = Field(default=None, min_length=1)
    method: FetchMethod | None = None
    selectors: dict[str, str] | None = None
    delay: int | None = Field(default=None, ge=0, le=3600)
    max_pages: int | None = Field(default=None, ge=1, le=10000)
    concurrent_requests: int | None = Field(default=None, ge=1, le=100)
    status: JobStatus | None = None


class JobTestRequest(BaseModel):
    """테스트 실행 요청 (url, selectors 누락은 핸들러에서 400 처리)"""
    url: str | None = None
    selectors: dict[str, str] | None = None
    method: FetchMethod | None = None
    delay: int | None = Field(default=None, ge=0, le=60)


class JobTestResponse(BaseModel):
    """테스트 실행 결과"""
    success: bool = True
    data: dict[str, FieldValue]


class RunResponse(BaseModel):
    """잡 실행 결과"""
    success: bool = True
    job_id: int
    saved: int
    failed_urls: list[str]
