"""Admin API 라우터 (모든 API 통합)"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from pydantic import ValidationError

from admin.api.handler.job import JobHandler
from admin.api.handler.schedule import ScheduleHandler
from admin.api.model.common import PageResponse, StatsResponse
from admin.api.model.job import (
    JobCreateRequest,
    JobUpdateRequest,
    JobTestRequest,
    JobTestResponse,
    RunResponse,
)
from admin.api.model.schedule import ScheduleCreateRequest, ScheduleUpdateRequest
from scheduler.exception import InvalidRecurrenceError
from scraper.exception import FetchError, JobValidationError
from storage.exception import NotFoundError
from storage.model import Job, PageRecord, ScheduleEntry

logger = logging.getLogger(__name__)

router = APIRouter()


def get_job_handler(request: Request) -> JobHandler:
    return request.app.state.job_handler


def get_schedule_handler(request: Request) -> ScheduleHandler:
    return request.app.state.schedule_handler


# ============================================
# STATS API
# ============================================

@router.get("/api/stats", response_model=StatsResponse, tags=["Stats"])
async def get_stats(handler: JobHandler = Depends(get_job_handler)):
    """전체 수집 건수 / 활성 잡 수"""
    return await handler.get_stats()


# ============================================
# JOB API
# ============================================

@router.get("/api/jobs", response_model=list[Job], tags=["Job"])
async def get_jobs(handler: JobHandler = Depends(get_job_handler)):
    """잡 목록 조회"""
    return await handler.get_list()


# /api/jobs/{job_id} 보다 먼저 등록
@router.post("/api/jobs/test", response_model=JobTestResponse, tags=["Job"])
async def test_job(request: JobTestRequest, handler: JobHandler = Depends(get_job_handler)):
    """잡 설정 테스트 (1페이지 수집, 저장하지 않음)"""
    try:
        return await handler.test(request)
    except JobValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except FetchError as e:
        logger.error(f"Test run failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/api/jobs/{job_id}", response_model=Job, tags=["Job"])
async def get_job(job_id: int, handler: JobHandler = Depends(get_job_handler)):
    """잡 상세 조회"""
    try:
        return await handler.get_by_id(job_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/api/jobs", response_model=Job, status_code=201, tags=["Job"])
async def create_job(request: JobCreateRequest, handler: JobHandler = Depends(get_job_handler)):
    """잡 생성"""
    return await handler.create(request)


@router.put("/api/jobs/{job_id}", response_model=Job, tags=["Job"])
async def update_job(
    job_id: int,
    request: JobUpdateRequest,
    handler: JobHandler = Depends(get_job_handler),
):
    """잡 수정"""
    try:
        return await handler.update(job_id, request)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/api/jobs/{job_id}", status_code=204, tags=["Job"])
async def delete_job(job_id: int, handler: JobHandler = Depends(get_job_handler)):
    """잡 삭제 (수집 결과도 함께 삭제)"""
    try:
        await handler.delete(job_id)
        return Response(status_code=204)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/api/jobs/{job_id}/run", response_model=RunResponse, tags=["Job"])
async def run_job(job_id: int, handler: JobHandler = Depends(get_job_handler)):
    """잡 즉시 실행"""
    try:
        return await handler.run(job_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Manual run failed: job_id={job_id}, error={e}")
        raise HTTPException(status_code=500, detail=str(e))


# ============================================
# RECORD API
# ============================================

@router.get("/api/records", response_model=PageResponse[PageRecord], tags=["Record"])
async def get_records(
    page: int = Query(default=1, ge=1, description="페이지 번호"),
    size: int = Query(default=20, ge=1, le=100, description="페이지 크기"),
    job_id: int | None = Query(default=None, description="잡 ID 필터"),
    handler: JobHandler = Depends(get_job_handler),
):
    """수집 결과 목록 조회"""
    return await handler.get_records(page=page, size=size, job_id=job_id)


# ============================================
# SCHEDULE API
# ============================================

@router.get("/api/schedules", response_model=list[ScheduleEntry], tags=["Schedule"])
async def get_schedules(
    is_active: bool | None = Query(default=None, description="활성화 필터"),
    handler: ScheduleHandler = Depends(get_schedule_handler),
):
    """스케줄 목록 조회"""
    return await handler.get_list(is_active=is_active)


@router.get("/api/schedules/{schedule_id}", response_model=ScheduleEntry, tags=["Schedule"])
async def get_schedule(schedule_id: int, handler: ScheduleHandler = Depends(get_schedule_handler)):
    """스케줄 상세 조회"""
    try:
        return await handler.get_by_id(schedule_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/api/schedules", response_model=ScheduleEntry, status_code=201, tags=["Schedule"])
async def create_schedule(
    request: ScheduleCreateRequest,
    handler: ScheduleHandler = Depends(get_schedule_handler),
):
    """스케줄 생성 (활성 스케줄은 바로 타이머 등록)"""
    try:
        return await handler.create(request)
    except InvalidRecurrenceError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/api/schedules/{schedule_id}", response_model=ScheduleEntry, tags=["Schedule"])
async def update_schedule(
    schedule_id: int,
    request: ScheduleUpdateRequest,
    handler: ScheduleHandler = Depends(get_schedule_handler),
):
    """스케줄 수정 (타이머 재등록)"""
    try:
        return await handler.update(schedule_id, request)
    except (InvalidRecurrenceError, ValidationError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/api/schedules/{schedule_id}", status_code=204, tags=["Schedule"])
async def delete_schedule(schedule_id: int, handler: ScheduleHandler = Depends(get_schedule_handler)):
    """스케줄 삭제 (타이머 중지)"""
    try:
        await handler.delete(schedule_id)
        return Response(status_code=204)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/api/schedules/{schedule_id}/pause", response_model=ScheduleEntry, tags=["Schedule"])
async def pause_schedule(schedule_id: int, handler: ScheduleHandler = Depends(get_schedule_handler)):
    """스케줄 일시 중지"""
    try:
        return await handler.pause(schedule_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/api/schedules/{schedule_id}/resume", response_model=ScheduleEntry, tags=["Schedule"])
async def resume_schedule(schedule_id: int, handler: ScheduleHandler = Depends(get_schedule_handler)):
    """스케줄 재개"""
    try:
        return await handler.resume(schedule_id)
    except InvalidRecurrenceError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
