"""공통 모델 정의"""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar('T')


class PageResponse(BaseModel, Generic[T]):
    """페이징 응답 (수집 결과 목록)"""
    items: list[T]
    total: int
    page: int
    size: int
    pages: int

    @classmethod
    def create(cls, items: list[T], total: int, page: int, size: int) -> "PageResponse[T]":
        return cls(items=items, total=total, page=page, size=size, pages=-(-total // size) if size else 0)


class StatsResponse(BaseModel):
    """대시보드 집계"""
    total_records: int
    active_jobs: int
