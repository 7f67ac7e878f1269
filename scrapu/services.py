"""
서비스 조립

설정으로부터 Repository, FetchPipeline, JobRunner, ScheduleManager를 만들고
종료 시 역순으로 정리합니다. main.py, Admin API, CLI가 공통으로 사용합니다.
"""

import logging
from dataclasses import dataclass
from typing import Any

from database.registry import DatabaseRegistry
from scheduler.main import ScheduleManager
from scheduler.model.scheduler import SchedulerConfig
from scraper.fetcher import FetchPipeline
from scraper.model.fetch import FetchConfig
from scraper.runner import JobRunner
from storage.base import Repository
from storage.sqlite import SQLiteRepository

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """실행 중인 서비스 묶음"""
    repository: Repository
    pipeline: FetchPipeline
    runner: JobRunner
    manager: ScheduleManager

    async def close(self) -> None:
        await self.manager.shutdown()
        await self.pipeline.close()


def build_services(repository: Repository, config: dict[str, Any]) -> Services:
    """저장소와 설정으로 서비스 생성 (DB 초기화는 호출 측 책임)"""
    pipeline = FetchPipeline(FetchConfig(**config.get("scraper", {})))
    runner = JobRunner(repository, pipeline)
    manager = ScheduleManager(repository, runner, SchedulerConfig(**config.get("scheduler", {})))
    return Services(repository=repository, pipeline=pipeline, runner=runner, manager=manager)


async def open_services(config: dict[str, Any], start_scheduler: bool = True) -> Services:
    """DB 초기화 후 서비스 생성 (start_scheduler면 저장된 활성 스케줄 등록)"""
    await DatabaseRegistry.init_from_config(config, ["default"])

    services = build_services(SQLiteRepository(), config)
    if start_scheduler:
        await services.manager.initialize()
    return services


async def close_services(services: Services) -> None:
    try:
        await services.close()
    finally:
        await DatabaseRegistry.close_all()
        logger.info("All services stopped")
