"""Admin API 서버 진입점"""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from admin.api.handler.job import JobHandler
from admin.api.handler.schedule import ScheduleHandler
from admin.api.router.api import router
from common.config import load_config
from scrapu import __version__
from scrapu.services import Services, close_services, open_services

logger = logging.getLogger(__name__)


def bind_services(app: FastAPI, services: Services) -> None:
    """핸들러를 app.state에 연결"""
    app.state.services = services
    app.state.job_handler = JobHandler(services.repository, services.runner)
    app.state.schedule_handler = ScheduleHandler(services.repository, services.manager)


def create_app(services: Services | None = None, config: dict[str, Any] | None = None) -> FastAPI:
    """
    FastAPI 앱 생성

    Args:
        services: 이미 시작된 서비스 (main.py, 테스트). None이면 lifespan에서 직접 열고 닫음
        config: 설정 dict (None이면 config 디렉토리에서 로드)
    """
    config = config if config is not None else load_config()
    admin_config = config.get('admin', {})

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if services is not None:
            yield
            return

        owned = await open_services(config)
        bind_services(app, owned)
        logger.info("Admin services started")
        try:
            yield
        finally:
            await close_services(owned)

    app = FastAPI(
        title="Scrapu Admin API",
        description="스크래퍼 잡 / 스케줄 관리 Admin API",
        version=__version__,
        lifespan=lifespan,
    )

    if services is not None:
        bind_services(app, services)

    # CORS 설정
    cors_config = admin_config.get('cors', {})
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_config.get('origins', ['*']),
        allow_credentials=cors_config.get('allow_credentials', True),
        allow_methods=cors_config.get('allow_methods', ['*']),
        allow_headers=cors_config.get('allow_headers', ['*']),
    )

    app.include_router(router)

    # 요청 검증 실패는 400으로 응답
    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

    @app.get("/health", include_in_schema=False)
    async def health():
        manager = app.state.services.manager
        return {"status": "ok", "timers": len(manager.timers), "running": manager.inflight_count}

    return app


if __name__ == "__main__":
    import uvicorn

    from common.logging import setup_logging_from_config

    config = load_config()
    setup_logging_from_config(config)
    admin_config = config.get('admin', {})

    uvicorn.run(
        create_app(config=config),
        host=admin_config.get('host', '0.0.0.0'),
        port=admin_config.get('port', 8080),
    )
