"""
scrapu 통합 진입점

저장된 활성 스케줄로 타이머를 다시 만들고, Admin API와 함께 실행합니다.

사용법:
    python main.py                 # 스케줄러 + Admin API
    python main.py scheduler       # 스케줄러만
"""

import sys
import os

# Windows 인코딩 설정 (cp949 -> UTF-8)
if sys.platform == "win32":
    os.environ["PYTHONUTF8"] = "1"

import asyncio
import signal
import logging

from common.config import load_config
from common.logging import setup_logging_from_config
from scrapu.services import Services, close_services, open_services

logger = logging.getLogger(__name__)


async def run_admin(config: dict, services: Services, stop_event: asyncio.Event):
    """Admin API 실행"""
    import uvicorn
    from admin.main import create_app

    admin_config = config.get("admin", {})
    uv_config = uvicorn.Config(
        create_app(services, config),
        host=admin_config.get("host", "0.0.0.0"),
        port=admin_config.get("port", 8080),
        log_level="info",
    )
    server = uvicorn.Server(uv_config)
    # 시그널은 main에서 처리
    server.install_signal_handlers = lambda: None

    async def wait_stop():
        await stop_event.wait()
        server.should_exit = True

    watcher = asyncio.create_task(wait_stop())
    try:
        await server.serve()
    finally:
        watcher.cancel()


async def main(with_admin: bool = True):
    """메인 함수"""
    config = load_config()
    setup_logging_from_config(config)

    services = await open_services(config)

    # 종료 이벤트
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    def signal_handler():
        logger.info("Received shutdown signal")
        stop_event.set()

    # Windows는 add_signal_handler를 지원하지 않음
    if sys.platform != "win32":
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, signal_handler)

    try:
        if with_admin:
            logger.info("Admin API started")
            await run_admin(config, services, stop_event)
        else:
            await stop_event.wait()
    except asyncio.CancelledError:
        logger.info("Tasks cancelled")
    finally:
        await close_services(services)


if __name__ == "__main__":
    args = sys.argv[1:]
    if args and args != ["scheduler"]:
        print("Usage: python main.py [scheduler]")
        sys.exit(1)

    print("Starting scrapu: " + ("scheduler" if args else "scheduler, admin"))
    try:
        asyncio.run(main(with_admin=not args))
    except KeyboardInterrupt:
        print("\nShutdown requested by user")
