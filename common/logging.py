"""
JSON 구조화 로깅 설정

ELK/Loki 등 로그 수집 시스템과 연동 가능한 JSON 포맷 로깅을 제공합니다.
로그 호출 시 extra={"job_id": ..., "schedule_id": ...}를 넘기면 JSON 필드로 그대로 출력됩니다.
"""

import logging
import sys
from typing import Any

from pythonjsonlogger.json import JsonFormatter

SERVICE_NAME = "scrapu"
JSON_FORMAT = '%(timestamp)s %(level)s %(name)s %(message)s'
TEXT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# 수집 요청마다 로그를 남기는 라이브러리
NOISY_LOGGERS = ('asyncio', 'aiosqlite', 'httpx', 'httpcore')


class ScrapuJsonFormatter(JsonFormatter):
    """JSON 로그 포매터 (timestamp, level, logger, service 필드 고정)"""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record['timestamp'] = self.formatTime(record)
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['service'] = SERVICE_NAME


def build_formatter(json_format: bool) -> logging.Formatter:
    if json_format:
        return ScrapuJsonFormatter(JSON_FORMAT)
    return logging.Formatter(TEXT_FORMAT)


def setup_logging(
    level: str = "INFO",
    json_format: bool = True,
    log_file: str | None = None
) -> None:
    """
    로깅 설정

    Args:
        level: 로그 레벨 (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: JSON 포맷 사용 여부 (False면 텍스트 포맷)
        log_file: 로그 파일 경로 (None이면 stdout만 사용)
    """
    formatter = build_formatter(json_format)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=getattr(logging, level.upper()), handlers=handlers, force=True)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def setup_logging_from_config(config: dict[str, Any]) -> None:
    """설정 dict의 logging 블록으로 로깅 설정"""
    setup_logging(**config.get('logging', {}))
