"""
설정 파일 로드

config 디렉토리의 yaml 파일들을 읽어 하나의 dict로 병합합니다.
SCRAPU_CONFIG_DIR 환경변수로 디렉토리를 바꿀 수 있습니다.
"""

import os
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG_DIR = Path(__file__).parent.parent / "config"
CONFIG_FILES = ("database.yaml", "scheduler.yaml", "scraper.yaml", "admin.yaml", "logging.yaml")


def get_config_dir() -> Path:
    return Path(os.environ.get("SCRAPU_CONFIG_DIR", DEFAULT_CONFIG_DIR))


def load_config(config_dir: str | Path | None = None) -> dict[str, Any]:
    """설정 파일 로드 (없는 파일은 건너뜀)"""
    config_path = Path(config_dir) if config_dir else get_config_dir()
    config: dict[str, Any] = {}

    for filename in CONFIG_FILES:
        path = config_path / filename
        if not path.exists():
            continue
        with open(path, encoding="utf-8") as f:
            config.update(yaml.safe_load(f) or {})

    return config
