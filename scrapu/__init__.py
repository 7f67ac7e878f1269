"""scrapu - 스크래퍼 잡 스케줄링 시스템"""

__version__ = "0.1.0"
