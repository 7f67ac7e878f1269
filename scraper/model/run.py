"""
잡 실행 결과 모델
"""

from dataclasses import dataclass, field


@dataclass
class RunSummary:
    """run() 1회 실행 요약"""
    job_id: int
    urls: list[str] = field(default_factory=list)
    saved: int = 0
    failed_urls: list[str] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failed_urls)
