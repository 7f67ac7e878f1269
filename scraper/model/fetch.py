"""
페이지 수집 설정 및 결과 모델
"""

from dataclasses import dataclass, field

from pydantic import BaseModel, Field

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)


class FetchConfig(BaseModel):
    """페이지 수집 설정 (scraper.yaml)"""
    user_agent: str = DEFAULT_USER_AGENT
    navigation_timeout_ms: int = Field(default=30000, ge=1000, le=300000)
    request_timeout_seconds: float = Field(default=30.0, gt=0, le=300)
    headless: bool = True
    browser_args: list[str] = Field(
        default_factory=lambda: ["--no-sandbox", "--disable-setuid-sandbox"]
    )


@dataclass
class FetchOutcome:
    """
    수집 시도 결과

    성공 시 markup과 성공한 방식(fetcher)을, 실패 시 방식별 원인(causes)을 담습니다.
    """
    url: str
    markup: str | None = None
    fetcher: str | None = None
    causes: dict[str, BaseException] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.markup is not None
