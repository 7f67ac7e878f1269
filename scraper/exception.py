"""
Scraper 관련 예외 클래스 정의
"""


class ScraperError(Exception):
    """Scraper 기본 예외"""
    pass


class FetchError(ScraperError):
    """페이지 수집 실패 (시도한 모든 방식의 원인 포함)"""
    def __init__(self, url: str, causes: dict[str, BaseException] | None = None, message: str = None):
        self.url = url
        self.causes = dict(causes or {})
        if message is None:
            detail = "; ".join(f"{name}: {cause}" for name, cause in self.causes.items())
            message = f"Failed to fetch {url}" + (f" ({detail})" if detail else "")
        self.message = message
        super().__init__(self.message)


class ExtractionError(ScraperError):
    """필드 하나의 셀렉터 처리 실패"""
    def __init__(self, field: str, selector: str, message: str = None):
        self.field = field
        self.selector = selector
        self.message = message or f"Invalid selector for field '{field}': {selector}"
        super().__init__(self.message)


class JobValidationError(ScraperError):
    """테스트 실행 입력값 누락 등 유효성 검사 실패"""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)
