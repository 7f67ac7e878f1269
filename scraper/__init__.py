"""Scraper 모듈 - 페이지 수집, 필드 추출, 잡 실행"""

from scraper.exception import (
    ScraperError,
    FetchError,
    ExtractionError,
    JobValidationError,
)
from scraper.extractor import extract
from scraper.fetcher import BaseFetcher, BrowserFetcher, HttpFetcher, FetchPipeline
from scraper.runner import JobRunner, enumerate_urls

__all__ = [
    "ScraperError",
    "FetchError",
    "ExtractionError",
    "JobValidationError",
    "extract",
    "BaseFetcher",
    "BrowserFetcher",
    "HttpFetcher",
    "FetchPipeline",
    "JobRunner",
    "enumerate_urls",
]
