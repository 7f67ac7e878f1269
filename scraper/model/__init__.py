"""Scraper 모델"""

from scraper.model.extraction import ExtractionResult
from scraper.model.fetch import FetchConfig, FetchOutcome
from scraper.model.run import RunSummary

__all__ = ["ExtractionResult", "FetchConfig", "FetchOutcome", "RunSummary"]
