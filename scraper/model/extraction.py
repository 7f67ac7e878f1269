"""
추출 결과 모델
"""

from dataclasses import dataclass, field

from scraper.exception import ExtractionError
from storage.model import FieldValue


@dataclass
class ExtractionResult:
    """필드명 -> 값 매핑과 필드별 오류"""
    fields: dict[str, FieldValue] = field(default_factory=dict)
    errors: dict[str, ExtractionError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors
