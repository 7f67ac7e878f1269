"""
셀렉터 기반 필드 추출

BeautifulSoup CSS 셀렉터로 필드를 추출합니다.
- 매칭 노드가 2개 이상이면 각 노드 텍스트(trim)의 목록 (문서 순서)
- 1개 이하이면 단일 문자열 (매칭 없으면 빈 문자열)
- 셀렉터 문법 오류는 해당 필드만 errors에 기록하고 나머지 필드는 정상 추출
"""

import logging
from typing import Mapping

from bs4 import BeautifulSoup
from soupsieve import SelectorSyntaxError

from scraper.exception import ExtractionError
from scraper.model.extraction import ExtractionResult

logger = logging.getLogger(__name__)

PARSER = "html.parser"


def extract(markup: str, selectors: Mapping[str, str] | None) -> ExtractionResult:
    """markup에서 selectors의 각 필드 추출"""
    result = ExtractionResult()
    if not selectors:
        return result

    soup = BeautifulSoup(markup or "", PARSER)

    for field_name, selector in selectors.items():
        if not isinstance(selector, str) or not selector.strip():
            result.errors[field_name] = ExtractionError(field_name, str(selector), "Selector must be a non-empty string")
            continue

        try:
            nodes = soup.select(selector)
        except (SelectorSyntaxError, ValueError, NotImplementedError) as e:
            result.errors[field_name] = ExtractionError(field_name, selector, f"Invalid selector for field '{field_name}': {e}")
            logger.warning(f"Selector error for field '{field_name}' ({selector}): {e}")
            continue

        texts = [node.get_text().strip() for node in nodes]
        if len(texts) > 1:
            result.fields[field_name] = texts
        else:
            result.fields[field_name] = texts[0] if texts else ""

    return result
