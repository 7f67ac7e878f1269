"""
셀렉터 추출 테스트

테스트 항목:
1. 노드 1개 -> 문자열 (trim)
2. 노드 2개 이상 -> 문서 순서 목록
3. 매칭 없음 -> 빈 문자열
4. 잘못된 셀렉터는 해당 필드만 errors, 나머지는 정상 추출
5. 셀렉터 없음 / 빈 HTML

실행: python -m pytest test/extractor_test.py -v
"""

import sys
from pathlib import Path

# 프로젝트 루트 경로 추가
sys.path.insert(0, str(Path(__file__).parent.parent))

from scraper.exception import ExtractionError
from scraper.extractor import extract

HTML = """
<html>
  <body>
    <h1 class="title">  Hello World  </h1>
    <ul>
      <li class="item">first</li>
      <li class="item"> second </li>
      <li class="item">third</li>
    </ul>
    <p id="price"><span>$</span>10</p>
  </body>
</html>
"""


class TestExtract:
    """필드 추출 테스트"""

    def test_single_node_returns_string(self):
        result = extract(HTML, {"title": "h1.title"})
        assert result.fields == {"title": "Hello World"}
        assert result.ok

    def test_multiple_nodes_return_list_in_order(self):
        result = extract(HTML, {"items": "li.item"})
        assert result.fields["items"] == ["first", "second", "third"]

    def test_two_nodes(self):
        result = extract("<div><b>a</b><b>b</b></div>", {"x": "b"})
        assert result.fields["x"] == ["a", "b"]

    def test_nested_text_is_joined(self):
        result = extract(HTML, {"price": "#price"})
        assert result.fields["price"] == "$10"

    def test_no_match_returns_empty_string(self):
        result = extract(HTML, {"missing": ".does-not-exist"})
        assert result.fields == {"missing": ""}
        assert result.ok

    def test_multiple_fields(self):
        result = extract(HTML, {"title": "h1", "first": "li.item:first-child"})
        assert result.fields == {"title": "Hello World", "first": "first"}


class TestSelectorErrors:
    """잘못된 셀렉터 테스트"""

    def test_bad_selector_isolated(self):
        result = extract(HTML, {"title": "h1", "broken": "li[", "items": "li"})

        assert result.fields["title"] == "Hello World"
        assert result.fields["items"] == ["first", "second", "third"]
        assert "broken" not in result.fields
        assert isinstance(result.errors["broken"], ExtractionError)
        assert result.errors["broken"].field == "broken"
        assert not result.ok

    def test_empty_selector(self):
        result = extract(HTML, {"empty": "  "})
        assert "empty" in result.errors
        assert result.fields == {}


class TestEdgeCases:
    """경계 조건 테스트"""

    def test_no_selectors(self):
        result = extract(HTML, {})
        assert result.fields == {}
        assert result.errors == {}

    def test_none_selectors(self):
        assert extract(HTML, None).fields == {}

    def test_empty_markup(self):
        result = extract("", {"title": "h1"})
        assert result.fields == {"title": ""}

    def test_malformed_markup(self):
        result = extract("<div><p>unclosed <b>bold</div>", {"bold": "b"})
        assert result.fields["bold"] == "bold"
