"""
반복 주기 해석 테스트

테스트 항목:
1. 이름 주기(hourly/daily/weekly/monthly) 다음 실행 시각
2. cron_expression이 frequency보다 우선
3. 같은 시각은 제외 (after 이후 첫 시각)
4. 알 수 없는 주기 / 잘못된 표현식 -> InvalidRecurrenceError
5. 순수 함수 (입력 변경 없음, 같은 입력 같은 결과)

실행: python -m pytest test/recurrence_test.py -v
"""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# 프로젝트 루트 경로 추가
sys.path.insert(0, str(Path(__file__).parent.parent))

from scheduler.exception import InvalidRecurrenceError
from scheduler.recurrence import (
    FREQUENCY_EXPRESSIONS,
    next_fire_time,
    resolve_expression,
    validate_expression,
)
from storage.model import ScheduleEntry

UTC = timezone.utc


def entry(frequency: str, cron_expression: str | None = None) -> ScheduleEntry:
    return ScheduleEntry(id=1, name="test", frequency=frequency, cron_expression=cron_expression)


class TestNamedFrequency:
    """이름 주기 테스트"""

    def test_hourly(self):
        after = datetime(2024, 1, 1, 10, 15, tzinfo=UTC)
        assert next_fire_time(entry("hourly"), after) == datetime(2024, 1, 1, 11, 0, tzinfo=UTC)

    def test_daily(self):
        """2024-01-01 10:00 이후 -> 다음날 09:00"""
        after = datetime(2024, 1, 1, 10, 0, tzinfo=UTC)
        assert next_fire_time(entry("daily"), after) == datetime(2024, 1, 2, 9, 0, tzinfo=UTC)

    def test_daily_before_nine(self):
        after = datetime(2024, 1, 1, 8, 0, tzinfo=UTC)
        assert next_fire_time(entry("daily"), after) == datetime(2024, 1, 1, 9, 0, tzinfo=UTC)

    def test_weekly(self):
        """수요일(2024-01-03) 이후 -> 다음 월요일 09:00"""
        after = datetime(2024, 1, 3, 12, 0, tzinfo=UTC)
        assert next_fire_time(entry("weekly"), after) == datetime(2024, 1, 8, 9, 0, tzinfo=UTC)

    def test_monthly(self):
        after = datetime(2024, 1, 15, 0, 0, tzinfo=UTC)
        assert next_fire_time(entry("monthly"), after) == datetime(2024, 2, 1, 9, 0, tzinfo=UTC)

    def test_exact_fire_time_is_excluded(self):
        """정확히 실행 시각이면 그 다음 실행 시각 반환"""
        after = datetime(2024, 1, 1, 9, 0, tzinfo=UTC)
        assert next_fire_time(entry("daily"), after) == datetime(2024, 1, 2, 9, 0, tzinfo=UTC)

    def test_result_is_strictly_after(self):
        after = datetime(2024, 3, 10, 23, 59, tzinfo=UTC)
        for frequency in FREQUENCY_EXPRESSIONS:
            assert next_fire_time(entry(frequency), after) > after


class TestCronExpression:
    """cron_expression 테스트"""

    def test_expression_wins_over_frequency(self):
        after = datetime(2024, 1, 1, 10, 0, tzinfo=UTC)
        result = next_fire_time(entry("daily", "*/15 * * * *"), after)
        assert result == datetime(2024, 1, 1, 10, 15, tzinfo=UTC)

    def test_cron_frequency_with_expression(self):
        assert resolve_expression(entry("cron", "30 6 * * 1-5")) == "30 6 * * 1-5"

    def test_blank_expression_falls_back_to_frequency(self):
        assert resolve_expression(entry("hourly", "   ")) == "0 * * * *"


class TestInvalidRecurrence:
    """잘못된 주기 테스트"""

    def test_unknown_frequency(self):
        with pytest.raises(InvalidRecurrenceError) as exc_info:
            resolve_expression(entry("fortnightly"))
        assert exc_info.value.frequency == "fortnightly"

    def test_cron_frequency_without_expression(self):
        with pytest.raises(InvalidRecurrenceError):
            next_fire_time(entry("cron"), datetime(2024, 1, 1, tzinfo=UTC))

    def test_bad_expression(self):
        with pytest.raises(InvalidRecurrenceError) as exc_info:
            resolve_expression(entry("daily", "61 * * * *"))
        assert exc_info.value.cron_expression == "61 * * * *"

    def test_six_field_expression_rejected(self):
        with pytest.raises(InvalidRecurrenceError):
            validate_expression("0 0 9 * * *")

    def test_garbage_expression_rejected(self):
        with pytest.raises(InvalidRecurrenceError):
            validate_expression("every monday")


class TestPurity:
    """순수 함수 테스트"""

    def test_same_input_same_output(self):
        schedule = entry("weekly")
        after = datetime(2024, 5, 5, 5, 5, tzinfo=UTC)
        assert next_fire_time(schedule, after) == next_fire_time(schedule, after)

    def test_entry_not_modified(self):
        schedule = entry("daily")
        before = schedule.model_dump()
        next_fire_time(schedule, datetime(2024, 1, 1, tzinfo=UTC))
        assert schedule.model_dump() == before
