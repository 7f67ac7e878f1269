"""
반복 주기 해석

스케줄의 frequency / cron_expression을 크론 표현식으로 정규화하고,
주어진 시각 이후의 다음 실행 시각을 계산합니다.
둘 다 부수효과가 없는 순수 함수입니다.
"""

from datetime import datetime

from croniter import croniter

from scheduler.exception import InvalidRecurrenceError
from storage.model import Frequency, ScheduleEntry

# 이름 주기 -> 고정 크론 표현식 (시각은 스케줄러 타임존 기준)
FREQUENCY_EXPRESSIONS: dict[str, str] = {
    Frequency.HOURLY.value: "0 * * * *",   # 매시 정각
    Frequency.DAILY.value: "0 9 * * *",    # 매일 09:00
    Frequency.WEEKLY.value: "0 9 * * 1",   # 매주 월요일 09:00
    Frequency.MONTHLY.value: "0 9 1 * *",  # 매월 1일 09:00
}


def validate_expression(cron_expression: str) -> None:
    """크론 표현식 문법 검사 (5필드)"""
    if len(cron_expression.split()) != 5 or not croniter.is_valid(cron_expression):
        raise InvalidRecurrenceError(None, cron_expression)


def resolve_expression(entry: ScheduleEntry) -> str:
    """
    스케줄의 크론 표현식 반환

    cron_expression이 있으면 검증 후 그대로 반환하고,
    없으면 frequency에 해당하는 고정 표현식을 반환합니다.

    Raises:
        InvalidRecurrenceError: 알 수 없는 frequency 또는 잘못된 표현식
    """
    expression = (entry.cron_expression or "").strip()
    if expression:
        try:
            validate_expression(expression)
        except InvalidRecurrenceError:
            raise InvalidRecurrenceError(entry.frequency, expression)
        return expression

    try:
        return FREQUENCY_EXPRESSIONS[entry.frequency]
    except KeyError:
        raise InvalidRecurrenceError(entry.frequency)


def next_fire_time(entry: ScheduleEntry, after: datetime) -> datetime:
    """after 이후(같은 시각 제외) 첫 실행 시각"""
    return next_fire_time_for(resolve_expression(entry), after)


def next_fire_time_for(cron_expression: str, after: datetime) -> datetime:
    return croniter(cron_expression, after).get_next(datetime)
