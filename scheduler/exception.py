"""
Scheduler 관련 예외 클래스 정의
"""


class SchedulerError(Exception):
    """Scheduler 기본 예외"""
    pass


class InvalidRecurrenceError(SchedulerError):
    """알 수 없는 주기이거나 크론 표현식 파싱 실패"""
    def __init__(self, frequency: str | None, cron_expression: str | None = None, message: str = None):
        self.frequency = frequency
        self.cron_expression = cron_expression
        if message is None:
            if cron_expression:
                message = f"Invalid cron expression: {cron_expression}"
            else:
                message = f"Unknown frequency: {frequency}"
        self.message = message
        super().__init__(self.message)
