"""
Storage 관련 예외 클래스 정의
"""


class StorageError(Exception):
    """Storage 기본 예외"""
    pass


class NotFoundError(StorageError):
    """참조한 레코드가 존재하지 않음"""
    pass


class JobNotFoundError(NotFoundError):
    """잡을 찾을 수 없음"""
    def __init__(self, job_id: int):
        self.job_id = job_id
        self.message = f"Job with id {job_id} not found"
        super().__init__(self.message)


class ScheduleNotFoundError(NotFoundError):
    """스케줄을 찾을 수 없음"""
    def __init__(self, schedule_id: int):
        self.schedule_id = schedule_id
        self.message = f"Schedule with id {schedule_id} not found"
        super().__init__(self.message)
