"""
Database 관련 예외 클래스 정의
"""


class DatabaseError(Exception):
    """Database 기본 예외"""
    pass


class ConnectionPoolExhaustedError(DatabaseError):
    """커넥션풀에서 연결을 획득하지 못함"""
    pass


class TransactionError(DatabaseError):
    """트랜잭션 처리 실패"""
    pass


class QueryExecutionError(DatabaseError):
    """쿼리 실행 실패"""
    pass


class ReadOnlyTransactionError(DatabaseError):
    """읽기 전용 트랜잭션에서 쓰기 시도"""
    pass


class DatabaseNotFoundError(DatabaseError):
    """등록되지 않은 데이터베이스 이름"""
    def __init__(self, name: str):
        self.name = name
        self.message = f"Database not registered: {name}"
        super().__init__(self.message)


class NoActiveTransactionError(DatabaseError):
    """현재 컨텍스트에 트랜잭션이 없음"""
    def __init__(self, name: str):
        self.name = name
        self.message = (
            f"No active transaction for database '{name}'. "
            f"Use @transactional or db.transaction()."
        )
        super().__init__(self.message)
