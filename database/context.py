"""
트랜잭션 컨텍스트 저장소

현재 태스크에서 열린 트랜잭션을 DB 이름별로 보관합니다.
ContextVar를 사용하므로 태스크 간에 공유되지 않습니다.
"""

from contextvars import ContextVar
from typing import Any

from database.exception import NoActiveTransactionError

_connections: ContextVar[dict[str, Any]] = ContextVar("db_connections", default={})


def set_connection(name: str, ctx: Any) -> None:
    # 부모 태스크의 dict를 건드리지 않도록 복사 후 설정
    current = dict(_connections.get())
    current[name] = ctx
    _connections.set(current)


def clear_connection(name: str) -> None:
    current = dict(_connections.get())
    current.pop(name, None)
    _connections.set(current)


def has_connection(name: str) -> bool:
    return name in _connections.get()


def get_connection(name: str = "default") -> Any:
    """현재 트랜잭션 컨텍스트 반환"""
    ctx = _connections.get().get(name)
    if ctx is None:
        raise NoActiveTransactionError(name)
    return ctx
