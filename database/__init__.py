"""
비동기 데이터베이스 패키지

사용 예시:
    from database import transactional, transactional_readonly, get_connection

    @transactional
    async def create_job(job):
        ctx = get_connection()
        await ctx.execute("INSERT INTO ...")

    @transactional_readonly(db)
    async def list_jobs():
        ctx = get_connection(db.name)
        return await ctx.fetch_all("SELECT ...")
"""

import functools
import logging
from contextlib import AsyncExitStack

from database.base import BaseDatabase
from database.context import get_connection, has_connection
from database.exception import (
    DatabaseError,
    ConnectionPoolExhaustedError,
    TransactionError,
    QueryExecutionError,
    ReadOnlyTransactionError,
    DatabaseNotFoundError,
    NoActiveTransactionError,
)
from database.registry import DatabaseRegistry

logger = logging.getLogger(__name__)

__all__ = [
    'transactional',
    'transactional_readonly',
    'get_connection',
    'get_db',
    'DatabaseError',
    'ConnectionPoolExhaustedError',
    'TransactionError',
    'QueryExecutionError',
    'ReadOnlyTransactionError',
    'DatabaseNotFoundError',
    'NoActiveTransactionError',
]


def get_db(name: str = "default") -> BaseDatabase:
    """등록된 데이터베이스 반환"""
    return DatabaseRegistry.get(name)


def _make_decorator(databases: tuple, readonly: bool):
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            targets = list(databases) or [get_db()]
            async with AsyncExitStack() as stack:
                for db in targets:
                    # 이미 열린 트랜잭션이 있으면 재사용 (중첩 호출)
                    if has_connection(db.name):
                        continue
                    await stack.enter_async_context(db.transaction(readonly=readonly))
                return await func(*args, **kwargs)
        return wrapper
    return decorator


def _transactional(args: tuple, readonly: bool):
    # @transactional 형태 (인자 없이 함수가 바로 전달됨)
    if len(args) == 1 and callable(args[0]) and not isinstance(args[0], BaseDatabase):
        return _make_decorator((), readonly)(args[0])
    # @transactional(db1, db2) 형태
    return _make_decorator(args, readonly)


def transactional(*args):
    """쓰기 트랜잭션 데코레이터 (예외 시 롤백)"""
    return _transactional(args, readonly=False)


def transactional_readonly(*args):
    """읽기 전용 트랜잭션 데코레이터"""
    return _transactional(args, readonly=True)
