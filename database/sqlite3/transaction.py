"""
SQLite3 트랜잭션 컨텍스트

풀에서 빌린 연결 하나에 묶인 트랜잭션입니다.
aiosql 쿼리는 connection 속성을, 직접 SQL은 execute/fetch_* 를 사용합니다.
"""

import logging
from typing import Any

import aiosqlite

from database.exception import QueryExecutionError, ReadOnlyTransactionError, TransactionError

logger = logging.getLogger(__name__)

WRITE_KEYWORDS = ('INSERT', 'UPDATE', 'DELETE', 'CREATE', 'DROP', 'ALTER', 'REPLACE')


def is_write_query(sql: str) -> bool:
    return sql.lstrip().upper().startswith(WRITE_KEYWORDS)


class TransactionContext:
    """SQLite 트랜잭션 컨텍스트"""

    def __init__(self, connection: aiosqlite.Connection, readonly: bool = False):
        self.connection = connection
        self.readonly = readonly
        self.active = False

    async def begin(self) -> None:
        if self.active:
            raise TransactionError("Transaction already started")
        # 쓰기 트랜잭션은 시작 시 RESERVED 잠금 획득
        await self.connection.execute("BEGIN DEFERRED" if self.readonly else "BEGIN IMMEDIATE")
        self.active = True

    async def commit(self) -> None:
        if self.active:
            await self.connection.commit()
            self.active = False

    async def rollback(self) -> None:
        if self.active:
            await self.connection.rollback()
            self.active = False

    async def execute(self, sql: str, parameters: Any = None) -> aiosqlite.Cursor:
        """
        SQL 실행

        Raises:
            ReadOnlyTransactionError: 읽기 전용 트랜잭션에서 쓰기 쿼리
            QueryExecutionError: SQLite 오류
        """
        if self.readonly and is_write_query(sql):
            raise ReadOnlyTransactionError("Cannot execute write query in readonly transaction")

        if parameters:
            logger.debug(f"[SQL] {' '.join(sql.split())} | params: {parameters}")
        else:
            logger.debug(f"[SQL] {' '.join(sql.split())}")

        try:
            return await self.connection.execute(sql, parameters or ())
        except aiosqlite.Error as e:
            raise QueryExecutionError(str(e)) from e

    async def fetch_one(self, sql: str, parameters: Any = None) -> aiosqlite.Row | None:
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchone()

    async def fetch_all(self, sql: str, parameters: Any = None) -> list[aiosqlite.Row]:
        cursor = await self.execute(sql, parameters)
        return list(await cursor.fetchall())

    async def fetch_val(self, sql: str, parameters: Any = None) -> Any:
        row = await self.fetch_one(sql, parameters)
        return row[0] if row else None
