"""
SQLiteDatabase: 커넥션풀 + 트랜잭션 + aiosql 쿼리 캐시

사용 예시:
    db = await SQLiteDatabase.create('default', {'path': './data/scrapu.db'})

    async with db.transaction() as ctx:
        await ctx.execute(...)
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

import aiosql
from aiosql.queries import Queries

from database.base import BaseDatabase
from database.context import clear_connection, set_connection
from database.sqlite3.pool import AsyncConnectionPool, PoolConfig, SqliteOptions
from database.sqlite3.transaction import TransactionContext

logger = logging.getLogger(__name__)

INIT_SQL_PATH = Path(__file__).parent / 'sql' / 'init.sql'


class SQLiteDatabase(BaseDatabase):
    """SQLite 데이터베이스 (생성 시 init.sql 스키마 보장)"""

    def __init__(self, name: str, config: dict[str, Any]):
        super().__init__(name)
        self._config = config
        self._pool: AsyncConnectionPool | None = None
        self._queries: dict[str, Queries] = {}

    @classmethod
    async def create(cls, name: str, config: dict[str, Any]) -> 'SQLiteDatabase':
        db = cls(name, config)
        db._pool = AsyncConnectionPool(
            db_path=config.get('path', f'./data/{name}.db'),
            pool_config=PoolConfig(**config.get('pool', {})),
            sqlite_options=SqliteOptions(**config.get('options', {})),
        )
        await db._pool.initialize()
        await db._ensure_schema()
        logger.info(f"SQLiteDatabase '{name}' initialized successfully")
        return db

    async def _ensure_schema(self) -> None:
        schema = aiosql.from_path(str(INIT_SQL_PATH), "aiosqlite")
        pooled = await self.pool.acquire()
        try:
            await schema.create_schema(pooled.connection)
            await pooled.connection.commit()
        finally:
            await self.pool.release(pooled)

    @property
    def pool(self) -> AsyncConnectionPool:
        if self._pool is None:
            raise RuntimeError(f"Database '{self.name}' not initialized")
        return self._pool

    @asynccontextmanager
    async def transaction(self, readonly: bool = False) -> AsyncIterator[TransactionContext]:
        """
        트랜잭션 (정상 종료 시 커밋, 예외 시 롤백)

        트랜잭션이 열려 있는 동안 get_connection(self.name)으로 컨텍스트를 얻을 수 있습니다.
        """
        pooled = await self.pool.acquire()
        ctx = TransactionContext(pooled.connection, readonly)
        try:
            await ctx.begin()
            set_connection(self.name, ctx)
            try:
                yield ctx
            except BaseException:
                await ctx.rollback()
                raise
            else:
                await ctx.commit()
        finally:
            clear_connection(self.name)
            await self.pool.release(pooled)

    def load_queries(self, name: str, sql_path: str) -> Queries:
        """aiosql로 SQL 파일 로드 (이름으로 캐시)"""
        queries = aiosql.from_path(sql_path, "aiosqlite")
        self._queries[name] = queries
        return queries

    def get_queries(self, name: str) -> Queries | None:
        return self._queries.get(name)

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
        logger.info(f"SQLiteDatabase '{self.name}' closed")
