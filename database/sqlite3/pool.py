"""
SQLite3 비동기 커넥션풀

pool_size개의 aiosqlite 연결을 미리 만들어 두고 유휴 큐로 빌려줍니다.
max_idle_time보다 오래 쉬었던 연결은 빌려주기 전에 다시 연결합니다.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

import aiosqlite

from database.exception import ConnectionPoolExhaustedError

logger = logging.getLogger(__name__)


@dataclass
class PoolConfig:
    """커넥션풀 설정 (database.yaml의 pool)"""
    pool_size: int = 5
    pool_timeout: float = 30.0
    max_idle_time: float = 300.0


@dataclass
class SqliteOptions:
    """연결마다 적용하는 PRAGMA (database.yaml의 options)"""
    busy_timeout: int = 5000
    journal_mode: str = 'WAL'
    synchronous: str = 'NORMAL'
    cache_size: int = -2000
    foreign_keys: bool = True

    def pragmas(self) -> list[str]:
        return [
            f"PRAGMA busy_timeout={self.busy_timeout}",
            f"PRAGMA journal_mode={self.journal_mode}",
            f"PRAGMA synchronous={self.synchronous}",
            f"PRAGMA cache_size={self.cache_size}",
            f"PRAGMA foreign_keys={'ON' if self.foreign_keys else 'OFF'}",
        ]


@dataclass
class PooledConnection:
    """풀이 소유한 연결 하나"""
    connection: aiosqlite.Connection
    in_use: bool = False
    last_used_at: float = field(default_factory=time.monotonic)

    @property
    def idle_seconds(self) -> float:
        return time.monotonic() - self.last_used_at

    def touch(self) -> None:
        self.last_used_at = time.monotonic()


class AsyncConnectionPool:
    """비동기 SQLite 커넥션풀"""

    def __init__(
        self,
        db_path: str,
        pool_config: PoolConfig | None = None,
        sqlite_options: SqliteOptions | None = None,
    ):
        self._db_path = Path(db_path)
        self._config = pool_config or PoolConfig()
        self._options = sqlite_options or SqliteOptions()
        self._connections: list[PooledConnection] = []
        self._idle: asyncio.Queue | None = None
        self._closed = False

    @property
    def size(self) -> int:
        return len(self._connections)

    @property
    def available(self) -> int:
        return self._idle.qsize() if self._idle is not None else 0

    async def initialize(self) -> None:
        if self._idle is not None:
            logger.warning("Connection pool already initialized")
            return

        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._idle = asyncio.Queue()
        for _ in range(self._config.pool_size):
            pooled = PooledConnection(await self._connect())
            self._connections.append(pooled)
            self._idle.put_nowait(pooled)

        logger.info(
            f"Connection pool initialized: {self._db_path} "
            f"(size={self._config.pool_size}, timeout={self._config.pool_timeout}s)"
        )

    async def _connect(self) -> aiosqlite.Connection:
        conn = await aiosqlite.connect(self._db_path, timeout=self._options.busy_timeout / 1000.0)
        conn.row_factory = aiosqlite.Row
        for pragma in self._options.pragmas():
            await conn.execute(pragma)
        return conn

    async def acquire(self, timeout: float | None = None) -> PooledConnection:
        """
        유휴 연결 대여

        Raises:
            ConnectionPoolExhaustedError: timeout 안에 유휴 연결이 생기지 않은 경우
        """
        if self._idle is None:
            raise RuntimeError("Connection pool not initialized. Call initialize() first.")
        if self._closed:
            raise RuntimeError("Connection pool is closed.")

        timeout = timeout or self._config.pool_timeout
        try:
            pooled = await asyncio.wait_for(self._idle.get(), timeout=timeout)
        except asyncio.TimeoutError:
            raise ConnectionPoolExhaustedError(
                f"Connection pool exhausted (size={self.size}). Timeout after {timeout}s"
            )

        if pooled.idle_seconds > self._config.max_idle_time:
            try:
                await pooled.connection.close()
                pooled.connection = await self._connect()
                logger.debug(f"Reconnected idle connection: {self._db_path}")
            except Exception:
                self._idle.put_nowait(pooled)
                raise

        pooled.in_use = True
        pooled.touch()
        return pooled

    async def release(self, pooled: PooledConnection) -> None:
        pooled.in_use = False
        pooled.touch()
        if not self._closed:
            self._idle.put_nowait(pooled)

    async def close(self) -> None:
        self._closed = True
        for pooled in self._connections:
            try:
                await pooled.connection.close()
            except Exception as e:
                logger.error(f"Error closing connection: {e}")
        self._connections.clear()
        logger.info("Connection pool closed")
