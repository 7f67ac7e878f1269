"""
SQLite3 비동기 데이터베이스 패키지 (aiosqlite + aiosql)

DatabaseRegistry.init_from_config()가 type: sqlite3 설정으로 SQLiteDatabase를 만듭니다.
"""

from database.sqlite3.connection import SQLiteDatabase
from database.sqlite3.pool import AsyncConnectionPool, PoolConfig, PooledConnection, SqliteOptions
from database.sqlite3.transaction import TransactionContext

__all__ = [
    'SQLiteDatabase',
    'AsyncConnectionPool',
    'PoolConfig',
    'PooledConnection',
    'SqliteOptions',
    'TransactionContext',
]
