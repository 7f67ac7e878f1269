"""
database 패키지 (SQLite3) 테스트

테스트 항목:
1. 커넥션풀: 대여/반환, 소진 타임아웃, 반환 대기, 유휴 연결 재연결
2. 트랜잭션 컨텍스트: 이중 begin, 쓰기 쿼리 판별
3. @transactional: 커밋, 예외 롤백, 중첩 호출 시 트랜잭션 재사용
4. 읽기 전용 트랜잭션
5. init.sql 스키마와 외래키 (CASCADE / SET NULL)
6. SQL 디버그 로그
7. 다중 DB 트랜잭션과 DatabaseRegistry
"""

import asyncio
import logging
from pathlib import Path

import pytest
import pytest_asyncio

from database import (
    ConnectionPoolExhaustedError,
    DatabaseNotFoundError,
    NoActiveTransactionError,
    ReadOnlyTransactionError,
    TransactionError,
    get_connection,
    get_db,
    transactional,
    transactional_readonly,
)
from database.registry import DatabaseRegistry
from database.sqlite3.transaction import is_write_query

NOW = "2024-01-01T10:00:00+00:00"

ADD_JOB = "INSERT INTO jobs (name, url, created_at) VALUES (?, ?, ?)"
FIND_JOB = "SELECT * FROM jobs WHERE name = ?"
COUNT_JOBS = "SELECT COUNT(*) FROM jobs"


def sqlite_config(tmp_path: Path, *names: str, **pool) -> dict:
    pool.setdefault("pool_size", 3)
    return {
        "databases": {
            name: {"type": "sqlite3", "path": str(tmp_path / f"{name}.db"), "pool": dict(pool)}
            for name in names
        }
    }


async def open_registry(config: dict):
    DatabaseRegistry.clear()
    await DatabaseRegistry.init_from_config(config)


async def close_registry():
    await DatabaseRegistry.close_all()
    DatabaseRegistry.clear()


@pytest_asyncio.fixture
async def db(tmp_path):
    await open_registry(sqlite_config(tmp_path, "default"))
    yield get_db("default")
    await close_registry()


async def add_job(name: str, url: str = "https://example.com/list") -> int:
    cursor = await get_connection().execute(ADD_JOB, (name, url, NOW))
    return cursor.lastrowid


# ---------------------------------------------------------------------------
# 커넥션풀
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_pool_lends_and_takes_back(db):
    pool = db.pool
    assert (pool.size, pool.available) == (3, 3)

    first = await pool.acquire()
    second = await pool.acquire()
    assert first is not second
    assert first.in_use and second.in_use
    assert pool.available == 1

    await pool.release(first)
    await pool.release(second)
    assert pool.available == 3
    assert not first.in_use


@pytest.mark.asyncio
async def test_pool_exhausted_raises_after_timeout(db):
    pool = db.pool
    held = [await pool.acquire() for _ in range(pool.size)]

    with pytest.raises(ConnectionPoolExhaustedError):
        await pool.acquire(timeout=0.1)

    for pooled in held:
        await pool.release(pooled)
    assert pool.available == pool.size


@pytest.mark.asyncio
async def test_pool_waiter_gets_released_connection(db):
    pool = db.pool
    held = [await pool.acquire() for _ in range(pool.size)]

    async def give_back_later():
        await asyncio.sleep(0.05)
        await pool.release(held[-1])

    giver = asyncio.create_task(give_back_later())
    pooled = await pool.acquire(timeout=2.0)
    await giver

    assert pooled is held[-1]
    for item in [pooled, *held[:-1]]:
        await pool.release(item)


@pytest.mark.asyncio
async def test_idle_connection_is_reconnected(tmp_path):
    await open_registry(sqlite_config(tmp_path, "default", pool_size=1, max_idle_time=0))
    try:
        pool = get_db("default").pool
        pooled = await pool.acquire()
        old_connection = pooled.connection
        await pool.release(pooled)

        again = await pool.acquire()
        assert again is pooled
        assert again.connection is not old_connection
        await pool.release(again)
    finally:
        await close_registry()


# ---------------------------------------------------------------------------
# 트랜잭션
# ---------------------------------------------------------------------------

def test_write_query_detection():
    assert is_write_query("  insert into jobs VALUES (1)")
    assert is_write_query("DELETE FROM schedules")
    assert not is_write_query("SELECT * FROM page_records")
    assert not is_write_query("PRAGMA foreign_keys")


@pytest.mark.asyncio
async def test_begin_twice_is_rejected(db):
    async with db.transaction() as ctx:
        assert ctx.active
        with pytest.raises(TransactionError):
            await ctx.begin()


@pytest.mark.asyncio
async def test_transactional_commits_with_column_defaults(db):
    @transactional
    async def create():
        return await add_job("news")

    job_id = await create()
    assert job_id == 1

    async with db.transaction(readonly=True) as ctx:
        row = await ctx.fetch_one(FIND_JOB, ("news",))

    assert row["method"] == "browser"
    assert row["selectors"] == "{}"
    assert row["status"] == "inactive"
    assert row["max_pages"] == 100


@pytest.mark.asyncio
async def test_transactional_rolls_back_on_error(db):
    @transactional(db)
    async def create_then_fail():
        await add_job("broken")
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await create_then_fail()

    async with db.transaction(readonly=True) as ctx:
        assert await ctx.fetch_val(COUNT_JOBS) == 0
    assert db.pool.available == db.pool.size


@pytest.mark.asyncio
async def test_nested_transactional_reuses_outer_transaction(db):
    seen = []

    @transactional
    async def inner():
        seen.append(get_connection())
        await add_job("inner")

    @transactional
    async def outer():
        seen.append(get_connection())
        await inner()
        # 중첩 호출은 연결을 추가로 빌리지 않음
        assert db.pool.available == db.pool.size - 1
        raise ValueError("undo both")

    with pytest.raises(ValueError):
        await outer()

    assert seen[0] is seen[1]
    async with db.transaction(readonly=True) as ctx:
        assert await ctx.fetch_val(COUNT_JOBS) == 0


@pytest.mark.asyncio
async def test_readonly_transaction_blocks_writes(db):
    @transactional_readonly
    async def sneaky_write():
        await add_job("nope")

    with pytest.raises(ReadOnlyTransactionError):
        await sneaky_write()


@pytest.mark.asyncio
async def test_concurrent_writers_each_commit(db):
    @transactional(db)
    async def create(name):
        return await add_job(name)

    ids = await asyncio.gather(*(create(f"job-{i}") for i in range(4)))

    assert sorted(ids) == [1, 2, 3, 4]
    async with db.transaction(readonly=True) as ctx:
        assert await ctx.fetch_val(COUNT_JOBS) == 4


@pytest.mark.asyncio
async def test_connection_outside_transaction_raises(db):
    with pytest.raises(NoActiveTransactionError):
        get_connection()


# ---------------------------------------------------------------------------
# 스키마 / 외래키
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_schema_tables_exist(db):
    async with db.transaction(readonly=True) as ctx:
        rows = await ctx.fetch_all("SELECT name FROM sqlite_master WHERE type = 'table'")
    assert {"jobs", "schedules", "page_records"} <= {row["name"] for row in rows}


@pytest.mark.asyncio
async def test_deleting_job_cascades_records_and_detaches_schedules(db):
    async with db.transaction() as ctx:
        job_id = await add_job("shop")
        await ctx.execute(
            "INSERT INTO page_records (job_id, url, data, scraped_at) VALUES (?, ?, ?, ?)",
            (job_id, "https://example.com/1", '{"title": "a"}', NOW),
        )
        await ctx.execute(
            "INSERT INTO schedules (job_id, name, frequency, created_at) VALUES (?, ?, ?, ?)",
            (job_id, "daily shop", "daily", NOW),
        )

    async with db.transaction() as ctx:
        await ctx.execute("DELETE FROM jobs WHERE id = ?", (job_id,))

    async with db.transaction(readonly=True) as ctx:
        assert await ctx.fetch_val("SELECT COUNT(*) FROM page_records") == 0
        schedule = await ctx.fetch_one("SELECT job_id, is_active FROM schedules")

    assert schedule["job_id"] is None
    assert schedule["is_active"] == 1


# ---------------------------------------------------------------------------
# 로깅
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_sql_is_logged_at_debug(db, caplog):
    with caplog.at_level(logging.DEBUG, logger="database.sqlite3.transaction"):
        async with db.transaction(readonly=True) as ctx:
            await ctx.fetch_all("SELECT * FROM schedules\n   WHERE is_active = ?", (1,))

    messages = [record.getMessage() for record in caplog.records]
    assert "[SQL] SELECT * FROM schedules WHERE is_active = ? | params: (1,)" in messages


# ---------------------------------------------------------------------------
# 다중 DB
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def two_dbs(tmp_path):
    await open_registry(sqlite_config(tmp_path, "default", "archive", pool_size=2))
    yield get_db("default"), get_db("archive")
    await close_registry()


@pytest.mark.asyncio
async def test_multi_db_commit_and_rollback(two_dbs):
    main_db, archive_db = two_dbs

    @transactional(main_db, archive_db)
    async def copy_job(name, fail=False):
        await get_connection("default").execute(ADD_JOB, (name, "https://a", NOW))
        await get_connection("archive").execute(ADD_JOB, (name, "https://a", NOW))
        if fail:
            raise ValueError("archive mismatch")

    await copy_job("kept")
    with pytest.raises(ValueError):
        await copy_job("dropped", fail=True)

    for target in (main_db, archive_db):
        async with target.transaction(readonly=True) as ctx:
            assert await ctx.fetch_one(FIND_JOB, ("kept",)) is not None
            assert await ctx.fetch_one(FIND_JOB, ("dropped",)) is None


@pytest.mark.asyncio
async def test_registry_lookup(two_dbs):
    main_db, archive_db = two_dbs

    assert get_db() is main_db
    assert get_db("archive") is archive_db
    assert set(DatabaseRegistry.get_all()) == {"default", "archive"}

    with pytest.raises(DatabaseNotFoundError):
        get_db("missing")
