import psycopg
import pytest
import pytest_asyncio
from redis.asyncio import Redis
from redis.exceptions import ConnectionError as RedisConnectionError

from portal.settings import get_settings


@pytest_asyncio.fixture
async def redis_client():
    r = Redis.from_url(
        get_settings().redis_url,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=2,
    )
    try:
        await r.ping()
    except (RedisConnectionError, OSError) as e:
        await r.aclose()
        pytest.skip(f"redis not reachable: {e}")
    try:
        yield r
    finally:
        await r.aclose()


@pytest_asyncio.fixture
async def conn():
    """
    A connection to the real Postgres (schema from ./migrations applied).
    Everything a test writes is rolled back afterwards.
    """
    try:
        c = await psycopg.AsyncConnection.connect(
            get_settings().database_url, connect_timeout=2
        )
    except psycopg.OperationalError as e:
        pytest.skip(f"postgres not reachable: {e}")

    try:
        async with c.cursor() as cur:
            await cur.execute("SELECT to_regclass('verification_tokens');")
            row = await cur.fetchone()
        if not row or row[0] is None:
            pytest.skip("schema not migrated; run `python -m portal.infrastructure.db.migrate up`")
        yield c
    finally:
        await c.rollback()
        await c.close()
