from __future__ import annotations

import secrets
import time
from typing import Callable, Optional

from redis.asyncio import Redis

from portal.domain.ports.session_store import SessionStorePort


class RedisSessions(SessionStorePort):
    """
    Bearer sessions as `sess:<token> -> user_id` keys with a TTL.
    A sorted set (`sess:index`, score = expiry epoch) tracks open sessions so
    the cleanup sweep can report and drop entries Redis already expired.
    """

    def __init__(
        self,
        redis: Redis,
        *,
        key_prefix: str = "sess:",
        ttl_seconds: int = 86400,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._redis = redis
        self._prefix = key_prefix
        self._ttl = ttl_seconds
        self._clock = clock

    def _key(self, token: str) -> str:
        return f"{self._prefix}{token}"

    @property
    def _index(self) -> str:
        return f"{self._prefix}index"

    async def create(self, user_id: str) -> str:
        token = secrets.token_urlsafe(32)
        pipe = self._redis.pipeline(transaction=True)
        pipe.set(self._key(token), user_id, ex=self._ttl)
        pipe.zadd(self._index, {token: self._clock() + self._ttl})
        await pipe.execute()
        return token

    async def get(self, token: str) -> Optional[str]:
        return await self._redis.get(self._key(token))

    async def revoke(self, token: str) -> None:
        pipe = self._redis.pipeline(transaction=True)
        pipe.delete(self._key(token))
        pipe.zrem(self._index, token)
        await pipe.execute()

    async def purge_expired(self) -> int:
        return int(await self._redis.zremrangebyscore(self._index, "-inf", self._clock()))
