import json
import logging
from contextlib import asynccontextmanager
from typing import Any

import redis.asyncio as redis
from idvdemo.core.errors import StoreUnavailable

logger = logging.getLogger(__name__)

KEY_PREFIX = "idv"


@asynccontextmanager
async def _store_errors(operation: str, key: str):
    try:
        yield
    except redis.RedisError as e:
        logger.error(f"Key-value store {operation} failed for {key}: {e}")
        raise StoreUnavailable(str(e)) from e


class KeyValueStore:
    """JSON values in Redis under a shared key prefix.

    Every call is a single attempt; Redis errors surface as StoreUnavailable.
    """

    def __init__(self, client: redis.Redis, prefix: str = KEY_PREFIX):
        self.client = client
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    async def put(self, key: str, value: Any, ttl: int | None = None) -> None:
        async with _store_errors("put", key):
            await self.client.set(self._key(key), json.dumps(value), ex=ttl)

    async def get(self, key: str) -> Any | None:
        async with _store_errors("get", key):
            raw = await self.client.get(self._key(key))
        return json.loads(raw) if raw is not None else None

    async def delete(self, *keys: str) -> None:
        async with _store_errors("delete", ",".join(keys)):
            await self.client.delete(*(self._key(k) for k in keys))

    async def push_capped(
        self,
        key: str,
        value: Any,
        cap: int,
        ttl: int,
        also_set: tuple[str, Any] | None = None,
    ) -> None:
        """Prepend ``value`` to a list, keep the newest ``cap`` items and reset the
        list's TTL, all in one MULTI/EXEC transaction.

        ``also_set`` is an optional ``(key, value)`` written with the same TTL
        inside that transaction, so either both writes land or neither does.
        """
        full_key = self._key(key)
        async with _store_errors("push", key):
            async with self.client.pipeline(transaction=True) as pipe:
                pipe.lpush(full_key, json.dumps(value))
                pipe.ltrim(full_key, 0, cap - 1)
                pipe.expire(full_key, ttl)
                if also_set is not None:
                    extra_key, extra_value = also_set
                    pipe.set(self._key(extra_key), json.dumps(extra_value), ex=ttl)
                await pipe.execute()

    async def read_list(self, key: str) -> list[Any]:
        async with _store_errors("read", key):
            items = await self.client.lrange(self._key(key), 0, -1)
        return [json.loads(item) for item in items]

    async def ping(self) -> bool:
        async with _store_errors("ping", "-"):
            return bool(await self.client.ping())
