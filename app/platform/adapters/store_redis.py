import json
from typing import Any
from app.platform.ports.kv_store import KeyValueStorePort
from app.core.config import settings
from app.core.redis import redis_manager

class RedisKeyValueStore(KeyValueStorePort):
    def __init__(self, prefix: str | None = None):
        self.redis = redis_manager.client()
        self.prefix = prefix if prefix is not None else settings.REDIS_KEY_PREFIX

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def get(self, key: str) -> Any | None:
        raw = await self.redis.get(self._key(key))
        if raw is None:
            return None
        return json.loads(raw)

    async def put(self, key: str, value: Any) -> None:
        await self.redis.set(self._key(key), json.dumps(value, default=str))

    async def delete(self, key: str) -> None:
        await self.redis.delete(self._key(key))