from redis import asyncio as aioredis
from app.core.config import settings


class RedisManager:
    def __init__(self):
        self.redis = None

    def client(self) -> aioredis.Redis:
        """Shared client, created on first use from REDIS_URL."""
        if self.redis is None:
            if not settings.REDIS_URL:
                raise RuntimeError("REDIS_URL not configured")
            self.redis = aioredis.from_url(
                settings.REDIS_URL,
                encoding="utf-8",
                decode_responses=True
            )
        return self.redis

    async def close(self):
        """Close Redis connection (called on FastAPI shutdown)."""
        if self.redis:
            await self.redis.close()
            self.redis = None

redis_manager = RedisManager()
