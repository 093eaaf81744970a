"""Platform adapters used by the consent stack."""

from __future__ import annotations

from datetime import timedelta

import pytest

from app.core.paging import decode_cursor, next_cursor, offset_from_cursor
from app.platform.adapters.clock_system import FrozenClock, SystemClock
from app.platform.adapters.store_memory import InMemoryKeyValueStore
from app.platform.ports.kv_store import KeyValueStorePort

from conftest import T0


@pytest.mark.asyncio
async def test_memory_store_isolates_stored_values() -> None:
    store = InMemoryKeyValueStore()
    value = {"ids": ["a"]}
    await store.put("k", value)

    value["ids"].append("b")
    fetched = await store.get("k")
    fetched["ids"].append("c")

    assert await store.get("k") == {"ids": ["a"]}


@pytest.mark.asyncio
async def test_memory_store_delete() -> None:
    store = InMemoryKeyValueStore()
    await store.put("k", 1)
    await store.delete("k")
    await store.delete("never-there")
    assert await store.get("k") is None
    assert isinstance(store, KeyValueStorePort)


def test_frozen_clock_moves_only_on_demand() -> None:
    clock = FrozenClock(T0)
    assert clock.now() == T0
    assert clock.advance(days=1) == T0 + timedelta(days=1)
    clock.set(T0)
    assert clock.now() == T0


def test_system_clock_is_utc_aware() -> None:
    assert SystemClock().now().utcoffset() == timedelta(0)


def test_cursor_round_trip_and_garbage() -> None:
    assert offset_from_cursor(next_cursor(0, 2, 3)) == 2
    assert next_cursor(2, 2, 3) is None
    assert offset_from_cursor(None) == 0
    assert decode_cursor("%%%not-base64") is None
    assert offset_from_cursor("%%%not-base64") == 0


class FakeRedis:
    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.stream: list[tuple[str, dict]] = []

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value):
        self.data[key] = value

    async def delete(self, key):
        self.data.pop(key, None)

    async def xadd(self, name, fields, maxlen=None, approximate=True):
        self.stream.append((name, fields))


@pytest.fixture
def fake_redis(monkeypatch) -> FakeRedis:
    from app.core.redis import redis_manager

    fake = FakeRedis()
    monkeypatch.setattr(redis_manager, "redis", fake)
    return fake


@pytest.mark.asyncio
async def test_redis_store_serializes_under_prefix(fake_redis) -> None:
    from app.platform.adapters.store_redis import RedisKeyValueStore

    store = RedisKeyValueStore(prefix="t:")
    await store.put("consent:1", {"status": "active"})

    assert fake_redis.data == {"t:consent:1": '{"status": "active"}'}
    assert await store.get("consent:1") == {"status": "active"}
    await store.delete("consent:1")
    assert await store.get("consent:1") is None


@pytest.mark.asyncio
async def test_redis_bus_appends_to_stream(fake_redis) -> None:
    from app.platform.adapters.bus_redis import RedisEventBus

    await RedisEventBus().publish("consent.events", "c-1", {"event_type": "consent.created"})

    name, fields = fake_redis.stream[0]
    assert name == "consent.events"
    assert fields["key"] == "c-1"
    assert '"consent.created"' in fields["value"]


def test_serve_runs_uvicorn_with_configured_address(monkeypatch) -> None:
    import uvicorn

    from app import serve
    from app.core.config import settings

    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda *args, **kwargs: calls.append((args, kwargs)))
    monkeypatch.setattr(settings, "PORT", 9100)

    serve.main()

    (args, kwargs), = calls
    assert args == ("app.main:app",)
    assert kwargs["port"] == 9100
    assert kwargs["host"] == settings.HOST
    assert kwargs["reload"] is (settings.ENV == "local")
