from app.core.config import settings
from app.platform.ports.event_bus import EventBusPort
from app.platform.adapters.bus_noop import NoopEventBus
from app.platform.adapters.bus_redis import RedisEventBus
from app.platform.ports.kv_store import KeyValueStorePort
from app.platform.adapters.store_memory import InMemoryKeyValueStore
from app.platform.adapters.store_redis import RedisKeyValueStore
from app.platform.ports.clock import ClockPort
from app.platform.adapters.clock_system import SystemClock

class ProviderRegistry:
    _kv_store: KeyValueStorePort | None = None
    _event_bus: EventBusPort | None = None
    _clock: ClockPort | None = None

    @classmethod
    def kv_store(cls) -> KeyValueStorePort:
        if cls._kv_store is None:
            if settings.STORAGE_PROVIDER == "redis":
                cls._kv_store = RedisKeyValueStore()
            else:
                cls._kv_store = InMemoryKeyValueStore()
        return cls._kv_store

    @classmethod
    def event_bus(cls) -> EventBusPort:
        if cls._event_bus is None:
            prov = (settings.EVENT_BUS_PROVIDER or "noop").lower()
            if prov == "redis":
                cls._event_bus = RedisEventBus()
            else:
                cls._event_bus = NoopEventBus()
        return cls._event_bus

    @classmethod
    def clock(cls) -> ClockPort:
        if cls._clock is None:
            cls._clock = SystemClock()
        return cls._clock

    @classmethod
    def override(cls, *, kv_store: KeyValueStorePort | None = None, event_bus: EventBusPort | None = None, clock: ClockPort | None = None) -> None:
        if kv_store is not None:
            cls._kv_store = kv_store
        if event_bus is not None:
            cls._event_bus = event_bus
        if clock is not None:
            cls._clock = clock

    @classmethod
    def reset(cls) -> None:
        cls._kv_store = None
        cls._event_bus = None
        cls._clock = None

registry = ProviderRegistry()
