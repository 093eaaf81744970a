import copy
from typing import Any
from app.platform.ports.kv_store import KeyValueStorePort

class InMemoryKeyValueStore(KeyValueStorePort):
    """Process-local store. Values are copied on the way in and out so callers
    never share a mutable reference with the stored state."""

    def __init__(self):
        self._data: dict[str, Any] = {}

    async def get(self, key: str) -> Any | None:
        value = self._data.get(key)
        return copy.deepcopy(value) if value is not None else None

    async def put(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)
