from typing import Any, Protocol, runtime_checkable

@runtime_checkable
class KeyValueStorePort(Protocol):
    """JSON-compatible values by string key. Callers own the key layout."""

    async def get(self, key: str) -> Any | None: ...

    async def put(self, key: str, value: Any) -> None: ...

    async def delete(self, key: str) -> None: ...
