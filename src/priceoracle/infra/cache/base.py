from abc import ABC, abstractmethod


class CacheBackend(ABC):
    """Short-lived key -> JSON-compatible value storage."""

    name: str = "cache"

    @abstractmethod
    async def get(self, key: str) -> dict | None: ...

    @abstractmethod
    async def set(self, key: str, value: dict, ttl_seconds: int) -> None: ...
