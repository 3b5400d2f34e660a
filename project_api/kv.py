"""
Key-value store abstraction.

Supports an in-memory fallback for tests/local runs and a Redis-backed
implementation for production.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional, Protocol

import redis.asyncio as redis

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


class KeyValueStore(Protocol):
    """String-keyed storage of serialized JSON values with prefix listing."""

    async def get(self, key: str) -> Optional[str]:
        ...

    async def put(self, key: str, value: str) -> None:
        ...

    async def delete(self, key: str) -> None:
        ...

    async def list(self, prefix: str) -> list[str]:
        ...


@dataclass
class InMemoryKeyValueStore:
    """Dict-backed store for testing/dev. Lists keys in insertion order."""

    items: dict[str, str] = field(default_factory=dict)

    async def get(self, key: str) -> Optional[str]:
        return self.items.get(key)

    async def put(self, key: str, value: str) -> None:
        self.items[key] = value

    async def delete(self, key: str) -> None:
        self.items.pop(key, None)

    async def list(self, prefix: str) -> list[str]:
        return [key for key in self.items if key.startswith(prefix)]

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.items.clear()


@dataclass
class RedisKeyValueStore:
    """
    Redis-backed store using plain string keys.

    ``namespace`` is prepended to every key so several deployments can share
    one database; it is stripped again from listed keys.
    """

    url: str
    namespace: str = ""

    def __post_init__(self):
        self.client = redis.Redis.from_url(self.url, decode_responses=True)

    def _key(self, key: str) -> str:
        return f"{self.namespace}{key}"

    async def get(self, key: str) -> Optional[str]:
        return await self.client.get(self._key(key))

    async def put(self, key: str, value: str) -> None:
        await self.client.set(self._key(key), value)

    async def delete(self, key: str) -> None:
        await self.client.delete(self._key(key))

    async def list(self, prefix: str) -> list[str]:
        pattern = _GLOB_SPECIAL.sub(r"\\\1", self._key(prefix)) + "*"
        keys: list[str] = []
        async for key in self.client.scan_iter(match=pattern):
            keys.append(key[len(self.namespace):])
        return keys

    async def close(self) -> None:
        await self.client.aclose()
