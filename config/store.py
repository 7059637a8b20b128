"""
config/store.py
Key-value snapshot store. Each named bucket holds one JSON snapshot of a
whole collection; every save overwrites the bucket.

Reads never raise: an absent key, corrupt JSON or an unreachable backend
yields the caller's default together with ``was_defaulted=True`` so callers
can tell a fresh install from damaged data.
"""

import copy
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from config.settings import settings

logger = logging.getLogger(__name__)


class Bucket(str, Enum):
    BOOKINGS = "bookings"
    PACKAGES = "packages"
    TEACHERS = "teachers"
    TRANSACTIONS = "transactions"
    CMS = "cms"
    SESSION = "session"
    THEME = "theme"


@dataclass(frozen=True)
class LoadResult:
    value: Any
    was_defaulted: bool


def _decode(key: str, raw: Optional[str], default: Any) -> LoadResult:
    if raw is None:
        return LoadResult(default, True)
    try:
        return LoadResult(json.loads(raw), False)
    except (TypeError, ValueError):
        logger.warning(f"Corrupt snapshot in bucket '{key}', falling back to default")
        return LoadResult(default, True)


class BlobStore(ABC):
    """Base class for snapshot stores. Subclasses implement the raw I/O."""

    def __init__(self, prefix: str = ""):
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    @abstractmethod
    async def _read(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    async def _write(self, key: str, raw: str) -> None:
        ...

    @abstractmethod
    async def _remove(self, key: str) -> None:
        ...

    async def load(self, key: str, default: Any = None) -> LoadResult:
        try:
            raw = await self._read(self._key(key))
        except RedisError as e:
            logger.warning(f"Snapshot read failed for '{key}': {e}")
            return LoadResult(default, True)
        return _decode(key, raw, default)

    async def save(self, key: str, value: Any) -> None:
        await self._write(self._key(key), json.dumps(value, default=str))

    async def delete(self, key: str) -> None:
        await self._remove(self._key(key))

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        pass


class RedisBlobStore(BlobStore):
    """Buckets stored as plain Redis string keys."""

    def __init__(self, client: aioredis.Redis, prefix: str = ""):
        super().__init__(prefix)
        self.client = client

    @classmethod
    async def connect(cls, url: str, prefix: str = "") -> "RedisBlobStore":
        client = aioredis.from_url(
            url,
            encoding="utf-8",
            decode_responses=True,
            max_connections=10,
        )
        await client.ping()
        logger.info("Redis snapshot store connected")
        return cls(client, prefix)

    async def ping(self) -> bool:
        try:
            return bool(await self.client.ping())
        except RedisError:
            return False

    async def close(self) -> None:
        await self.client.aclose()

    async def _read(self, key: str) -> Optional[str]:
        return await self.client.get(key)

    async def _write(self, key: str, raw: str) -> None:
        await self.client.set(key, raw)

    async def _remove(self, key: str) -> None:
        await self.client.delete(key)


class MemoryBlobStore(BlobStore):
    """
    In-process store. Used for local runs and tests, and as the ephemeral
    session target (its contents die with the process).
    """

    def __init__(self, prefix: str = "", data: Optional[Dict[str, str]] = None):
        super().__init__(prefix)
        self.data: Dict[str, str] = data if data is not None else {}

    async def _read(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def _write(self, key: str, raw: str) -> None:
        self.data[key] = raw

    async def _remove(self, key: str) -> None:
        self.data.pop(key, None)

    def snapshot(self) -> Dict[str, str]:
        return copy.deepcopy(self.data)


async def build_store() -> BlobStore:
    """Open the durable store named by settings.STORE_BACKEND."""
    if settings.STORE_BACKEND == "memory":
        return MemoryBlobStore(prefix=settings.STORE_KEY_PREFIX)
    if settings.STORE_BACKEND == "redis":
        return await RedisBlobStore.connect(settings.REDIS_URL, prefix=settings.STORE_KEY_PREFIX)
    raise ValueError(f"Unknown STORE_BACKEND: {settings.STORE_BACKEND}")
