from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta
from typing import Any, ClassVar
from urllib.parse import urlparse

import structlog
from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from aibtcauth.errors import StoreUnavailableError
from aibtcauth.utils import now

logger = structlog.get_logger(__name__)


class KeyValueStore(ABC):
    """String-keyed store with per-entry expiry and no multi-key transactions.

    Every call is bounded by ``timeout`` seconds and retried up to ``max_retries``
    more times on a transient failure, then StoreUnavailableError is raised.
    A miss (``None``) is a normal answer and is never retried.
    Keys are not logged: some of them embed session tokens.
    """

    transient_errors: ClassVar[tuple[type[BaseException], ...]] = (TimeoutError, ConnectionError)

    def __init__(
        self,
        timeout: float = 2.0,
        max_retries: int = 2,
        retry_delay: float = 0.05,
        clock: Callable[[], datetime] = now,
    ) -> None:
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.clock = clock

    async def on_start(self) -> None:
        """Prepare the backend on application startup."""

    async def close(self) -> None:
        """Release backend resources on application shutdown."""

    async def get(self, key: str) -> str | None:
        """Return the value stored under key, or None if absent or expired."""
        return await self._call("get", lambda: self._get(key))

    async def put(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        """Store value under key, replacing any previous value. None TTL never expires."""
        expires_at = self.clock() + timedelta(seconds=ttl_seconds) if ttl_seconds is not None else None
        await self._call("put", lambda: self._put(key, value, expires_at))

    async def delete(self, key: str) -> None:
        """Remove key if present."""
        await self._call("delete", lambda: self._delete(key))

    @abstractmethod
    async def _get(self, key: str) -> str | None: ...

    @abstractmethod
    async def _put(self, key: str, value: str, expires_at: datetime | None) -> None: ...

    @abstractmethod
    async def _delete(self, key: str) -> None: ...

    async def _call[T](self, operation: str, factory: Callable[[], Awaitable[T]]) -> T:
        attempt = 0
        while True:
            try:
                return await asyncio.wait_for(factory(), timeout=self.timeout)
            except self.transient_errors as e:
                attempt += 1
                if attempt > self.max_retries:
                    raise StoreUnavailableError(f"Key-value store {operation} failed after {attempt} attempts") from e
                logger.warning("store_retry", operation=operation, attempt=attempt, error=type(e).__name__)
                await asyncio.sleep(self.retry_delay * attempt)

    def _is_expired(self, expires_at: datetime | None) -> bool:
        return expires_at is not None and expires_at <= self.clock()


class MongoKeyValueStore(KeyValueStore):
    """Key-value store backed by a MongoDB collection with a TTL index.

    Documents look like ``{_id: key, value: str, expires_at: datetime | None}``.
    The TTL monitor only runs periodically, so reads also drop expired entries.
    """

    transient_errors: ClassVar[tuple[type[BaseException], ...]] = (TimeoutError, ConnectionError, PyMongoError)

    def __init__(self, database_url: str, collection: str = "kv", **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.mongo_client: AsyncMongoClient[dict[str, Any]] = AsyncMongoClient(database_url, tz_aware=True)
        database = self.mongo_client.get_database(urlparse(database_url).path[1:])
        self._collection = database.get_collection(collection)

    async def on_start(self) -> None:
        """Create the TTL index; entries without expires_at never expire."""
        await self._collection.create_index([("expires_at", 1)], expireAfterSeconds=0)

    async def close(self) -> None:
        await self.mongo_client.aclose()

    async def _get(self, key: str) -> str | None:
        document = await self._collection.find_one({"_id": key})
        if document is None or self._is_expired(document.get("expires_at")):
            return None
        return str(document["value"])

    async def _put(self, key: str, value: str, expires_at: datetime | None) -> None:
        await self._collection.replace_one({"_id": key}, {"value": value, "expires_at": expires_at}, upsert=True)

    async def _delete(self, key: str) -> None:
        await self._collection.delete_one({"_id": key})
