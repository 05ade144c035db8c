"""Redis-backed metadata store."""

import json
import logging
from contextlib import contextmanager
from typing import Dict, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from image_repo.metadata.base import (
    BaseMetadataStore,
    MetadataStoreError,
    Record,
    RecordNotFoundError,
    split_path,
)

logger = logging.getLogger(__name__)


@contextmanager
def _redis_errors(action: str, path: str):
    try:
        yield
    except RedisError as e:
        logger.error(f"Redis {action} failed for {path}: {e}")
        raise MetadataStoreError(f"Failed to {action} {path}: {e}")


class RedisMetadataStore(BaseMetadataStore):
    """Metadata store keeping each record as a JSON string in Redis.

    Layout:
        {prefix}:doc:{namespace}:{key}  -> JSON record
        {prefix}:index:{namespace}      -> set of record keys

    Read-modify-write operations (``update``, ``increment``, ``set_if_absent``)
    run inside a WATCH/MULTI transaction and are retried by redis-py when
    another client touches the record in between. A record and its index
    entry are always written in the same transaction.

    Example:
        >>> store = RedisMetadataStore("redis://localhost:6379/0")
        >>> await store.set("images/abc123", {"id": "abc123"})
    """

    def __init__(self, url: str, prefix: str = "image_repo", client: Optional[redis.Redis] = None):
        self.url = url
        self.prefix = prefix
        self._client = client

    @property
    def client(self) -> redis.Redis:
        """Get or create Redis client."""
        if self._client is None:
            self._client = redis.from_url(self.url, decode_responses=True)
            logger.info("Redis client initialized for metadata store")
        return self._client

    def _doc_key(self, path: str) -> str:
        namespace, key = split_path(path)
        return f"{self.prefix}:doc:{namespace}:{key}"

    def _index_key(self, namespace: str) -> str:
        return f"{self.prefix}:index:{namespace.strip('/')}"

    async def get(self, path: str) -> Optional[Record]:
        with _redis_errors("read", path):
            data = await self.client.get(self._doc_key(path))

        if data is None:
            return None
        return json.loads(data)

    async def set(self, path: str, record: Record) -> None:
        namespace, key = split_path(path)
        with _redis_errors("write", path):
            async with self.client.pipeline(transaction=True) as pipe:
                pipe.set(self._doc_key(path), json.dumps(record))
                pipe.sadd(self._index_key(namespace), key)
                await pipe.execute()

    async def update(self, path: str, fields: Record) -> None:
        namespace, key = split_path(path)
        doc_key = self._doc_key(path)

        async def merge(pipe) -> None:
            current = await pipe.get(doc_key)
            if current is None:
                raise RecordNotFoundError(f"Cannot update: no record at {path}")
            record = json.loads(current)
            record.update(fields)
            pipe.multi()
            pipe.set(doc_key, json.dumps(record))
            pipe.sadd(self._index_key(namespace), key)

        with _redis_errors("update", path):
            await self.client.transaction(merge, doc_key)

    async def delete(self, path: str) -> None:
        namespace, key = split_path(path)
        with _redis_errors("delete", path):
            async with self.client.pipeline(transaction=True) as pipe:
                pipe.delete(self._doc_key(path))
                pipe.srem(self._index_key(namespace), key)
                await pipe.execute()

    async def list_children(self, namespace: str) -> Dict[str, Record]:
        with _redis_errors("list", namespace):
            keys = sorted(await self.client.smembers(self._index_key(namespace)))
            if not keys:
                return {}
            values = await self.client.mget(
                [self._doc_key(f"{namespace}/{key}") for key in keys]
            )

        children = {}
        for key, value in zip(keys, values):
            # Index entries can outlive a record deleted by another client
            if value is None:
                continue
            children[key] = json.loads(value)
        return children

    async def set_if_absent(self, path: str, record: Record) -> bool:
        namespace, key = split_path(path)
        doc_key = self._doc_key(path)

        async def claim(pipe) -> bool:
            taken = await pipe.exists(doc_key)
            pipe.multi()
            if not taken:
                pipe.set(doc_key, json.dumps(record))
                pipe.sadd(self._index_key(namespace), key)
            return not taken

        with _redis_errors("create", path):
            return await self.client.transaction(claim, doc_key, value_from_callable=True)

    async def increment(self, path: str, field: str, amount: int = 1) -> int:
        doc_key = self._doc_key(path)

        async def bump(pipe) -> int:
            current = await pipe.get(doc_key)
            if current is None:
                raise RecordNotFoundError(f"Cannot increment {field}: no record at {path}")
            record = json.loads(current)
            record[field] = (record.get(field) or 0) + amount
            pipe.multi()
            pipe.set(doc_key, json.dumps(record))
            return record[field]

        with _redis_errors("increment", path):
            return await self.client.transaction(bump, doc_key, value_from_callable=True)

    async def ping(self) -> bool:
        try:
            return bool(await self.client.ping())
        except RedisError:
            return False

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
