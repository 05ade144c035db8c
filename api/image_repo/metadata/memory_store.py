"""In-process metadata store for development and tests."""

import copy
from typing import Dict, Optional

from image_repo.metadata.base import (
    BaseMetadataStore,
    Record,
    RecordNotFoundError,
    split_path,
)


class MemoryMetadataStore(BaseMetadataStore):
    """Dict-backed metadata store.

    Records are deep-copied on the way in and out so callers never share
    state with the store. No method awaits between reading and writing, so
    every operation is atomic with respect to other coroutines on the loop.
    """

    def __init__(self):
        self._namespaces: Dict[str, Dict[str, Record]] = {}

    def _bucket(self, namespace: str) -> Dict[str, Record]:
        return self._namespaces.setdefault(namespace.strip("/"), {})

    async def get(self, path: str) -> Optional[Record]:
        namespace, key = split_path(path)
        record = self._bucket(namespace).get(key)
        return copy.deepcopy(record) if record is not None else None

    async def set(self, path: str, record: Record) -> None:
        namespace, key = split_path(path)
        self._bucket(namespace)[key] = copy.deepcopy(record)

    async def update(self, path: str, fields: Record) -> None:
        namespace, key = split_path(path)
        record = self._bucket(namespace).get(key)
        if record is None:
            raise RecordNotFoundError(f"Cannot update: no record at {path}")
        record.update(copy.deepcopy(fields))

    async def delete(self, path: str) -> None:
        namespace, key = split_path(path)
        self._bucket(namespace).pop(key, None)

    async def list_children(self, namespace: str) -> Dict[str, Record]:
        return copy.deepcopy(self._bucket(namespace))

    async def set_if_absent(self, path: str, record: Record) -> bool:
        namespace, key = split_path(path)
        bucket = self._bucket(namespace)
        if key in bucket:
            return False
        bucket[key] = copy.deepcopy(record)
        return True

    async def increment(self, path: str, field: str, amount: int = 1) -> int:
        namespace, key = split_path(path)
        record = self._bucket(namespace).get(key)
        if record is None:
            raise RecordNotFoundError(f"Cannot increment {field}: no record at {path}")
        record[field] = (record.get(field) or 0) + amount
        return record[field]

    async def ping(self) -> bool:
        return True
