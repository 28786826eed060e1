"""Generic datastore interface.

Any key-value backend that stores opaque bytes under hierarchical keys can
implement ``Datastore``. Backends provide the single-key operations, a batch
factory and ``_all``, the raw query source; the generic query stage
(filters, orders, offset and limit) and the bulk helpers are shared.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Iterator, Optional

from s3_datastore.key import Key

from .query import Query, QueryEntry, apply_query


class Batch(ABC):
    """Buffered puts and deletes committed together."""

    @abstractmethod
    def put(self, key: Key, value: bytes) -> None:
        """Buffer a put."""

    @abstractmethod
    def delete(self, key: Key) -> None:
        """Buffer a delete."""

    @abstractmethod
    def commit(self) -> None:
        """Apply every buffered operation."""


class Datastore(ABC):
    """A key-value store of opaque bytes under hierarchical keys."""

    def open(self) -> None:
        """Prepare the store for use."""

    def close(self) -> None:
        """Release resources held by the store."""

    def __enter__(self) -> "Datastore":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @abstractmethod
    def put(self, key: Key, value: bytes) -> None:
        """Store ``value`` under ``key``."""

    @abstractmethod
    def get(self, key: Key) -> Optional[bytes]:
        """Return the value stored under ``key``."""

    @abstractmethod
    def has(self, key: Key) -> bool:
        """Return True when ``key`` holds a value."""

    @abstractmethod
    def delete(self, key: Key) -> None:
        """Remove the value stored under ``key``."""

    @abstractmethod
    def batch(self) -> Batch:
        """Return an empty batch bound to this store."""

    @abstractmethod
    def _all(self, query: Query) -> Iterator[QueryEntry]:
        """Yield entries matching ``query.prefix`` and ``query.keys_only``."""

    def query(self, query: Query) -> Iterator[QueryEntry]:
        """Run ``query`` lazily and yield the matching entries."""
        return apply_query(self._all(query), query)

    def put_many(
        self, pairs: Iterable[tuple[Key, bytes]]
    ) -> Iterator[tuple[Key, bytes]]:
        """Store each pair, yielding it once stored."""
        for key, value in pairs:
            self.put(key, value)
            yield key, value

    def get_many(self, keys: Iterable[Key]) -> Iterator[Optional[bytes]]:
        """Yield the value of each key in turn."""
        for key in keys:
            yield self.get(key)

    def delete_many(self, keys: Iterable[Key]) -> Iterator[Key]:
        """Delete each key, yielding it once deleted."""
        for key in keys:
            self.delete(key)
            yield key
