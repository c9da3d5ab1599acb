"""
Key/value storage for relying-party data such as provider metadata.

``Storage`` wraps any ``ObjectStore`` backend. It overwrites existing entries
on store and tolerates reads and removals of absent entries.
"""

from typing import Dict, Generic, Optional, Protocol, TypeVar

from ..shared.errors import StorageError
from ..shared.logging import get_logger

T = TypeVar("T")


class ObjectStore(Protocol[T]):
    """Minimal backend contract."""

    def store(self, key: str, value: T) -> None: ...

    def retrieve(self, key: str) -> T: ...

    def contains(self, key: str) -> bool: ...

    def remove(self, key: str) -> None: ...


class InMemoryObjectStore(Generic[T]):
    """Dict-backed object store. Storing an existing key is an error, as in most backends."""

    def __init__(self) -> None:
        self._entries: Dict[str, T] = {}

    def store(self, key: str, value: T) -> None:
        if key in self._entries:
            raise KeyError(f"Entry already exists: {key}")
        self._entries[key] = value

    def retrieve(self, key: str) -> T:
        return self._entries[key]

    def contains(self, key: str) -> bool:
        return key in self._entries

    def remove(self, key: str) -> None:
        del self._entries[key]


class Storage(Generic[T]):
    """Store, read and remove data in an object store."""

    def __init__(self, store: ObjectStore[T]):
        self.store = store
        self.logger = get_logger("oidc.storage")

    def store_data(self, entry_id: str, data: T) -> None:
        """Store ``data`` under ``entry_id``, replacing any existing entry."""
        try:
            if self.store.contains(entry_id):
                self.store.remove(entry_id)
            self.store.store(entry_id, data)
        except Exception as e:
            self.logger.error("Failed to store data", entry_id=entry_id, error=str(e))
            raise StorageError(f"Could not store entry {entry_id}", details={"error": str(e)}) from e

    def get_data(self, entry_id: str) -> Optional[T]:
        """Return the stored data, or ``None`` when the entry is absent."""
        try:
            if self.store.contains(entry_id):
                return self.store.retrieve(entry_id)
            return None
        except Exception as e:
            self.logger.error("Failed to read data", entry_id=entry_id, error=str(e))
            raise StorageError(f"Could not read entry {entry_id}", details={"error": str(e)}) from e

    def contains_data(self, entry_id: Optional[str]) -> bool:
        """True if an entry with ``entry_id`` exists."""
        if entry_id is None:
            return False
        try:
            return self.store.contains(entry_id)
        except Exception as e:
            self.logger.error("Failed to check data", entry_id=entry_id, error=str(e))
            raise StorageError(f"Could not read entry {entry_id}", details={"error": str(e)}) from e

    def remove_data(self, entry_id: str) -> None:
        """Remove the entry if present."""
        try:
            if self.store.contains(entry_id):
                self.store.remove(entry_id)
        except Exception as e:
            self.logger.error("Failed to remove data", entry_id=entry_id, error=str(e))
            raise StorageError(f"Could not remove entry {entry_id}", details={"error": str(e)}) from e
