"""Key/value storage used by relying-party integrations."""

from .object_store import InMemoryObjectStore, ObjectStore, Storage

__all__ = ["InMemoryObjectStore", "ObjectStore", "Storage"]
