"""Cacheable entity protocol.

The capability contract every cached entity type satisfies. The cache
manager relies on these four members only; there is no optional-method
probing.
"""

from typing import Any, Protocol, runtime_checkable

from entity_cache.entities import CacheEntryEntity


@runtime_checkable
class CacheableEntity(Protocol):
    """Protocol for entities the cache can store and restore."""

    def primary_key(self) -> Any:
        """Return the primary key, or None if the entity was never persisted."""
        ...

    def is_cacheable(self) -> bool:
        """Return False for entities that must not be cached (e.g. soft-deleted)."""
        ...

    def to_cache_entry(self, include_relations: bool = False) -> CacheEntryEntity:
        """Snapshot the entity for the cache."""
        ...

    @classmethod
    def from_cache_entry(cls, entry: CacheEntryEntity) -> "CacheableEntity":
        """Rebuild an entity from a cached snapshot."""
        ...
