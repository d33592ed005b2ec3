"""Authoritative source protocol.

The system of record consulted on a cache miss, typically a database
repository. Implementations raise ``SourceUnavailable`` when the source
cannot be reached; the cache never masks that error.
"""

from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable

from .cacheable_entity import CacheableEntity


@runtime_checkable
class EntitySource(Protocol):
    """Protocol for the system of record."""

    def fetch_by_id(self, entity_type: type[CacheableEntity], entity_id: Any) -> CacheableEntity | None:
        """Load one entity.

        Args:
            entity_type: The entity class
            entity_id: The primary key

        Returns:
            The entity, or None if it does not exist
        """
        ...

    def fetch_by_ids(
        self, entity_type: type[CacheableEntity], entity_ids: Iterable[Any]
    ) -> list[CacheableEntity]:
        """Load every existing entity among the given primary keys."""
        ...

    def fetch_all(self, entity_type: type[CacheableEntity]) -> list[CacheableEntity]:
        """Load every entity of the type. Result size is unbounded."""
        ...
