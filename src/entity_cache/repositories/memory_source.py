"""In-process implementation of EntitySource.

Holds entities in dictionaries keyed by type and primary key. Intended for
tests, demos and as a reference for real repository adapters.
"""

from collections.abc import Iterable
from typing import Any

from entity_cache.errors import SourceUnavailable
from entity_cache.protocols import CacheableEntity


class InMemoryEntitySource:
    """Dictionary-backed authoritative source.

    Setting ``available`` to False makes every fetch raise
    ``SourceUnavailable``, the way an unreachable database would.
    """

    def __init__(self, entities: Iterable[CacheableEntity] = ()) -> None:
        self._records: dict[type, dict[Any, CacheableEntity]] = {}
        self.available = True
        for entity in entities:
            self.save(entity)

    def _check_available(self) -> None:
        if not self.available:
            raise SourceUnavailable("In-memory source is marked unavailable")

    def save(self, entity: CacheableEntity) -> None:
        self._records.setdefault(type(entity), {})[entity.primary_key()] = entity

    def remove(self, entity: CacheableEntity) -> None:
        self._records.get(type(entity), {}).pop(entity.primary_key(), None)

    def fetch_by_id(self, entity_type: type[CacheableEntity], entity_id: Any) -> CacheableEntity | None:
        self._check_available()
        return self._records.get(entity_type, {}).get(entity_id)

    def fetch_by_ids(
        self, entity_type: type[CacheableEntity], entity_ids: Iterable[Any]
    ) -> list[CacheableEntity]:
        self._check_available()
        records = self._records.get(entity_type, {})
        return [records[entity_id] for entity_id in entity_ids if entity_id in records]

    def fetch_all(self, entity_type: type[CacheableEntity]) -> list[CacheableEntity]:
        self._check_available()
        return list(self._records.get(entity_type, {}).values())
