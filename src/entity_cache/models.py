from datetime import datetime, timezone
from typing import Any, ClassVar

from pydantic import BaseModel, PrivateAttr

from entity_cache.entities import CacheEntryEntity


def _dump_relation(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (list, tuple)):
        return [_dump_relation(item) for item in value]
    return value


class CacheableModel(BaseModel):
    """Pydantic base implementing the CacheableEntity protocol.

    Subclasses declare their fields as usual. The primary key lives in the
    field named by ``primary_key_field``; when ``soft_delete_field`` names a
    field that holds a value the entity counts as tombstoned and is never
    cached.

    Example:
        ```python
        class Widget(CacheableModel):
            id: int | None = None
            name: str
            deleted_at: datetime | None = None
        ```
    """

    primary_key_field: ClassVar[str] = "id"
    soft_delete_field: ClassVar[str | None] = "deleted_at"

    model_config = {"extra": "allow"}

    _original: dict[str, Any] | None = PrivateAttr(default=None)
    _relations: dict[str, Any] = PrivateAttr(default_factory=dict)

    def primary_key(self) -> Any:
        return getattr(self, self.primary_key_field, None)

    def is_trashed(self) -> bool:
        if self.soft_delete_field is None:
            return False
        return getattr(self, self.soft_delete_field, None) is not None

    def is_cacheable(self) -> bool:
        return self.primary_key() is not None and not self.is_trashed()

    def attributes(self) -> dict[str, Any]:
        """Current field values in JSON-compatible form."""
        return self.model_dump(mode="json")

    def original(self) -> dict[str, Any]:
        """Field values as last loaded or synced."""
        if self._original is None:
            return self.attributes()
        return dict(self._original)

    def sync_original(self) -> None:
        """Mark the current state as the persisted state."""
        self._original = self.attributes()

    def dirty_fields(self) -> set[str]:
        current = self.attributes()
        original = self.original()
        return {name for name in current.keys() | original.keys() if current.get(name) != original.get(name)}

    @property
    def relations(self) -> dict[str, Any]:
        return dict(self._relations)

    def set_relation(self, name: str, value: Any) -> None:
        self._relations[name] = value

    def to_cache_entry(self, include_relations: bool = False) -> CacheEntryEntity:
        relations = {}
        if include_relations:
            relations = {name: _dump_relation(value) for name, value in self._relations.items()}

        return CacheEntryEntity(
            attributes=self.attributes(),
            original=self.original(),
            relations=relations,
            cached_at=datetime.now(timezone.utc),
        )

    @classmethod
    def from_cache_entry(cls, entry: CacheEntryEntity) -> "CacheableModel":
        instance = cls.model_validate(entry.attributes)
        instance._original = dict(entry.original or entry.attributes)
        for name, value in entry.relations.items():
            instance.set_relation(name, value)
        return instance
