"""Serialized forms of the values kept in the keyed store.

Every value is stored as UTF-8 JSON. Decoding failures of any kind are
reported as ``SerializationError`` so callers can treat them as a miss.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, ValidationError
from pydantic_core import PydanticSerializationError

from entity_cache.entities import CACHE_SCHEMA_VERSION, CacheEntryEntity, PerformanceStatsEntity
from entity_cache.errors import SerializationError


class CacheEntryPayload(BaseModel):
    """Wire format of a cached entity."""

    attributes: dict[str, Any]
    original: dict[str, Any] = Field(default_factory=dict)
    relations: dict[str, Any] = Field(default_factory=dict)
    cached_at: datetime
    schema_version: str = CACHE_SCHEMA_VERSION

    @classmethod
    def encode(cls, entry: CacheEntryEntity) -> bytes:
        """Serialize a cache entry entity to bytes."""
        payload = cls(
            attributes=entry.attributes,
            original=entry.original,
            relations=entry.relations,
            cached_at=entry.cached_at,
            schema_version=entry.schema_version,
        )
        try:
            return payload.model_dump_json().encode("utf-8")
        except PydanticSerializationError as e:
            raise SerializationError(f"Cannot encode cache entry: {e}") from e

    @classmethod
    def decode(cls, raw: bytes | str) -> CacheEntryEntity:
        """Deserialize bytes from the store into a cache entry entity.

        Raises:
            SerializationError: If the value is not a valid entry of a
                compatible schema version
        """
        try:
            payload = cls.model_validate_json(raw)
        except ValidationError as e:
            raise SerializationError(f"Malformed cache entry: {e.error_count()} error(s)") from e

        major = payload.schema_version.split(".", 1)[0]
        if major != CACHE_SCHEMA_VERSION.split(".", 1)[0]:
            raise SerializationError(
                f"Unsupported cache entry schema version {payload.schema_version!r}"
            )

        return CacheEntryEntity(
            attributes=payload.attributes,
            original=payload.original,
            relations=payload.relations,
            cached_at=payload.cached_at,
            schema_version=payload.schema_version,
        )


class PerformanceStatsPayload(BaseModel):
    """Wire format of the hit/miss counters of one entity type."""

    entity_type: str
    hits: int = Field(0, ge=0)
    misses: int = Field(0, ge=0)
    last_hit_at: datetime | None = None
    last_miss_at: datetime | None = None
    created_at: datetime

    @classmethod
    def encode(cls, stats: PerformanceStatsEntity) -> bytes:
        payload = cls(
            entity_type=stats.entity_type,
            hits=stats.hits,
            misses=stats.misses,
            last_hit_at=stats.last_hit_at,
            last_miss_at=stats.last_miss_at,
            created_at=stats.created_at,
        )
        return payload.model_dump_json().encode("utf-8")

    @classmethod
    def decode(cls, raw: bytes | str) -> PerformanceStatsEntity:
        try:
            payload = cls.model_validate_json(raw)
        except ValidationError as e:
            raise SerializationError(f"Malformed stats record: {e.error_count()} error(s)") from e

        return PerformanceStatsEntity(
            entity_type=payload.entity_type,
            hits=payload.hits,
            misses=payload.misses,
            last_hit_at=payload.last_hit_at,
            last_miss_at=payload.last_miss_at,
            created_at=payload.created_at,
        )


class StatsIndexPayload(BaseModel):
    """Wire format of the set of entity types that have stats records."""

    entity_types: list[str] = Field(default_factory=list)

    @classmethod
    def encode(cls, entity_types: set[str]) -> bytes:
        return cls(entity_types=sorted(entity_types)).model_dump_json().encode("utf-8")

    @classmethod
    def decode(cls, raw: bytes | str) -> set[str]:
        try:
            return set(cls.model_validate_json(raw).entity_types)
        except ValidationError as e:
            raise SerializationError("Malformed stats index") from e
