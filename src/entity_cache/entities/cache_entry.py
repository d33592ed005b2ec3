"""Cache entry domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

CACHE_SCHEMA_VERSION = "2.0"


@dataclass(frozen=True)
class CacheEntryEntity:
    """Domain entity for one cached entity snapshot.

    Attributes:
        attributes: Persisted field values at cache time
        original: Field values as last loaded from the authoritative source
        relations: Loaded relation values, only filled when relationship caching is on
        cached_at: When the snapshot was taken
        schema_version: Version tag of the serialization format
    """

    attributes: dict[str, Any]
    cached_at: datetime
    original: dict[str, Any] = field(default_factory=dict)
    relations: dict[str, Any] = field(default_factory=dict)
    schema_version: str = CACHE_SCHEMA_VERSION
