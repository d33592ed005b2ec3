"""Entity Cache - read-through entity caching with adaptive TTL.

This package provides a layered architecture for caching entities loaded
from a system of record:

Layers:
    - protocols: Interface contracts (KeyValueStore, EntitySource, CacheableEntity)
    - repositories: Store and source implementations
    - services: Business logic (EntityCacheService, PerformanceTracker)
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (store payloads, API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from entity_cache import CacheConfig, EntityCacheService, EntityTypeRegistry

    registry = EntityTypeRegistry()
    registry.register(Widget, CacheConfig(ttl=300))

    cache = EntityCacheService.create(source=widget_repository, registry=registry)
    widget = cache.get(Widget, 42)
    ```

For HTTP API:
    ```python
    from entity_cache.api.app import create_app
    ```
"""

from entity_cache.config import get_redis_client, settings
from entity_cache.entities import (
    BatchLookupResult,
    BatchWriteReport,
    CacheConfig,
    CacheEntryEntity,
    CacheKey,
    PerformanceStatsEntity,
)
from entity_cache.errors import (
    EntityCacheError,
    InvalidEntityType,
    SerializationError,
    SourceUnavailable,
    StoreUnavailable,
    TagsNotSupported,
)
from entity_cache.models import CacheableModel
from entity_cache.protocols import CacheableEntity, EntitySource, KeyValueStore
from entity_cache.repositories import (
    InMemoryEntitySource,
    InMemoryKeyValueStore,
    RedisKeyValueStore,
    create_store,
)
from entity_cache.services import EntityCacheService, EntityTypeRegistry, PerformanceTracker

__all__ = [
    # Configuration
    "settings",
    "get_redis_client",
    "CacheConfig",
    # Protocols (interfaces)
    "CacheableEntity",
    "EntitySource",
    "KeyValueStore",
    # Services (business logic)
    "EntityCacheService",
    "EntityTypeRegistry",
    "PerformanceTracker",
    # Repositories (data access)
    "InMemoryEntitySource",
    "InMemoryKeyValueStore",
    "RedisKeyValueStore",
    "create_store",
    # Entities (domain models)
    "BatchLookupResult",
    "BatchWriteReport",
    "CacheEntryEntity",
    "CacheKey",
    "PerformanceStatsEntity",
    "CacheableModel",
    # Errors
    "EntityCacheError",
    "InvalidEntityType",
    "SerializationError",
    "SourceUnavailable",
    "StoreUnavailable",
    "TagsNotSupported",
]
