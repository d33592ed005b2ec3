"""Entity cache service for core business logic.

This service implements read-through, write-through and invalidation of
individual entities and batches of entities. It coordinates the keyed
store (cache), the authoritative source (system of record) and the
performance tracker (adaptive TTL).

Failure policy:
- Store and serialization failures are logged and masked: reads fall
  through to the source, writes report False.
- Source failures and unregistered entity types always reach the caller.
"""

from collections import defaultdict
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

from entity_cache.config import settings
from entity_cache.dto import CacheEntryPayload
from entity_cache.entities import BatchLookupResult, BatchWriteReport, CacheKey
from entity_cache.errors import SerializationError, StoreUnavailable, TagsNotSupported
from entity_cache.protocols import CacheableEntity, EntitySource, KeyValueStore
from entity_cache.repositories import create_store
from entity_cache.utils import EntityCacheLogger, get_logger

from .entity_registry import EntityTypeRegistry, RegisteredType
from .performance_tracker import PerformanceTracker


class EntityCacheService:
    """Core entity cache orchestration service.

    This service depends on PROTOCOLS, not concrete implementations:
    - KeyValueStore: can be Redis, in-memory, etc.
    - EntitySource: any system of record (SQL repository, HTTP API, ...)

    It holds no state between calls beyond its collaborators; every cache
    read and write round-trips through the store.

    Example:
        ```python
        from entity_cache.services import EntityCacheService, EntityTypeRegistry

        registry = EntityTypeRegistry()
        registry.register(Widget, CacheConfig(ttl=300))

        cache = EntityCacheService.create(source=widget_repository, registry=registry)
        widget = cache.get(Widget, 42)
        ```
    """

    def __init__(
        self,
        store: KeyValueStore,
        source: EntitySource,
        registry: EntityTypeRegistry,
        tracker: PerformanceTracker | None = None,
        logger: EntityCacheLogger | None = None,
        driver_name: str | None = None,
        stores: Mapping[str, KeyValueStore] | None = None,
    ) -> None:
        """Initialize the entity cache service.

        Args:
            store: Default keyed store, used by types without a driver of their own (required).
            source: Authoritative source consulted on misses (required).
            registry: Registered entity types and their configs (required).
            tracker: Performance tracker. Defaults to one backed by the default store.
            logger: Logger for masked failures and cache events.
            driver_name: Driver the default store was built for, if known.
            stores: Stores for other driver names. Drivers missing here are
                created with ``create_store`` on first use.
        """
        self._store = store
        self._source = source
        self._registry = registry
        self._log = logger or get_logger(__name__)
        self._tracker = tracker or PerformanceTracker(store, logger=self._log)
        self._driver_name = driver_name
        self._stores: dict[str, KeyValueStore] = dict(stores or {})

    @classmethod
    def create(
        cls,
        source: EntitySource,
        registry: EntityTypeRegistry | None = None,
        store: KeyValueStore | None = None,
        driver_name: str | None = None,
    ) -> "EntityCacheService":
        """Factory method to create EntityCacheService with sensible defaults.

        Args:
            source: Authoritative source (required).
            registry: Entity type registry. If None, an empty one is created.
            store: Default keyed store. If None, one is created for ``driver_name``.
            driver_name: Driver of the default store. If None and no store is
                given, uses settings.

        Returns:
            Configured EntityCacheService instance
        """
        if store is None:
            driver_name = driver_name or settings.cache_driver
            store = create_store(driver_name)
        return cls(
            store=store,
            source=source,
            registry=registry or EntityTypeRegistry(),
            driver_name=driver_name,
        )

    # -- helpers -------------------------------------------------------------

    def _store_for(self, registered: RegisteredType) -> KeyValueStore:
        driver_name = registered.config.driver_name
        if driver_name is None or driver_name == self._driver_name:
            return self._store
        store = self._stores.get(driver_name)
        if store is None:
            store = self._stores[driver_name] = create_store(driver_name)
        return store

    @staticmethod
    def _key(registered: RegisteredType, entity_id: Any) -> str:
        return CacheKey.build(registered.config.key_prefix, registered.name, entity_id).value

    @staticmethod
    def _tags(registered: RegisteredType) -> list[str]:
        return [CacheKey.type_tag(registered.config.key_prefix, registered.name)]

    def _context(self, registered: RegisteredType, **extra: Any) -> dict[str, Any]:
        return {"entity_type": registered.name, **extra}

    def _restore(self, registered: RegisteredType, raw: bytes) -> CacheableEntity:
        entry = CacheEntryPayload.decode(raw)
        try:
            return registered.entity_cls.from_cache_entry(entry)
        except (ValueError, TypeError, KeyError) as e:
            raise SerializationError(f"Cannot rebuild {registered.name} from cache: {e}") from e

    def _serialize(self, registered: RegisteredType, entity: CacheableEntity) -> bytes:
        try:
            entry = entity.to_cache_entry(include_relations=registered.config.cache_relationships)
        except (ValueError, TypeError) as e:
            raise SerializationError(f"Cannot snapshot {registered.name}: {e}") from e
        return CacheEntryPayload.encode(entry)

    def _read_cached(self, registered: RegisteredType, key: str, entity_id: Any) -> CacheableEntity | None:
        try:
            raw = self._store_for(registered).get(key)
            if raw is None:
                return None
            return self._restore(registered, raw)
        except StoreUnavailable as e:
            self._log.warning(
                f"Cache read failed, falling back to source: {e}",
                context=self._context(registered, id=entity_id, key=key),
            )
        except SerializationError as e:
            self._log.warning(
                f"Discarding unreadable cache entry: {e}",
                context=self._context(registered, id=entity_id, key=key),
            )
        return None

    def _delete(self, registered: RegisteredType, entity_id: Any) -> bool:
        key = self._key(registered, entity_id)
        try:
            result = self._store_for(registered).delete(key, tags=self._tags(registered))
        except StoreUnavailable as e:
            self._log.error(
                f"Failed to clear entity cache: {e}",
                context=self._context(registered, id=entity_id, key=key),
            )
            return False

        self._log.debug("Entity cache cleared", context=self._context(registered, id=entity_id, key=key))
        return result

    # -- reads ---------------------------------------------------------------

    def get(self, entity_type: type | str, entity_id: Any) -> CacheableEntity | None:
        """Get an entity by primary key, reading through the cache.

        Business logic:
        1. Look the key up in the store
        2. On a readable hit, record the hit and return the cached entity
        3. Otherwise record a miss and fetch from the authoritative source
        4. Write the fetched entity through if it is cacheable

        Args:
            entity_type: Registered entity class or name
            entity_id: Primary key

        Returns:
            The entity, or None if the source has no such entity

        Raises:
            InvalidEntityType: If the type is not registered
            SourceUnavailable: If the source cannot be reached on a miss
        """
        registered = self._registry.resolve(entity_type)
        if entity_id is None:
            return None

        key = self._key(registered, entity_id)
        entity = self._read_cached(registered, key, entity_id)
        if entity is not None:
            self._tracker.record_hit(registered.name)
            self._log.debug("Entity found in cache", context=self._context(registered, id=entity_id, key=key))
            return entity

        self._tracker.record_miss(registered.name)
        entity = self._source.fetch_by_id(registered.entity_cls, entity_id)
        if entity is not None and entity.is_cacheable():
            self.put(entity)
        return entity

    def lookup_many(self, entity_type: type | str, entity_ids: Iterable[Any]) -> BatchLookupResult:
        """Get several entities with one store round trip and one source fetch.

        Business logic:
        1. Multi-get every key from the store
        2. Split ids into hits and misses, recording each with the tracker
        3. Fetch all misses from the source in one call
        4. Write fetched entities through in batches

        Duplicate and None ids are dropped. Order of the returned entities is
        cache hits first, then freshly fetched ones.

        Args:
            entity_type: Registered entity class or name
            entity_ids: Primary keys

        Returns:
            BatchLookupResult with the entities, hit/miss ids and write report

        Raises:
            InvalidEntityType: If the type is not registered
            SourceUnavailable: If the source cannot be reached for the misses
        """
        registered = self._registry.resolve(entity_type)
        ids = list(dict.fromkeys(entity_id for entity_id in entity_ids if entity_id is not None))
        result = BatchLookupResult()
        if not ids:
            return result

        keys = {entity_id: self._key(registered, entity_id) for entity_id in ids}
        try:
            cached = self._store_for(registered).get_many(list(keys.values()))
        except StoreUnavailable as e:
            self._log.warning(
                f"Batch cache read failed, falling back to source: {e}",
                context=self._context(registered, ids=ids),
            )
            cached = {}

        for entity_id in ids:
            key = keys[entity_id]
            entity = None
            raw = cached.get(key)
            if raw is not None:
                try:
                    entity = self._restore(registered, raw)
                except SerializationError as e:
                    self._log.warning(
                        f"Discarding unreadable cache entry: {e}",
                        context=self._context(registered, id=entity_id, key=key),
                    )

            if entity is not None:
                result.entities.append(entity)
                result.hit_ids.append(entity_id)
                self._tracker.record_hit(registered.name)
            else:
                result.missed_ids.append(entity_id)
                self._tracker.record_miss(registered.name)

        if result.missed_ids:
            fetched = self._source.fetch_by_ids(registered.entity_cls, result.missed_ids)
            result.entities.extend(fetched)
            result.write_report = self.cache_many(fetched)

        return result

    def get_many(self, entity_type: type | str, entity_ids: Iterable[Any]) -> list[CacheableEntity]:
        """Get several entities, reading through the cache.

        See ``lookup_many`` for the full result with hit/miss details.

        Returns:
            Every entity found in the cache or the source
        """
        return self.lookup_many(entity_type, entity_ids).entities

    # -- writes --------------------------------------------------------------

    def put(self, entity: CacheableEntity) -> bool:
        """Write an entity to the cache.

        Business logic:
        1. Skip entities without a primary key or marked as not cacheable
        2. Size the TTL from the type's hit rate
        3. Serialize and store under the entity's key and tags

        Args:
            entity: Instance of a registered entity type

        Returns:
            True if the store accepted the entry, False otherwise

        Raises:
            InvalidEntityType: If the entity's type is not registered
        """
        registered = self._registry.resolve(type(entity))
        entity_id = entity.primary_key()
        if entity_id is None or not entity.is_cacheable():
            return False

        key = self._key(registered, entity_id)
        try:
            ttl = self._tracker.adaptive_ttl(registered.name, registered.config.ttl)
            value = self._serialize(registered, entity)
            result = self._store_for(registered).put(key, value, ttl, tags=self._tags(registered))
        except (StoreUnavailable, SerializationError) as e:
            self._log.error(
                f"Failed to cache entity: {e}",
                context=self._context(registered, id=entity_id, key=key),
            )
            return False

        self._log.debug(
            "Entity cached",
            context=self._context(registered, id=entity_id, key=key, ttl=ttl, success=result),
        )
        return result

    def cache_many(self, entities: Iterable[CacheableEntity]) -> BatchWriteReport:
        """Write several entities to the cache, batched per entity type.

        Each type is written with one multi-put. When a multi-put fails the
        entries are retried one by one; keys that still fail are reported.

        Args:
            entities: Instances of registered entity types

        Returns:
            BatchWriteReport describing what was written

        Raises:
            InvalidEntityType: If an entity's type is not registered
        """
        report = BatchWriteReport()
        batches: dict[str, dict[str, bytes]] = defaultdict(dict)
        types: dict[str, RegisteredType] = {}

        for entity in entities:
            registered = self._registry.resolve(type(entity))
            entity_id = entity.primary_key()
            if entity_id is None or not entity.is_cacheable():
                report.skipped += 1
                continue

            report.attempted += 1
            key = self._key(registered, entity_id)
            try:
                value = self._serialize(registered, entity)
            except SerializationError as e:
                report.failed_keys.append(key)
                self._log.error(
                    f"Failed to prepare entity for batch caching: {e}",
                    context=self._context(registered, id=entity_id, key=key),
                )
                continue
            types[registered.name] = registered
            batches[registered.name][key] = value

        for name, values in batches.items():
            registered = types[name]
            ttl = self._tracker.adaptive_ttl(name, registered.config.ttl)
            store = self._store_for(registered)
            tags = self._tags(registered)
            try:
                if store.put_many(values, ttl, tags=tags):
                    report.written += len(values)
                    continue
                self._log.error("Batch cache operation rejected", context=self._context(registered))
            except StoreUnavailable as e:
                self._log.error(f"Batch cache operation failed: {e}", context=self._context(registered))

            report.used_fallback = True
            for key, value in values.items():
                try:
                    if store.put(key, value, ttl, tags=tags):
                        report.written += 1
                        continue
                except StoreUnavailable as e:
                    self._log.error(
                        f"Individual cache operation failed: {e}",
                        context=self._context(registered, key=key),
                    )
                report.failed_keys.append(key)

        if report.failed_keys:
            self._log.warning(
                "Batch caching completed partially",
                context={"report": report.to_dict()},
            )
        return report

    def warm(self, entity_type: type | str, entity_ids: Iterable[Any] = ()) -> int:
        """Load entities from the source and cache them.

        Args:
            entity_type: Registered entity class or name
            entity_ids: Primary keys to warm. Empty warms every entity of the
                type, which may be a very large result.

        Returns:
            Number of entities successfully cached

        Raises:
            InvalidEntityType: If the type is not registered
            SourceUnavailable: If the source cannot be reached
        """
        registered = self._registry.resolve(entity_type)
        ids = list(entity_ids)
        if ids:
            records = self._source.fetch_by_ids(registered.entity_cls, ids)
        else:
            records = self._source.fetch_all(registered.entity_cls)

        cached = 0
        for record in records:
            if record.is_cacheable() and self.put(record):
                cached += 1

        self._log.info(
            "Cache warmed",
            context=self._context(registered, fetched=len(records), cached=cached),
        )
        return cached

    # -- invalidation --------------------------------------------------------

    def invalidate(self, entity: CacheableEntity) -> bool:
        """Remove an entity from the cache.

        Returns:
            True if the entry is gone, False if the store could not be reached
            or the entity has no primary key
        """
        registered = self._registry.resolve(type(entity))
        entity_id = entity.primary_key()
        if entity_id is None:
            return False
        return self._delete(registered, entity_id)

    def invalidate_id(self, entity_type: type | str, entity_id: Any) -> bool:
        """Remove the cache entry of one primary key."""
        registered = self._registry.resolve(entity_type)
        if entity_id is None:
            return False
        return self._delete(registered, entity_id)

    def invalidate_ids(self, entity_type: type | str, entity_ids: Iterable[Any]) -> bool:
        """Remove the cache entries of several primary keys.

        Every id is attempted even after a failure.

        Returns:
            True only if every entry was removed
        """
        registered = self._registry.resolve(entity_type)
        results = [self._delete(registered, entity_id) for entity_id in entity_ids if entity_id is not None]
        return all(results)

    def invalidate_all(self, entity_type: type | str) -> bool:
        """Remove every cached entry of an entity type.

        Requires a store with tag support. Without it nothing is deleted and
        False is returned, so callers know the flush did not happen.

        Returns:
            True if the type's entries were flushed
        """
        registered = self._registry.resolve(entity_type)
        store = self._store_for(registered)
        if not store.supports_tags:
            self._log.warning("Cache tags not supported, manual clearing required", context=self._context(registered))
            return False

        tag = CacheKey.type_tag(registered.config.key_prefix, registered.name)
        try:
            result = store.delete_by_tag(tag)
        except TagsNotSupported as e:
            self._log.warning(f"Cache tags not supported: {e}", context=self._context(registered))
            return False
        except StoreUnavailable as e:
            self._log.error(f"Failed to clear all cache entries: {e}", context=self._context(registered))
            return False

        self._log.debug("All cache entries cleared using tags", context=self._context(registered, tag=tag))
        return result

    # -- persistence hooks ---------------------------------------------------

    def on_saved(self, entity: CacheableEntity) -> bool:
        """Hook for the persistence layer after a successful save.

        With ``auto_invalidate`` on, a cacheable entity is written through
        and a no-longer-cacheable one (e.g. soft-deleted) is evicted.

        Returns:
            True if the cache was updated
        """
        registered = self._registry.resolve(type(entity))
        if not registered.config.auto_invalidate:
            return False

        if entity.primary_key() is not None and entity.is_cacheable():
            return self.put(entity)
        return self.invalidate(entity)

    def on_deleted(self, entity: CacheableEntity) -> bool:
        """Hook for the persistence layer after a successful delete.

        Returns:
            True if the entry was evicted
        """
        registered = self._registry.resolve(type(entity))
        if not registered.config.auto_invalidate:
            return False
        return self.invalidate(entity)

    # -- stats ---------------------------------------------------------------

    def cache_stats(self, entity_type: type | str) -> dict[str, Any]:
        """Get cache statistics of an entity type.

        Returns:
            Dictionary with hit rate and counters
        """
        registered = self._registry.resolve(entity_type)
        stats = self._tracker.get_stats(registered.name)
        return {
            "entity_type": registered.name,
            "hit_rate": stats.hit_rate,
            "hits": stats.hits,
            "misses": stats.misses,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    def is_healthy(self) -> bool:
        """Check if every store in use is reachable."""
        stores = [self._store, *(store for store in self._stores.values() if store is not self._store)]
        return all(store.health_check() for store in stores)

    def store_for(self, entity_type: type | str) -> KeyValueStore:
        """Get the store holding the entries of an entity type.

        Raises:
            InvalidEntityType: If the type is not registered
        """
        return self._store_for(self._registry.resolve(entity_type))

    @property
    def store(self) -> KeyValueStore:
        """Get the default store."""
        return self._store

    @property
    def source(self) -> EntitySource:
        """Get the underlying source (for testing)."""
        return self._source

    @property
    def registry(self) -> EntityTypeRegistry:
        """Get the entity type registry."""
        return self._registry

    @property
    def tracker(self) -> PerformanceTracker:
        """Get the performance tracker."""
        return self._tracker
