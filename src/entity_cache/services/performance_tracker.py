"""Per-entity-type hit/miss tracking and adaptive TTL.

Stats live in the keyed store next to the cache entries; the tracker keeps
no state of its own. Counter updates are read-modify-write without locking,
so concurrent writers may lose increments. The hit rate is a coarse signal
and the TTL policy only needs that.
"""

import math
from collections.abc import Callable
from datetime import datetime, timezone

from entity_cache.config import settings
from entity_cache.dto import PerformanceStatsPayload, StatsIndexPayload
from entity_cache.entities import PerformanceStatsEntity, type_fingerprint
from entity_cache.errors import SerializationError, StoreUnavailable
from entity_cache.protocols import KeyValueStore
from entity_cache.utils import EntityCacheLogger, get_logger

STATS_KEY_PREFIX = "entity-cache:stats:"
STATS_INDEX_NAME = "__types__"

MIN_TTL = 60  # 1 minute
MAX_TTL = 86400  # 24 hours
ADJUSTMENT_THRESHOLD = 0.5  # 50% hit rate
DEFAULT_STATS_TTL = 86400  # 24 hours


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PerformanceTracker:
    """Tracks cache hit rates and turns them into TTL recommendations.

    Every stats write also rewrites the index of known entity types with the
    same retention, so the index never expires before a stats record it lists.

    Example:
        ```python
        tracker = PerformanceTracker(store)
        tracker.record_hit("app.Widget")
        tracker.hit_rate("app.Widget")            # 1.0
        tracker.adaptive_ttl("app.Widget", 300)   # 450
        ```
    """

    def __init__(
        self,
        store: KeyValueStore,
        stats_ttl: int | None = None,
        stats_prefix: str = STATS_KEY_PREFIX,
        logger: EntityCacheLogger | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize the tracker.

        Args:
            store: Keyed store holding the stats records.
            stats_ttl: Retention of stats records in seconds. Defaults to settings.
            stats_prefix: Key prefix of stats records.
            logger: Logger for swallowed store failures.
            clock: Source of the current UTC time.
        """
        self._store = store
        self._stats_ttl = stats_ttl or settings.stats_ttl or DEFAULT_STATS_TTL
        self._prefix = stats_prefix
        self._log = logger or get_logger(__name__)
        self._clock = clock

    def _stats_key(self, entity_type: str) -> str:
        return f"{self._prefix}{type_fingerprint(entity_type)}"

    @property
    def _index_key(self) -> str:
        return f"{self._prefix}{STATS_INDEX_NAME}"

    def _zero(self, entity_type: str) -> PerformanceStatsEntity:
        return PerformanceStatsEntity(entity_type=entity_type, created_at=self._clock())

    def _read_index(self, raw: bytes | None) -> set[str]:
        if raw is None:
            return set()
        try:
            return StatsIndexPayload.decode(raw)
        except SerializationError:
            self._log.warning("Discarding malformed stats index", context={"key": self._index_key})
            return set()

    def _decode_or_zero(self, entity_type: str, raw: bytes | None) -> PerformanceStatsEntity:
        if raw is None:
            return self._zero(entity_type)
        try:
            return PerformanceStatsPayload.decode(raw)
        except SerializationError:
            self._log.warning("Replacing malformed stats record", context={"entity_type": entity_type})
            return self._zero(entity_type)

    def _record(self, entity_type: str, hit: bool) -> None:
        key = self._stats_key(entity_type)
        try:
            current = self._store.get_many([key, self._index_key])
            stats = self._decode_or_zero(entity_type, current.get(key))
            stats = stats.with_hit(self._clock()) if hit else stats.with_miss(self._clock())

            known_types = self._read_index(current.get(self._index_key))
            known_types.add(entity_type)

            self._store.put_many(
                {
                    key: PerformanceStatsPayload.encode(stats),
                    self._index_key: StatsIndexPayload.encode(known_types),
                },
                self._stats_ttl,
            )
        except (StoreUnavailable, SerializationError) as e:
            self._log.warning(
                f"Failed to record cache {'hit' if hit else 'miss'}: {e}",
                context={"entity_type": entity_type},
            )

    def record_hit(self, entity_type: str) -> None:
        """Record a cache hit. Store failures are logged, never raised."""
        self._record(entity_type, hit=True)

    def record_miss(self, entity_type: str) -> None:
        """Record a cache miss. Store failures are logged, never raised."""
        self._record(entity_type, hit=False)

    def get_stats(self, entity_type: str) -> PerformanceStatsEntity:
        """Current stats of a type, zero-state when absent or unreadable."""
        try:
            return self._decode_or_zero(entity_type, self._store.get(self._stats_key(entity_type)))
        except StoreUnavailable as e:
            self._log.warning(f"Failed to read cache stats: {e}", context={"entity_type": entity_type})
            return self._zero(entity_type)

    def hit_rate(self, entity_type: str) -> float:
        """Hit rate in [0, 1] rounded to 4 places.

        A type with no recorded lookups has a hit rate of exactly 0.0.
        """
        return self.get_stats(entity_type).hit_rate

    def adaptive_ttl(self, entity_type: str, base_ttl: int) -> int:
        """TTL recommendation from the observed hit rate.

        Below the adjustment threshold the TTL is halved, otherwise it grows
        by half. The result is always within [MIN_TTL, MAX_TTL].

        Args:
            entity_type: Entity type name
            base_ttl: Configured TTL of the type in seconds

        Returns:
            TTL in seconds
        """
        if self.hit_rate(entity_type) < ADJUSTMENT_THRESHOLD:
            ttl = max(MIN_TTL, math.floor(base_ttl * 0.5))
        else:
            ttl = min(MAX_TTL, math.floor(base_ttl * 1.5))
        return min(MAX_TTL, max(MIN_TTL, ttl))

    def reset_stats(self, entity_type: str) -> None:
        """Delete the stats of a type and drop it from the index.

        Raises:
            StoreUnavailable: If the store cannot be reached
        """
        self._store.delete(self._stats_key(entity_type))

        known_types = self._read_index(self._store.get(self._index_key))
        if entity_type in known_types:
            known_types.discard(entity_type)
            self._store.put(self._index_key, StatsIndexPayload.encode(known_types), self._stats_ttl)

    def all_stats(self) -> dict[str, PerformanceStatsEntity]:
        """Stats of every tracked type that still has a live record.

        Raises:
            StoreUnavailable: If the store cannot be reached
        """
        known_types = sorted(self._read_index(self._store.get(self._index_key)))
        if not known_types:
            return {}

        keys = {entity_type: self._stats_key(entity_type) for entity_type in known_types}
        raw_values = self._store.get_many(list(keys.values()))

        result: dict[str, PerformanceStatsEntity] = {}
        for entity_type, key in keys.items():
            raw = raw_values.get(key)
            if raw is None:
                continue
            try:
                result[entity_type] = PerformanceStatsPayload.decode(raw)
            except SerializationError:
                self._log.warning("Skipping malformed stats record", context={"entity_type": entity_type})
        return result

    @property
    def stats_ttl(self) -> int:
        return self._stats_ttl
