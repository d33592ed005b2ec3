"""Per-entity-type cache configuration."""

from dataclasses import dataclass

from entity_cache.config import SUPPORTED_DRIVERS, Settings, settings


@dataclass(frozen=True)
class CacheConfig:
    """Caching behaviour of one entity type.

    Passed explicitly when registering a type instead of being read from
    process-wide configuration at call time.

    Attributes:
        ttl: Base time-to-live in seconds, adjusted by the performance tracker
        key_prefix: Prefix of every cache key and tag of the type
        auto_invalidate: Whether save/delete hooks touch the cache
        cache_relationships: Whether loaded relations are stored with the entity
        driver_name: Store driver the type is cached in. None uses the
            service's default store, which is built from ENTITY_CACHE_DRIVER
    """

    ttl: int = 300
    key_prefix: str = "entity-cache"
    auto_invalidate: bool = True
    cache_relationships: bool = False
    driver_name: str | None = None

    def __post_init__(self) -> None:
        if self.ttl <= 0:
            raise ValueError("ttl must be a positive number of seconds")
        if not self.key_prefix:
            raise ValueError("key_prefix cannot be empty")
        if self.driver_name is not None and self.driver_name not in SUPPORTED_DRIVERS:
            raise ValueError(f"driver_name must be one of {list(SUPPORTED_DRIVERS)}, got {self.driver_name!r}")

    @classmethod
    def from_settings(cls, source: Settings | None = None, **overrides) -> "CacheConfig":
        """Build a config from application settings, with per-type overrides.

        ``driver_name`` is left unset unless overridden: the settings driver
        already selects the default store.
        """
        source = source or settings
        values = {
            "ttl": source.cache_ttl,
            "key_prefix": source.cache_prefix,
            "auto_invalidate": source.auto_invalidate,
            "cache_relationships": source.cache_relationships,
        }
        values.update(overrides)
        return cls(**values)
