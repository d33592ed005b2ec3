"""Repository layer for data access.

This layer abstracts external dependencies (Redis, databases) behind
protocol-based interfaces. This enables:
- Easy swapping of implementations (Redis -> in-memory, etc.)
- Unit testing with fake stores and sources
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.
"""

import redis

from entity_cache.protocols import EntitySource, KeyValueStore

from .memory_source import InMemoryEntitySource
from .memory_store import InMemoryKeyValueStore
from .redis_store import RedisKeyValueStore


def create_store(driver_name: str, redis_client: redis.Redis | None = None) -> KeyValueStore:
    """Create the keyed store for a driver name.

    Args:
        driver_name: "redis", "memory", or "array" (in-memory without tags)
        redis_client: Optional client for the redis driver

    Returns:
        A KeyValueStore implementation

    Raises:
        ValueError: If the driver is unknown
    """
    if driver_name == "redis":
        return RedisKeyValueStore.create(redis_client=redis_client)
    if driver_name == "memory":
        return InMemoryKeyValueStore()
    if driver_name == "array":
        return InMemoryKeyValueStore(supports_tags=False)
    raise ValueError(f"Unknown cache driver: {driver_name!r}")


__all__ = [
    "EntitySource",
    "KeyValueStore",
    "InMemoryEntitySource",
    "InMemoryKeyValueStore",
    "RedisKeyValueStore",
    "create_store",
]
