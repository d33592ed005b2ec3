"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (Redis -> in-memory, SQL -> HTTP, etc.)
- Unit testing with fake stores and sources
- Clear separation of concerns

Usage:
    ```python
    from entity_cache.protocols import KeyValueStore, EntitySource

    # Type hints work with any implementation
    store: KeyValueStore = RedisKeyValueStore.create()
    store: KeyValueStore = InMemoryKeyValueStore()
    ```
"""

from .cacheable_entity import CacheableEntity
from .entity_source import EntitySource
from .key_value_store import KeyValueStore

__all__ = [
    "CacheableEntity",
    "EntitySource",
    "KeyValueStore",
]
