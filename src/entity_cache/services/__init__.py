"""Service layer for business logic.

This layer contains the core business logic and orchestration.
Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)

Usage:
    ```python
    from entity_cache.services import EntityCacheService, EntityTypeRegistry

    registry = EntityTypeRegistry()
    registry.register(Widget)

    # Using factory method (recommended)
    cache = EntityCacheService.create(source=repository, registry=registry)

    # Or manual creation
    cache = EntityCacheService(store=store, source=repository, registry=registry)
    ```
"""

from .entity_cache_service import EntityCacheService
from .entity_registry import EntityTypeRegistry, RegisteredType, type_name
from .performance_tracker import (
    ADJUSTMENT_THRESHOLD,
    MAX_TTL,
    MIN_TTL,
    PerformanceTracker,
)

__all__ = [
    "ADJUSTMENT_THRESHOLD",
    "MAX_TTL",
    "MIN_TTL",
    "EntityCacheService",
    "EntityTypeRegistry",
    "PerformanceTracker",
    "RegisteredType",
    "type_name",
]
