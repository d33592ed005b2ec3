"""HTTP handlers for cache operations.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns like status codes, validation, and error handling.
"""

from fastapi import HTTPException, status

from entity_cache.dto import (
    HealthCheckResponse,
    InvalidateRequest,
    InvalidateResponse,
    PerformanceStatsResponse,
    StatsOverviewResponse,
    WarmCacheRequest,
    WarmCacheResponse,
)
from entity_cache.entities import PerformanceStatsEntity
from entity_cache.errors import InvalidEntityType, SourceUnavailable, StoreUnavailable
from entity_cache.services import EntityCacheService


def _stats_response(stats: PerformanceStatsEntity) -> PerformanceStatsResponse:
    return PerformanceStatsResponse(
        entity_type=stats.entity_type,
        hits=stats.hits,
        misses=stats.misses,
        hit_rate=stats.hit_rate,
        last_hit_at=stats.last_hit_at,
        last_miss_at=stats.last_miss_at,
        created_at=stats.created_at,
    )


def _unknown_type(entity_type: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Unknown entity type: {entity_type}",
    )


class CacheHandler:
    """HTTP handlers for operator cache actions.

    This handler delegates business logic to EntityCacheService
    and handles HTTP-specific concerns like:
    - Converting entities to DTOs
    - Setting appropriate status codes
    - Error handling and responses

    Error mapping:
    - unregistered entity type -> 404
    - store or source unreachable -> 503
    - bulk invalidation on a store without tags -> 409
    """

    def __init__(self, cache_service: EntityCacheService) -> None:
        """Initialize the cache handler.

        Args:
            cache_service: The cache service for business logic (required).
        """
        self._cache = cache_service

    async def get_all_stats(self) -> StatsOverviewResponse:
        """Handle GET /stats requests."""
        try:
            stats = self._cache.tracker.all_stats()
        except StoreUnavailable as e:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=f"Failed to read stats: {e}",
            ) from e

        return StatsOverviewResponse(entity_types=[_stats_response(s) for s in stats.values()])

    async def get_stats(self, entity_type: str) -> PerformanceStatsResponse:
        """Handle GET /stats/{entity_type} requests."""
        try:
            registered = self._cache.registry.resolve(entity_type)
        except InvalidEntityType as e:
            raise _unknown_type(entity_type) from e

        return _stats_response(self._cache.tracker.get_stats(registered.name))

    async def reset_stats(self, entity_type: str) -> dict:
        """Handle DELETE /stats/{entity_type} requests."""
        try:
            registered = self._cache.registry.resolve(entity_type)
            self._cache.tracker.reset_stats(registered.name)
        except InvalidEntityType as e:
            raise _unknown_type(entity_type) from e
        except StoreUnavailable as e:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=f"Failed to reset stats: {e}",
            ) from e

        return {"success": True, "message": f"Stats reset for {registered.name}"}

    async def warm(self, entity_type: str, request: WarmCacheRequest) -> WarmCacheResponse:
        """Handle POST /cache/{entity_type}/warm requests.

        Raises:
            HTTPException: 404 for unknown types, 503 if the source is down
        """
        try:
            cached = self._cache.warm(entity_type, request.ids)
        except InvalidEntityType as e:
            raise _unknown_type(entity_type) from e
        except SourceUnavailable as e:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=f"Source unavailable: {e}",
            ) from e

        return WarmCacheResponse(entity_type=entity_type, cached=cached)

    async def invalidate(self, entity_type: str, request: InvalidateRequest) -> InvalidateResponse:
        """Handle POST /cache/{entity_type}/invalidate requests."""
        try:
            success = self._cache.invalidate_ids(entity_type, request.ids)
        except InvalidEntityType as e:
            raise _unknown_type(entity_type) from e

        return InvalidateResponse(
            entity_type=entity_type,
            success=success,
            message="Entries invalidated" if success else "Some entries could not be invalidated",
        )

    async def invalidate_all(self, entity_type: str) -> InvalidateResponse:
        """Handle DELETE /cache/{entity_type} requests."""
        try:
            success = self._cache.invalidate_all(entity_type)
        except InvalidEntityType as e:
            raise _unknown_type(entity_type) from e

        if not success and not self._cache.store_for(entity_type).supports_tags:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="The configured store does not support tags; bulk invalidation did not happen",
            )
        if not success:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Bulk invalidation failed",
            )

        return InvalidateResponse(
            entity_type=entity_type,
            success=True,
            message="All entries invalidated",
        )

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests."""
        is_healthy = self._cache.is_healthy()

        return HealthCheckResponse(
            status="healthy" if is_healthy else "unhealthy",
            store_healthy=is_healthy,
        )
