from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from entity_cache.api.dependencies import HandlerDep, ServiceDep, lifespan
from entity_cache.config import settings
from entity_cache.dto import (
    HealthCheckResponse,
    InvalidateRequest,
    InvalidateResponse,
    PerformanceStatsResponse,
    StatsOverviewResponse,
    WarmCacheRequest,
    WarmCacheResponse,
)
from entity_cache.services import EntityCacheService


def create_app(cache_service: EntityCacheService | None = None) -> FastAPI:
    """Build the operator API.

    Args:
        cache_service: Service to expose. If None, one is created at startup.

    Returns:
        The FastAPI application
    """
    app = FastAPI(
        title="Entity Cache API",
        description="Operator endpoints for the read-through entity cache",
        version="0.1.0",
        lifespan=lifespan,
    )
    if cache_service is not None:
        app.state.cache_service = cache_service

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root(service: ServiceDep) -> dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "name": "Entity Cache API",
            "version": "0.1.0",
            "entity_types": service.registry.names(),
            "endpoints": {
                "cache": "/cache/{entity_type}",
                "stats": "/stats",
                "health": "/health",
                "docs": "/docs",
            },
        }

    @app.get("/health", response_model=HealthCheckResponse)
    async def health(handler: HandlerDep) -> HealthCheckResponse:
        """Health check endpoint."""
        return await handler.health_check()

    @app.get("/stats", response_model=StatsOverviewResponse)
    async def all_stats(handler: HandlerDep) -> StatsOverviewResponse:
        """Hit/miss statistics of every tracked entity type."""
        return await handler.get_all_stats()

    @app.get("/stats/{entity_type}", response_model=PerformanceStatsResponse)
    async def type_stats(entity_type: str, handler: HandlerDep) -> PerformanceStatsResponse:
        """Hit/miss statistics of one entity type."""
        return await handler.get_stats(entity_type)

    @app.delete("/stats/{entity_type}", response_model=dict[str, Any])
    async def reset_stats(entity_type: str, handler: HandlerDep) -> dict[str, Any]:
        """Reset the statistics of one entity type."""
        return await handler.reset_stats(entity_type)

    @app.post("/cache/{entity_type}/warm", response_model=WarmCacheResponse)
    async def warm_cache(entity_type: str, request: WarmCacheRequest, handler: HandlerDep) -> WarmCacheResponse:
        """Load entities from the source into the cache."""
        return await handler.warm(entity_type, request)

    @app.post("/cache/{entity_type}/invalidate", response_model=InvalidateResponse)
    async def invalidate(entity_type: str, request: InvalidateRequest, handler: HandlerDep) -> InvalidateResponse:
        """Drop specific entities from the cache."""
        return await handler.invalidate(entity_type, request)

    @app.delete("/cache/{entity_type}", response_model=InvalidateResponse)
    async def invalidate_all(entity_type: str, handler: HandlerDep) -> InvalidateResponse:
        """Drop every cached entity of a type."""
        return await handler.invalidate_all(entity_type)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "entity_cache.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
