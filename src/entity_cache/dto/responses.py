"""Response DTOs for API endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field


class PerformanceStatsResponse(BaseModel):
    """Hit/miss statistics of one entity type."""

    entity_type: str = Field(..., description="Fully-qualified entity type name")
    hits: int = Field(..., description="Recorded cache hits", ge=0)
    misses: int = Field(..., description="Recorded cache misses", ge=0)
    hit_rate: float = Field(..., description="hits / (hits + misses), 0.0 with no data", ge=0.0, le=1.0)
    last_hit_at: datetime | None = Field(None, description="Most recent hit")
    last_miss_at: datetime | None = Field(None, description="Most recent miss")
    created_at: datetime = Field(..., description="When tracking started")


class StatsOverviewResponse(BaseModel):
    """Statistics of every tracked entity type."""

    entity_types: list[PerformanceStatsResponse] = Field(default_factory=list)


class WarmCacheResponse(BaseModel):
    """Response DTO for cache warming."""

    entity_type: str = Field(..., description="The warmed entity type")
    cached: int = Field(..., description="Number of entities successfully cached", ge=0)


class InvalidateResponse(BaseModel):
    """Response DTO for invalidation requests."""

    entity_type: str = Field(..., description="The invalidated entity type")
    success: bool = Field(..., description="Whether every requested entry was removed")
    message: str = Field(..., description="Human-readable status message")


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    store_healthy: bool = Field(..., description="Whether the keyed store is reachable")
