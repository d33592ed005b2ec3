"""Data Transfer Objects for wire and API contracts.

These Pydantic models define everything that leaves the process:
- payloads: the serialized form of cache entries and stats in the store
- requests/responses: the operator HTTP API

Internal domain logic should use entities from the entities package.
"""

from .payloads import CacheEntryPayload, PerformanceStatsPayload, StatsIndexPayload
from .requests import InvalidateRequest, WarmCacheRequest
from .responses import (
    HealthCheckResponse,
    InvalidateResponse,
    PerformanceStatsResponse,
    StatsOverviewResponse,
    WarmCacheResponse,
)

__all__ = [
    "CacheEntryPayload",
    "PerformanceStatsPayload",
    "StatsIndexPayload",
    "WarmCacheRequest",
    "InvalidateRequest",
    "WarmCacheResponse",
    "InvalidateResponse",
    "PerformanceStatsResponse",
    "StatsOverviewResponse",
    "HealthCheckResponse",
]
