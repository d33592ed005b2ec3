"""Request DTOs for API endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class WarmCacheRequest(BaseModel):
    """Request DTO for warming the cache of one entity type.

    An empty id list warms every entity of the type, which may be large.
    """

    ids: list[Any] = Field(
        default_factory=list,
        description="Primary keys to warm (empty = all entities of the type)",
    )


class InvalidateRequest(BaseModel):
    """Request DTO for dropping specific entities from the cache."""

    ids: list[Any] = Field(..., description="Primary keys to invalidate", min_length=1)
