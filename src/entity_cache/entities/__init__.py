"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by services
and repositories. They are NOT used for wire formats - use the payload
models from the dto package for that.

Entities should have:
- No JSON serialization logic
- No Pydantic validation
- No external dependencies
- Pure domain logic only
"""

from .batch_result import BatchLookupResult, BatchWriteReport
from .cache_config import CacheConfig
from .cache_entry import CACHE_SCHEMA_VERSION, CacheEntryEntity
from .cache_key import CacheKey, type_fingerprint
from .performance_stats import PerformanceStatsEntity

__all__ = [
    "BatchLookupResult",
    "BatchWriteReport",
    "CACHE_SCHEMA_VERSION",
    "CacheConfig",
    "CacheEntryEntity",
    "CacheKey",
    "PerformanceStatsEntity",
    "type_fingerprint",
]
