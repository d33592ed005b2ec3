"""Performance stats domain entity."""

from dataclasses import dataclass, replace
from datetime import datetime


@dataclass(frozen=True)
class PerformanceStatsEntity:
    """Hit/miss counters for a single entity type.

    Attributes:
        entity_type: Fully-qualified entity type name
        hits: Confirmed cache hits
        misses: Confirmed cache misses
        created_at: When the record was first initialized
        last_hit_at: Most recent hit, if any
        last_miss_at: Most recent miss, if any
    """

    entity_type: str
    created_at: datetime
    hits: int = 0
    misses: int = 0
    last_hit_at: datetime | None = None
    last_miss_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.hits < 0 or self.misses < 0:
            raise ValueError("hit and miss counters cannot be negative")

    @property
    def total(self) -> int:
        """Total recorded lookups."""
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Hit rate rounded to 4 places.

        Zero lookups is reported as 0.0 rather than undefined.
        """
        if self.total == 0:
            return 0.0
        return round(self.hits / self.total, 4)

    def with_hit(self, at: datetime) -> "PerformanceStatsEntity":
        return replace(self, hits=self.hits + 1, last_hit_at=at)

    def with_miss(self, at: datetime) -> "PerformanceStatsEntity":
        return replace(self, misses=self.misses + 1, last_miss_at=at)
