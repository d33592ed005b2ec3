"""Results of batched cache operations."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class BatchWriteReport:
    """Outcome of writing several entities through to the store.

    Partial success is expected: ``failed_keys`` lists every key that did
    not make it into the store.
    """

    attempted: int = 0
    written: int = 0
    skipped: int = 0
    failed_keys: list[str] = field(default_factory=list)
    used_fallback: bool = False

    @property
    def is_complete(self) -> bool:
        return not self.failed_keys and self.written == self.attempted

    def to_dict(self) -> dict[str, Any]:
        return {
            "attempted": self.attempted,
            "written": self.written,
            "skipped": self.skipped,
            "failed_keys": list(self.failed_keys),
            "used_fallback": self.used_fallback,
        }


@dataclass
class BatchLookupResult:
    """Outcome of a batched read-through lookup."""

    entities: list[Any] = field(default_factory=list)
    hit_ids: list[Any] = field(default_factory=list)
    missed_ids: list[Any] = field(default_factory=list)
    write_report: BatchWriteReport = field(default_factory=BatchWriteReport)

    @property
    def hits(self) -> int:
        return len(self.hit_ids)

    @property
    def misses(self) -> int:
        return len(self.missed_ids)
