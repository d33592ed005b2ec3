"""Cache key derivation."""

import hashlib
from dataclasses import dataclass
from typing import Any


def type_fingerprint(entity_type: str) -> str:
    """Hash a fully-qualified type name so it can sit between key separators."""
    return hashlib.md5(entity_type.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class CacheKey:
    """Deterministic key of one cached entity: ``{prefix}:{fingerprint}:{id}``."""

    prefix: str
    entity_type: str
    entity_id: Any

    @classmethod
    def build(cls, prefix: str, entity_type: str, entity_id: Any) -> "CacheKey":
        return cls(prefix=prefix, entity_type=entity_type, entity_id=entity_id)

    @property
    def value(self) -> str:
        return f"{self.prefix}:{type_fingerprint(self.entity_type)}:{self.entity_id}"

    def __str__(self) -> str:
        return self.value

    @staticmethod
    def type_tag(prefix: str, entity_type: str) -> str:
        """Tag shared by every cached entry of one entity type.

        It is the only tag entries carry, so every tagged key is flushed by
        ``invalidate_all`` of its type.
        """
        return f"{prefix}:{type_fingerprint(entity_type)}"
