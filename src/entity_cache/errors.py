"""Error taxonomy for the entity cache.

Cache-layer errors (``StoreUnavailable``, ``SerializationError``) are
recoverable: services mask them and degrade to the authoritative source.
``SourceUnavailable`` and ``InvalidEntityType`` always reach the caller.
"""


class EntityCacheError(Exception):
    """Base class for all entity cache errors."""


class StoreUnavailable(EntityCacheError):
    """The keyed store could not be reached or timed out."""

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


class TagsNotSupported(StoreUnavailable):
    """The keyed store cannot delete entries by tag."""


class SourceUnavailable(EntityCacheError):
    """The authoritative source could not be reached."""


class SerializationError(EntityCacheError):
    """A cache entry could not be encoded or decoded."""


class InvalidEntityType(EntityCacheError, TypeError):
    """The entity type is not registered with the cache."""

    def __init__(self, entity_type: object) -> None:
        super().__init__(f"{entity_type!r} is not a registered cacheable entity type.")
        self.entity_type = entity_type
