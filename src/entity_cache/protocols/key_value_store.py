"""Keyed store protocol.

Defines the interface of the byte-oriented key-value store that holds
cache entries and performance stats.

Implementations can include:
- Redis (default)
- An in-process dictionary (testing, single-process apps)
- Memcached, Valkey, or any other TTL-capable store
"""

from collections.abc import Iterable, Mapping
from typing import Protocol, runtime_checkable


@runtime_checkable
class KeyValueStore(Protocol):
    """Protocol for keyed cache stores.

    Implementations raise ``StoreUnavailable`` when the store cannot be
    reached or a call times out; they never hang indefinitely.
    """

    @property
    def supports_tags(self) -> bool:
        """Whether entries can be grouped by tag and flushed together."""
        ...

    def get(self, key: str) -> bytes | None:
        """Fetch a value.

        Args:
            key: The key to read

        Returns:
            The stored bytes, or None if absent or expired
        """
        ...

    def put(self, key: str, value: bytes, ttl: int, tags: Iterable[str] = ()) -> bool:
        """Store a value, replacing any previous one.

        Args:
            key: The key to write
            value: The serialized value
            ttl: Time-to-live in seconds
            tags: Tags to group the key under (ignored without tag support)

        Returns:
            True if the store accepted the write
        """
        ...

    def delete(self, key: str, tags: Iterable[str] = ()) -> bool:
        """Delete a value and drop it from its tags.

        Args:
            key: The key to delete
            tags: Tags the key was stored under, for stores that cannot
                look them up themselves

        Returns:
            True if the call succeeded, including when the key was absent
        """
        ...

    def get_many(self, keys: list[str]) -> dict[str, bytes | None]:
        """Fetch several values in one round trip.

        Args:
            keys: Keys to read

        Returns:
            Mapping of every requested key to its bytes or None
        """
        ...

    def put_many(self, values: Mapping[str, bytes], ttl: int, tags: Iterable[str] = ()) -> bool:
        """Store several values with one TTL in one round trip.

        Returns:
            True if the store accepted every write
        """
        ...

    def delete_by_tag(self, tag: str) -> bool:
        """Delete every key grouped under a tag.

        Raises:
            TagsNotSupported: If the store has no tag support
        """
        ...

    def health_check(self) -> bool:
        """Check if the store is accessible.

        Returns:
            True if healthy, False otherwise
        """
        ...
