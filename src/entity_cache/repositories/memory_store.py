"""In-process implementation of KeyValueStore.

Useful for tests and single-process deployments. TTLs are enforced lazily
against an injectable clock; tag support can be switched off to behave like
stores that cannot group keys.
"""

import threading
import time
from collections.abc import Callable, Iterable, Mapping

from entity_cache.errors import TagsNotSupported


class InMemoryKeyValueStore:
    """Dictionary-backed keyed store.

    This class satisfies the KeyValueStore protocol through structural
    typing - no explicit inheritance needed.

    Tag membership is tracked in both directions, so a key leaves every tag
    set as soon as it is deleted, overwritten with a zero TTL, or found
    expired. Tag sets never hold keys that are no longer stored.
    """

    def __init__(self, supports_tags: bool = True, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize the in-memory store.

        Args:
            supports_tags: Whether delete_by_tag is available.
            clock: Source of the current time in seconds.
        """
        self._supports_tags = supports_tags
        self._clock = clock
        self._values: dict[str, tuple[bytes, float]] = {}
        self._tags: dict[str, set[str]] = {}
        self._key_tags: dict[str, set[str]] = {}
        self._lock = threading.Lock()

    @property
    def supports_tags(self) -> bool:
        return self._supports_tags

    def _forget(self, key: str) -> None:
        self._values.pop(key, None)
        for tag in self._key_tags.pop(key, set()):
            members = self._tags.get(tag)
            if members is None:
                continue
            members.discard(key)
            if not members:
                del self._tags[tag]

    def _purge_expired(self) -> None:
        now = self._clock()
        for key in [key for key, (_, expires_at) in self._values.items() if expires_at <= now]:
            self._forget(key)

    def _read(self, key: str) -> bytes | None:
        item = self._values.get(key)
        if item is None:
            return None
        value, expires_at = item
        if expires_at <= self._clock():
            self._forget(key)
            return None
        return value

    def _write(self, key: str, value: bytes, ttl: int, tags: Iterable[str]) -> None:
        if ttl <= 0:
            self._forget(key)
            return
        self._values[key] = (value, self._clock() + ttl)
        if self._supports_tags:
            for tag in tags:
                self._tags.setdefault(tag, set()).add(key)
                self._key_tags.setdefault(key, set()).add(tag)

    def get(self, key: str) -> bytes | None:
        with self._lock:
            return self._read(key)

    def put(self, key: str, value: bytes, ttl: int, tags: Iterable[str] = ()) -> bool:
        with self._lock:
            self._write(key, value, ttl, tags)
        return True

    def delete(self, key: str, tags: Iterable[str] = ()) -> bool:
        with self._lock:
            self._forget(key)
        return True

    def get_many(self, keys: list[str]) -> dict[str, bytes | None]:
        with self._lock:
            return {key: self._read(key) for key in keys}

    def put_many(self, values: Mapping[str, bytes], ttl: int, tags: Iterable[str] = ()) -> bool:
        tags = list(tags)
        with self._lock:
            for key, value in values.items():
                self._write(key, value, ttl, tags)
        return True

    def delete_by_tag(self, tag: str) -> bool:
        if not self._supports_tags:
            raise TagsNotSupported("In-memory store was created without tag support")
        with self._lock:
            for key in list(self._tags.get(tag, ())):
                self._forget(key)
        return True

    def health_check(self) -> bool:
        return True

    def tagged_keys(self, tag: str) -> set[str]:
        """Live keys currently grouped under a tag."""
        with self._lock:
            self._purge_expired()
            return set(self._tags.get(tag, ()))

    def tag_count(self) -> int:
        """Number of tags that still group at least one live key."""
        with self._lock:
            self._purge_expired()
            return len(self._tags)

    def clear(self) -> None:
        """Drop every key and tag."""
        with self._lock:
            self._values.clear()
            self._tags.clear()
            self._key_tags.clear()

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None

    def __len__(self) -> int:
        with self._lock:
            self._purge_expired()
            return len(self._values)
