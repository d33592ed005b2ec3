"""Redis implementation of KeyValueStore.

This is the default store and satisfies the KeyValueStore protocol.
Tags are kept as Redis sets of member keys so a whole entity type can be
flushed without scanning the keyspace.
"""

from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager

import redis

from entity_cache.config import get_redis_client
from entity_cache.errors import StoreUnavailable

TAG_KEY_PREFIX = "entity-cache:tag:"

# Tag sets outlive every entry they reference (entry TTLs never exceed a day)
TAG_TTL = 86400


class RedisKeyValueStore:
    """Redis implementation of the keyed store.

    This class satisfies the KeyValueStore protocol through structural
    typing - no explicit inheritance needed.

    Every Redis error, including connection failures and socket timeouts,
    is raised as ``StoreUnavailable``. Timeouts are bounded by the client's
    ``socket_timeout`` (see ``get_redis_client``).

    Deleted keys leave their tag sets through ``SREM``. A member whose entry
    merely expired stays until its tag is flushed or the tag set expires,
    so a tag set never holds more than the distinct keys of its type.
    """

    def __init__(self, redis_client: redis.Redis | None = None, tag_ttl: int = TAG_TTL) -> None:
        """Initialize the Redis store.

        Args:
            redis_client: Redis client instance. If None, creates default.
            tag_ttl: Time-to-live of tag sets in seconds.
        """
        self._client = redis_client or get_redis_client()
        self._tag_ttl = tag_ttl

    @classmethod
    def create(cls, redis_client: redis.Redis | None = None) -> "RedisKeyValueStore":
        """Factory method to create RedisKeyValueStore with defaults.

        Args:
            redis_client: Redis client. If None, one is built from settings.

        Returns:
            Configured RedisKeyValueStore
        """
        return cls(redis_client=redis_client)

    @contextmanager
    def _translate_errors(self, operation: str, key: str | None = None) -> Iterator[None]:
        try:
            yield
        except redis.RedisError as e:
            raise StoreUnavailable(f"Redis {operation} failed: {e}", key=key) from e

    @staticmethod
    def _tag_key(tag: str) -> str:
        return f"{TAG_KEY_PREFIX}{tag}"

    def _add_tags(self, pipe, keys: list[str], tags: Iterable[str]) -> None:
        for tag in tags:
            tag_key = self._tag_key(tag)
            pipe.sadd(tag_key, *keys)
            pipe.expire(tag_key, self._tag_ttl)

    @property
    def supports_tags(self) -> bool:
        return True

    def get(self, key: str) -> bytes | None:
        with self._translate_errors("GET", key):
            return self._client.get(key)  # type: ignore[return-value]

    def put(self, key: str, value: bytes, ttl: int, tags: Iterable[str] = ()) -> bool:
        """Store a value with SET EX and register it under its tags.

        Args:
            key: The key to write
            value: The serialized value
            ttl: Time-to-live in seconds
            tags: Tags to group the key under

        Returns:
            True if Redis acknowledged the SET
        """
        with self._translate_errors("SET", key):
            pipe = self._client.pipeline(transaction=False)
            pipe.set(key, value, ex=ttl)
            self._add_tags(pipe, [key], tags)
            results = pipe.execute()
        return bool(results[0])

    def delete(self, key: str, tags: Iterable[str] = ()) -> bool:
        """Delete a key and remove it from the given tag sets.

        Returns:
            True once Redis confirmed the key no longer exists
        """
        tags = list(tags)
        with self._translate_errors("DEL", key):
            if not tags:
                self._client.delete(key)
                return True
            pipe = self._client.pipeline(transaction=False)
            pipe.delete(key)
            for tag in tags:
                pipe.srem(self._tag_key(tag), key)
            pipe.execute()
        return True

    def get_many(self, keys: list[str]) -> dict[str, bytes | None]:
        if not keys:
            return {}
        with self._translate_errors("MGET"):
            values = self._client.mget(keys)
        return dict(zip(keys, values))  # type: ignore[arg-type]

    def put_many(self, values: Mapping[str, bytes], ttl: int, tags: Iterable[str] = ()) -> bool:
        """Store several values in a single pipeline round trip.

        Returns:
            True if every SET was acknowledged
        """
        if not values:
            return True

        with self._translate_errors("pipeline SET"):
            pipe = self._client.pipeline(transaction=False)
            for key, value in values.items():
                pipe.set(key, value, ex=ttl)
            self._add_tags(pipe, list(values), tags)
            results = pipe.execute()
        return all(results[: len(values)])

    def delete_by_tag(self, tag: str) -> bool:
        """Delete every key registered under a tag, then the tag itself.

        Returns:
            True once the tag and its members are gone
        """
        tag_key = self._tag_key(tag)
        with self._translate_errors("tag flush", tag_key):
            members = self._client.smembers(tag_key)
            pipe = self._client.pipeline(transaction=False)
            if members:
                pipe.delete(*members)
            pipe.delete(tag_key)
            pipe.execute()
        return True

    def health_check(self) -> bool:
        """Check if Redis is accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            return bool(self._client.ping())
        except redis.RedisError:
            return False

    @property
    def client(self) -> redis.Redis:
        """Get the Redis client."""
        return self._client
