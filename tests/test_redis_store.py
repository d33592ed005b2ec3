"""Tests for the Redis store against a mocked client."""

from unittest.mock import MagicMock

import pytest
import redis

from entity_cache.errors import StoreUnavailable
from entity_cache.repositories import RedisKeyValueStore
from entity_cache.repositories.redis_store import TAG_KEY_PREFIX, TAG_TTL


@pytest.fixture
def client():
    client = MagicMock(spec=redis.Redis)
    client.pipeline.return_value = MagicMock()
    return client


@pytest.fixture
def redis_store(client):
    return RedisKeyValueStore.create(redis_client=client)


def test_get_returns_raw_bytes(redis_store, client):
    client.get.return_value = b"payload"

    assert redis_store.get("k") == b"payload"
    client.get.assert_called_once_with("k")


@pytest.mark.parametrize(
    "error",
    [redis.ConnectionError("refused"), redis.TimeoutError("timed out"), redis.ResponseError("LOADING")],
)
def test_redis_errors_become_store_unavailable(redis_store, client, error):
    client.get.side_effect = error

    with pytest.raises(StoreUnavailable) as excinfo:
        redis_store.get("k")

    assert excinfo.value.key == "k"
    assert excinfo.value.__cause__ is error


def test_put_sets_expiry_and_registers_tags(redis_store, client):
    pipe = client.pipeline.return_value
    pipe.execute.return_value = [True, 1, True]

    assert redis_store.put("k", b"v", 150, tags=["widgets"]) is True

    pipe.set.assert_called_once_with("k", b"v", ex=150)
    pipe.sadd.assert_called_once_with(f"{TAG_KEY_PREFIX}widgets", "k")
    pipe.expire.assert_called_once_with(f"{TAG_KEY_PREFIX}widgets", TAG_TTL)


def test_put_reports_rejected_set(redis_store, client):
    client.pipeline.return_value.execute.return_value = [None]

    assert redis_store.put("k", b"v", 60) is False


def test_put_pipeline_failure_becomes_store_unavailable(redis_store, client):
    client.pipeline.return_value.execute.side_effect = redis.ConnectionError("gone")

    with pytest.raises(StoreUnavailable):
        redis_store.put("k", b"v", 60)


def test_get_many_uses_single_mget(redis_store, client):
    client.mget.return_value = [b"a", None]

    assert redis_store.get_many(["k1", "k2"]) == {"k1": b"a", "k2": None}
    client.mget.assert_called_once_with(["k1", "k2"])


def test_get_many_without_keys_skips_redis(redis_store, client):
    assert redis_store.get_many([]) == {}
    client.mget.assert_not_called()


def test_put_many_writes_every_key_in_one_pipeline(redis_store, client):
    pipe = client.pipeline.return_value
    pipe.execute.return_value = [True, True, 2, True]

    assert redis_store.put_many({"a": b"1", "b": b"2"}, 300, tags=["t"]) is True

    assert pipe.set.call_count == 2
    pipe.sadd.assert_called_once_with(f"{TAG_KEY_PREFIX}t", "a", "b")
    pipe.execute.assert_called_once()


def test_put_many_reports_any_rejected_set(redis_store, client):
    client.pipeline.return_value.execute.return_value = [True, None]

    assert redis_store.put_many({"a": b"1", "b": b"2"}, 300) is False


def test_delete_by_tag_removes_members_and_tag(redis_store, client):
    client.smembers.return_value = {b"k1", b"k2"}
    pipe = client.pipeline.return_value

    assert redis_store.delete_by_tag("widgets") is True

    client.smembers.assert_called_once_with(f"{TAG_KEY_PREFIX}widgets")
    deleted = [call.args for call in pipe.delete.call_args_list]
    assert set(deleted[0]) == {b"k1", b"k2"}
    assert deleted[1] == (f"{TAG_KEY_PREFIX}widgets",)


def test_delete_succeeds_for_absent_key(redis_store, client):
    client.delete.return_value = 0

    assert redis_store.delete("missing") is True


def test_delete_with_tags_removes_key_from_tag_sets(redis_store, client):
    pipe = client.pipeline.return_value

    assert redis_store.delete("k", tags=["widgets"]) is True

    pipe.delete.assert_called_once_with("k")
    pipe.srem.assert_called_once_with(f"{TAG_KEY_PREFIX}widgets", "k")
    pipe.execute.assert_called_once()
    client.delete.assert_not_called()


def test_health_check(redis_store, client):
    client.ping.return_value = True
    assert redis_store.health_check() is True

    client.ping.side_effect = redis.ConnectionError("down")
    assert redis_store.health_check() is False


def test_supports_tags(redis_store):
    assert redis_store.supports_tags is True
