"""Tests for cache keys and the stored payload formats."""

from datetime import datetime, timezone

import pytest

from entity_cache.dto import CacheEntryPayload, PerformanceStatsPayload
from entity_cache.entities import CacheEntryEntity, CacheKey, PerformanceStatsEntity, type_fingerprint
from entity_cache.errors import SerializationError


def test_cache_key_layout():
    key = CacheKey.build("entity-cache", "app.models.Widget", 42)

    assert key.value == f"entity-cache:{type_fingerprint('app.models.Widget')}:42"
    assert len(type_fingerprint("app.models.Widget")) == 32


def test_cache_key_hashes_type_names_containing_separators():
    first = CacheKey.build("p", "a:b", "c").value
    second = CacheKey.build("p", "a", "b:c").value

    assert first != second
    assert first.count(":") == 2


def test_type_tag_hashes_the_type_name():
    assert CacheKey.type_tag("p", "app.Widget") == f"p:{type_fingerprint('app.Widget')}"
    assert CacheKey.type_tag("p", "app.Widget") != CacheKey.type_tag("p", "app_Widget")


def test_entry_payload_round_trip():
    entry = CacheEntryEntity(
        attributes={"id": 1, "name": "Widget"},
        original={"id": 1, "name": "Old"},
        relations={"parts": [{"id": 3}]},
        cached_at=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
    )

    assert CacheEntryPayload.decode(CacheEntryPayload.encode(entry)) == entry


@pytest.mark.parametrize(
    "raw",
    [
        b"",
        b"not json",
        b"[]",
        b'{"attributes": {}}',
        b'{"attributes": "x", "cached_at": "2024-01-01T00:00:00Z"}',
        b'{"attributes": {}, "cached_at": "2024-01-01T00:00:00Z", "schema_version": "3.0"}',
    ],
)
def test_malformed_entries_raise_serialization_error(raw):
    with pytest.raises(SerializationError):
        CacheEntryPayload.decode(raw)


def test_unencodable_attribute_raises_serialization_error():
    entry = CacheEntryEntity(attributes={"handle": object()}, cached_at=datetime.now(timezone.utc))

    with pytest.raises(SerializationError):
        CacheEntryPayload.encode(entry)


def test_stats_payload_round_trip():
    stats = PerformanceStatsEntity(
        entity_type="app.Widget",
        hits=3,
        misses=1,
        created_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
        last_hit_at=datetime(2024, 5, 2, tzinfo=timezone.utc),
    )

    assert PerformanceStatsPayload.decode(PerformanceStatsPayload.encode(stats)) == stats


def test_stats_payload_rejects_negative_counters():
    raw = b'{"entity_type": "x", "hits": -1, "misses": 0, "created_at": "2024-01-01T00:00:00Z"}'

    with pytest.raises(SerializationError):
        PerformanceStatsPayload.decode(raw)


def test_stats_entity_hit_rate():
    created = datetime.now(timezone.utc)

    assert PerformanceStatsEntity(entity_type="x", created_at=created).hit_rate == 0.0
    assert PerformanceStatsEntity(entity_type="x", created_at=created, hits=1, misses=2).hit_rate == 0.3333
    with pytest.raises(ValueError):
        PerformanceStatsEntity(entity_type="x", created_at=created, hits=-1)
