"""Shared fixtures: sample entities, recording fakes and a wired service."""

from collections import Counter
from datetime import datetime

import pytest

from entity_cache import (
    CacheableModel,
    CacheConfig,
    EntityCacheService,
    EntityTypeRegistry,
    InMemoryEntitySource,
    InMemoryKeyValueStore,
    PerformanceTracker,
)
from entity_cache.errors import StoreUnavailable


class Widget(CacheableModel):
    id: int | None = None
    name: str
    price: float = 0.0
    deleted_at: datetime | None = None


class Gadget(CacheableModel):
    id: int | None = None
    label: str


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingStore:
    """In-memory store that counts calls and can be told to fail."""

    def __init__(self, supports_tags: bool = True, clock: FakeClock | None = None) -> None:
        self.inner = InMemoryKeyValueStore(supports_tags=supports_tags, clock=clock or FakeClock())
        self.calls: Counter = Counter()
        self.failing: set[str] = set()
        self.rejecting: set[str] = set()
        self.ttls: dict[str, int] = {}

    def _enter(self, name: str) -> None:
        self.calls[name] += 1
        if name in self.failing:
            raise StoreUnavailable(f"{name} failed")

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())

    @property
    def supports_tags(self) -> bool:
        return self.inner.supports_tags

    def get(self, key):
        self._enter("get")
        return self.inner.get(key)

    def put(self, key, value, ttl, tags=()):
        self._enter("put")
        if "put" in self.rejecting:
            return False
        self.ttls[key] = ttl
        return self.inner.put(key, value, ttl, tags)

    def delete(self, key, tags=()):
        self._enter("delete")
        return self.inner.delete(key, tags)

    def get_many(self, keys):
        self._enter("get_many")
        return self.inner.get_many(keys)

    def put_many(self, values, ttl, tags=()):
        self._enter("put_many")
        if "put_many" in self.rejecting:
            return False
        self.ttls.update({key: ttl for key in values})
        return self.inner.put_many(values, ttl, tags)

    def delete_by_tag(self, tag):
        self._enter("delete_by_tag")
        return self.inner.delete_by_tag(tag)

    def health_check(self):
        return "health_check" not in self.failing


class RecordingSource(InMemoryEntitySource):
    """In-memory source that records every fetch."""

    def __init__(self, entities=()) -> None:
        super().__init__(entities)
        self.fetches: list[tuple[str, object]] = []

    def fetch_by_id(self, entity_type, entity_id):
        self.fetches.append(("fetch_by_id", entity_id))
        return super().fetch_by_id(entity_type, entity_id)

    def fetch_by_ids(self, entity_type, entity_ids):
        entity_ids = list(entity_ids)
        self.fetches.append(("fetch_by_ids", entity_ids))
        return super().fetch_by_ids(entity_type, entity_ids)

    def fetch_all(self, entity_type):
        self.fetches.append(("fetch_all", None))
        return super().fetch_all(entity_type)


class RecordingTracker(PerformanceTracker):
    """Tracker that remembers every hit/miss it was asked to record."""

    def __init__(self, store, **kwargs) -> None:
        super().__init__(store, **kwargs)
        self.recorded: list[tuple[str, str]] = []

    def record_hit(self, entity_type: str) -> None:
        self.recorded.append(("hit", entity_type))
        super().record_hit(entity_type)

    def record_miss(self, entity_type: str) -> None:
        self.recorded.append(("miss", entity_type))
        super().record_miss(entity_type)

    def count(self, outcome: str) -> int:
        return sum(1 for recorded, _ in self.recorded if recorded == outcome)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return RecordingStore(clock=clock)


@pytest.fixture
def widgets():
    return [Widget(id=i, name=f"Widget {i}", price=i * 1.5) for i in range(1, 6)]


@pytest.fixture
def source(widgets):
    return RecordingSource(widgets)


@pytest.fixture
def widget_config():
    return CacheConfig(ttl=300, key_prefix="test-cache")


@pytest.fixture
def registry(widget_config):
    registry = EntityTypeRegistry(default_config=widget_config)
    registry.register(Widget, widget_config, name="widget")
    registry.register(Gadget, widget_config, name="gadget")
    return registry


@pytest.fixture
def tracker(store):
    return RecordingTracker(store, stats_ttl=86400)


@pytest.fixture
def cache(store, source, registry, tracker):
    return EntityCacheService(store=store, source=source, registry=registry, tracker=tracker)
