#!/usr/bin/env python3
"""
Demo script for the entity cache.

This script demonstrates read-through caching, batched lookups and the
adaptive TTL. Pass --redis to run against REDIS_URL instead of an
in-process store.
"""

import sys
import time
from datetime import datetime

from entity_cache import (
    CacheableModel,
    CacheConfig,
    EntityCacheService,
    EntityTypeRegistry,
    InMemoryEntitySource,
)


class Widget(CacheableModel):
    """Sample entity for the demo."""

    id: int | None = None
    name: str
    price: float = 0.0
    deleted_at: datetime | None = None


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def build_cache(driver_name: str) -> EntityCacheService:
    """Create a cache over a small in-memory catalogue of widgets."""
    source = InMemoryEntitySource(
        Widget(id=i, name=f"Widget {i}", price=i * 2.5) for i in range(1, 21)
    )
    registry = EntityTypeRegistry()
    registry.register(Widget, CacheConfig(ttl=300, driver_name=driver_name), name="widget")
    return EntityCacheService.create(source=source, registry=registry, driver_name=driver_name)


def demo_read_through(cache: EntityCacheService) -> None:
    """Demonstrate single-entity read-through."""
    print_section("Read-through")

    for attempt in ("first", "second"):
        start = time.time()
        widget = cache.get("widget", 7)
        duration = (time.time() - start) * 1000
        print(f"  {attempt} get(widget, 7): {widget.name if widget else None} in {duration:.2f}ms")

    print(f"  get(widget, 999): {cache.get('widget', 999)}")


def demo_batch(cache: EntityCacheService) -> None:
    """Demonstrate batched lookups."""
    print_section("Batched lookup")

    result = cache.lookup_many("widget", [1, 2, 3, 7, 100])
    print(f"  hits:    {result.hit_ids}")
    print(f"  misses:  {result.missed_ids}")
    print(f"  entities: {[w.name for w in result.entities]}")
    print(f"  write-through: {result.write_report.to_dict()}")


def demo_adaptive_ttl(cache: EntityCacheService) -> None:
    """Demonstrate how the hit rate moves the TTL."""
    print_section("Adaptive TTL")

    tracker = cache.tracker
    name = cache.registry.resolve("widget").name

    print(f"  hit rate: {tracker.hit_rate(name):.4f}")
    print(f"  TTL for base 300s: {tracker.adaptive_ttl(name, 300)}s")

    for _ in range(10):
        cache.get("widget", 7)
    print("\n  after 10 more hits:")
    print(f"  hit rate: {tracker.hit_rate(name):.4f}")
    print(f"  TTL for base 300s: {tracker.adaptive_ttl(name, 300)}s")


def demo_invalidation(cache: EntityCacheService) -> None:
    """Demonstrate invalidation hooks."""
    print_section("Invalidation")

    widget = cache.get("widget", 3)
    widget.price = 99.0
    cache.source.save(widget)
    cache.on_saved(widget)
    print(f"  after save:   price={cache.get('widget', 3).price}")

    print(f"  invalidate_all: {cache.invalidate_all('widget')}")
    print(f"  stats: {cache.cache_stats('widget')}")


def main() -> None:
    """Run all demos."""
    driver_name = "redis" if "--redis" in sys.argv else "memory"

    print("\n🚀 Entity Cache Demo")
    print("=" * 70)
    print(f"Store driver: {driver_name}")

    try:
        cache = build_cache(driver_name)
        demo_read_through(cache)
        demo_batch(cache)
        demo_adaptive_ttl(cache)
        demo_invalidation(cache)

        print("\n" + "=" * 70)
        print("✅ Demo completed successfully!")
        print("=" * 70)

    except Exception as e:
        print(f"\n❌ Error: {e}")
        print("\nWith --redis, make sure Redis is running:")
        print("  redis-server")
        print("\nOr set REDIS_URL to your Redis instance.")


if __name__ == "__main__":
    main()
