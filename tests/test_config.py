"""Tests for settings validation, per-type config and the type registry."""

import logging

import pytest
from conftest import Widget

from entity_cache import CacheConfig, EntityTypeRegistry
from entity_cache.config import Settings
from entity_cache.errors import InvalidEntityType
from entity_cache.repositories import InMemoryKeyValueStore, RedisKeyValueStore, create_store
from entity_cache.services import type_name
from entity_cache.utils import get_logger


@pytest.mark.parametrize(
    "overrides",
    [
        {"cache_ttl": 0},
        {"stats_ttl": -1},
        {"redis_socket_timeout": 0},
        {"cache_driver": "memcached"},
        {"log_level": "LOUD"},
    ],
)
def test_invalid_settings_are_rejected(overrides):
    with pytest.raises(ValueError):
        Settings(**overrides)


def test_cache_config_from_settings_with_overrides():
    source = Settings(cache_ttl=120, cache_prefix="app", cache_driver="memory")

    config = CacheConfig.from_settings(source, ttl=600)

    assert config.ttl == 600
    assert config.key_prefix == "app"
    assert config.driver_name is None
    assert CacheConfig.from_settings(source, driver_name="array").driver_name == "array"


def test_cache_config_validation():
    with pytest.raises(ValueError):
        CacheConfig(ttl=0)
    with pytest.raises(ValueError):
        CacheConfig(key_prefix="")
    with pytest.raises(ValueError):
        CacheConfig(driver_name="file")


def test_registry_resolves_by_class_and_name():
    registry = EntityTypeRegistry(default_config=CacheConfig(ttl=90))
    registered = registry.register(Widget)

    assert registered.name == type_name(Widget)
    assert registry.resolve(Widget) is registered
    assert registry.resolve(type_name(Widget)) is registered
    assert registered.config.ttl == 90
    assert Widget in registry
    assert len(registry) == 1


def test_registry_rejects_non_cacheable_classes():
    registry = EntityTypeRegistry(default_config=CacheConfig())

    with pytest.raises(InvalidEntityType):
        registry.register(dict)
    with pytest.raises(InvalidEntityType):
        registry.register("Widget")
    with pytest.raises(InvalidEntityType):
        registry.resolve(42)


def test_invalid_entity_type_is_a_type_error():
    with pytest.raises(TypeError):
        EntityTypeRegistry(default_config=CacheConfig()).resolve("missing")


def test_create_store_drivers():
    assert isinstance(create_store("redis", redis_client=object()), RedisKeyValueStore)
    assert isinstance(create_store("memory"), InMemoryKeyValueStore)
    assert create_store("array").supports_tags is False
    with pytest.raises(ValueError):
        create_store("file")


def test_disabled_cache_logging_leaves_the_named_logger_alone(caplog):
    quiet = get_logger("entity_cache.tests.quiet", Settings(log_enabled=False))
    loud = get_logger("entity_cache.tests.loud", Settings(log_enabled=True, log_level="INFO"))

    with caplog.at_level(logging.INFO, logger="entity_cache.tests"):
        quiet.info("cache event")
        logging.getLogger("entity_cache.tests.quiet").info("application event")
        loud.info("Entity cached", context={"id": 1})

    messages = [record.getMessage() for record in caplog.records]
    assert messages == ["application event", "[EntityCache] Entity cached"]
    assert logging.getLogger("entity_cache.tests.quiet").disabled is False
    assert caplog.records[-1].context == {"package": "entity-cache", "id": 1}
