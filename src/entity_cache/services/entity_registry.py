"""Registry of cacheable entity types and their cache configuration."""

from collections.abc import Iterator
from dataclasses import dataclass

from entity_cache.entities import CacheConfig
from entity_cache.errors import InvalidEntityType
from entity_cache.protocols import CacheableEntity


def type_name(entity_cls: type) -> str:
    """Fully-qualified name of an entity class."""
    return f"{entity_cls.__module__}.{entity_cls.__qualname__}"


@dataclass(frozen=True)
class RegisteredType:
    """A cacheable entity class together with its name and config."""

    name: str
    entity_cls: type
    config: CacheConfig


class EntityTypeRegistry:
    """Resolves entity classes or names to their cache configuration.

    Example:
        ```python
        registry = EntityTypeRegistry()
        registry.register(Widget, CacheConfig(ttl=600))
        registry.resolve(Widget).config.ttl      # 600
        registry.resolve("app.models.Widget")    # same entry
        ```
    """

    def __init__(self, default_config: CacheConfig | None = None) -> None:
        """Initialize the registry.

        Args:
            default_config: Config for types registered without one. Defaults to settings.
        """
        self._default_config = default_config
        self._by_name: dict[str, RegisteredType] = {}
        self._by_class: dict[type, RegisteredType] = {}

    @property
    def default_config(self) -> CacheConfig:
        if self._default_config is None:
            self._default_config = CacheConfig.from_settings()
        return self._default_config

    def register(
        self,
        entity_cls: type,
        config: CacheConfig | None = None,
        name: str | None = None,
    ) -> RegisteredType:
        """Register an entity class.

        Args:
            entity_cls: Class implementing the CacheableEntity protocol
            config: Cache config of the type. Defaults to the registry default.
            name: Registered name. Defaults to the fully-qualified class name.

        Returns:
            The registered entry

        Raises:
            InvalidEntityType: If the class does not implement CacheableEntity
        """
        if not isinstance(entity_cls, type) or not issubclass(entity_cls, CacheableEntity):
            raise InvalidEntityType(entity_cls)

        registered = RegisteredType(
            name=name or type_name(entity_cls),
            entity_cls=entity_cls,
            config=config or self.default_config,
        )
        self._by_name[registered.name] = registered
        self._by_class[entity_cls] = registered
        return registered

    def resolve(self, entity_type: type | str) -> RegisteredType:
        """Look up a registered type by class or by name.

        Raises:
            InvalidEntityType: If nothing is registered under it
        """
        if isinstance(entity_type, str):
            registered = self._by_name.get(entity_type)
        elif isinstance(entity_type, type):
            registered = self._by_class.get(entity_type)
        else:
            registered = None

        if registered is None:
            raise InvalidEntityType(entity_type)
        return registered

    def names(self) -> list[str]:
        return sorted(self._by_name)

    def __contains__(self, entity_type: object) -> bool:
        return entity_type in self._by_name or entity_type in self._by_class

    def __iter__(self) -> Iterator[RegisteredType]:
        return iter(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)
