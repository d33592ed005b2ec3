"""Logging for cache operations.

Cache code logs through ``EntityCacheLogger``, a ``logging.LoggerAdapter``
that tags every record with the package name and merges per-call context
into ``extra``. Output is off unless ``ENTITY_CACHE_LOG_ENABLED`` is set;
the level comes from ``ENTITY_CACHE_LOG_LEVEL``.
"""

import logging
from collections.abc import Mapping, MutableMapping
from typing import Any

from entity_cache.config import Settings, settings

PACKAGE_NAME = "entity-cache"
MESSAGE_PREFIX = "[EntityCache]"

logging.getLogger("entity_cache").addHandler(logging.NullHandler())


class EntityCacheLogger(logging.LoggerAdapter):
    """Logger adapter that enriches records with cache context.

    A disabled adapter drops its own records only; other users of the same
    named logger are unaffected.

    Example:
        ```python
        log = get_logger(__name__)
        log.info("Entity cached", context={"entity_type": "app.Widget", "id": 42})
        ```
    """

    def __init__(self, logger: logging.Logger, extra: Mapping[str, Any] | None = None, enabled: bool = True) -> None:
        super().__init__(logger, extra or {})
        self.enabled = enabled

    def isEnabledFor(self, level: int) -> bool:
        return self.enabled and self.logger.isEnabledFor(level)

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        context = kwargs.pop("context", None) or {}
        extra = dict(self.extra or {})
        extra.update(kwargs.get("extra") or {})
        extra["context"] = {"package": PACKAGE_NAME, **context}
        kwargs["extra"] = extra
        return f"{MESSAGE_PREFIX} {msg}", kwargs


def get_logger(name: str = "entity_cache", config: Settings | None = None) -> EntityCacheLogger:
    """Get a cache logger configured from settings.

    The switch only gates this adapter. The named logger stays usable by
    the application, which keeps control of handlers and propagation.

    Args:
        name: Logger name, usually ``__name__``
        config: Settings to read the log switches from. Defaults to global settings.

    Returns:
        An EntityCacheLogger that emits nothing when cache logging is switched off
    """
    config = config or settings
    logger = logging.getLogger(name)
    if config.log_enabled:
        logger.setLevel(config.log_level)
    return EntityCacheLogger(logger, {}, enabled=config.log_enabled)
