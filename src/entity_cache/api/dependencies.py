"""FastAPI wiring for the entity cache service.

The service and its handler live on ``app.state``; route dependencies read
them from the request so tests can hand a fully wired service to
``create_app``.
"""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from entity_cache.handlers import CacheHandler
from entity_cache.repositories import InMemoryEntitySource
from entity_cache.services import EntityCacheService

logger = logging.getLogger(__name__)


def _from_state(request: Request, attribute: str):
    value = getattr(request.app.state, attribute, None)
    if value is None:
        raise RuntimeError(f"app.state.{attribute} is not set; was the app started through its lifespan?")
    return value


def get_cache_service(request: Request) -> EntityCacheService:
    """Service exposed by this application."""
    return _from_state(request, "cache_service")


def get_handler(request: Request) -> CacheHandler:
    """Handler bound to the exposed service."""
    return _from_state(request, "cache_handler")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Attach the cache service and its handler for the life of the app.

    A service preset on ``app.state`` is used as is and left in place on
    shutdown. Without one, a service over the configured store and an empty
    in-memory source is built; it can only report and reset stats.
    """
    cache_service = getattr(app.state, "cache_service", None)
    owns_service = cache_service is None
    if owns_service:
        cache_service = EntityCacheService.create(source=InMemoryEntitySource())
        logger.warning("No entity cache service configured, using an empty in-memory source")

    app.state.cache_service = cache_service
    app.state.cache_handler = CacheHandler(cache_service=cache_service)
    logger.info("Entity cache API started (%d entity types)", len(cache_service.registry))

    yield

    del app.state.cache_handler
    if owns_service:
        del app.state.cache_service
    logger.info("Entity cache API stopped")


HandlerDep = Annotated[CacheHandler, Depends(get_handler)]
ServiceDep = Annotated[EntityCacheService, Depends(get_cache_service)]
