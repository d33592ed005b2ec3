"""Utility modules for the entity cache."""

from .log import EntityCacheLogger, get_logger

__all__ = [
    "EntityCacheLogger",
    "get_logger",
]
