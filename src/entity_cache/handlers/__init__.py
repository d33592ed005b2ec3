"""Handler layer for the operator HTTP endpoints.

Handlers translate cache service results and errors into DTOs and HTTP
status codes. They depend on the service, never on stores or sources.
"""

from .cache_handler import CacheHandler

__all__ = ["CacheHandler"]
