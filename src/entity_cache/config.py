import logging
import os
from dataclasses import dataclass
from functools import lru_cache

import redis
from dotenv import load_dotenv

load_dotenv()

SUPPORTED_DRIVERS = ("redis", "memory", "array")


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Redis
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")
    redis_socket_timeout: float = float(os.getenv("REDIS_SOCKET_TIMEOUT", "2.0"))

    # Entity cache
    cache_ttl: int = int(os.getenv("ENTITY_CACHE_TTL", "300"))  # 5 minutes
    cache_prefix: str = os.getenv("ENTITY_CACHE_PREFIX", "entity-cache")
    auto_invalidate: bool = _env_bool("ENTITY_CACHE_AUTO_INVALIDATE", "true")
    cache_relationships: bool = _env_bool("ENTITY_CACHE_RELATIONSHIPS", "false")
    cache_driver: str = os.getenv("ENTITY_CACHE_DRIVER", "redis")

    # Performance stats retention
    stats_ttl: int = int(os.getenv("ENTITY_CACHE_STATS_TTL", "86400"))  # 24 hours

    # Logging
    log_enabled: bool = _env_bool("ENTITY_CACHE_LOG_ENABLED", "false")
    log_level: str = os.getenv("ENTITY_CACHE_LOG_LEVEL", "DEBUG").upper()

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = _env_bool("API_RELOAD", "true")

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.cache_ttl <= 0:
            raise ValueError("ENTITY_CACHE_TTL must be a positive number of seconds")

        if self.stats_ttl <= 0:
            raise ValueError("ENTITY_CACHE_STATS_TTL must be a positive number of seconds")

        if self.redis_socket_timeout <= 0:
            raise ValueError("REDIS_SOCKET_TIMEOUT must be positive")

        if self.cache_driver not in SUPPORTED_DRIVERS:
            raise ValueError(
                f"ENTITY_CACHE_DRIVER must be one of {list(SUPPORTED_DRIVERS)}, "
                f"got {self.cache_driver!r}"
            )

        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ValueError(f"ENTITY_CACHE_LOG_LEVEL is not a logging level: {self.log_level!r}")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_redis_client() -> redis.Redis:
    """Create a Redis client instance.

    Both the connect and the per-command socket timeouts are bounded so a
    stalled server surfaces as a timeout instead of hanging the caller.
    """
    return redis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        socket_timeout=settings.redis_socket_timeout,
        socket_connect_timeout=settings.redis_socket_timeout,
        decode_responses=False,
    )
