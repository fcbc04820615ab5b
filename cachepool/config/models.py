"""Config models and loader.

Pydantic models describing how caches are built, plus environment-driven
settings. Nothing here reads the environment or the filesystem on import:
callers opt in through :meth:`CacheConfig.load` or :class:`EnvSettings`.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..cache.pool import DEFAULT_CLEANUP_INTERVAL, DEFAULT_EXPIRATION


class PoolCacheConfig(BaseModel):
    """Settings for a :class:`~cachepool.cache.pool.PoolCache`.

    Attributes
    ----------
    default_expiration_seconds: float
        Lifetime of an unused pooled instance. Non-positive values fall back
        to 30 seconds.
    cleanup_interval_seconds: float
        Seconds between expiration sweeps. Non-positive values fall back to
        1 second.
    """

    default_expiration_seconds: float = Field(DEFAULT_EXPIRATION)
    cleanup_interval_seconds: float = Field(DEFAULT_CLEANUP_INTERVAL)

    @field_validator("default_expiration_seconds")
    @classmethod
    def _default_expiration(cls, value: float) -> float:
        return value if value > 0 else DEFAULT_EXPIRATION

    @field_validator("cleanup_interval_seconds")
    @classmethod
    def _cleanup_interval(cls, value: float) -> float:
        return value if value > 0 else DEFAULT_CLEANUP_INTERVAL


class LRUCacheConfig(BaseModel):
    """Settings for an :class:`~cachepool.cache.lru.LRUCache`."""

    capacity: int = Field(1024, ge=0, description="Bound on aggregate entry size")


class CacheConfig(BaseModel):
    """Top-level configuration for both cache kinds."""

    pool: PoolCacheConfig = Field(default_factory=PoolCacheConfig)
    lru: LRUCacheConfig = Field(default_factory=LRUCacheConfig)

    @staticmethod
    def load(path: Path) -> "CacheConfig":
        """Load configuration from a JSON file."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        return CacheConfig.model_validate(data)


class EnvSettings(BaseSettings):
    """Environment-driven settings and .env support.

    Attributes
    ----------
    log_level: str
        Logging level name (e.g., "DEBUG", "INFO"). Defaults to "INFO".
    default_expiration_seconds: float
        Pool cache default expiration.
    cleanup_interval_seconds: float
        Pool cache sweep interval.
    lru_capacity: int
        LRU cache capacity.
    """

    model_config = SettingsConfigDict(env_file=".env", env_prefix="CACHEPOOL_")

    log_level: str = Field("INFO")
    default_expiration_seconds: float = Field(DEFAULT_EXPIRATION)
    cleanup_interval_seconds: float = Field(DEFAULT_CLEANUP_INTERVAL)
    lru_capacity: int = Field(1024, ge=0)

    def to_config(self) -> CacheConfig:
        return CacheConfig(
            pool=PoolCacheConfig(
                default_expiration_seconds=self.default_expiration_seconds,
                cleanup_interval_seconds=self.cleanup_interval_seconds,
            ),
            lru=LRUCacheConfig(capacity=self.lru_capacity),
        )
