"""
Redis connection management with pooling and health checks.

Builds the async Redis client the wallet store talks to. Each manager
owns its own pool.
"""

from typing import Optional

from redis.asyncio import ConnectionPool, Redis
from redis.asyncio.retry import Retry
from redis.backoff import ExponentialBackoff

from ..config import Settings
from ..config import settings as default_settings
from .logging_config import get_logger

logger = get_logger(__name__)

RETRY_MIN_BACKOFF_SECONDS = 0.01
RETRY_MAX_BACKOFF_SECONDS = 1.0


class RedisConnectionManager:
    """
    Manages Redis connection pool and client lifecycle.

    The client is created lazily on first use. Creating it performs no
    network I/O; connections are opened by the pool on demand.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or default_settings
        self._client: Optional[Redis] = None
        self._pool: Optional[ConnectionPool] = None

    def get_client(self) -> Redis:
        """
        Get or create Redis client.

        Returns:
            Async Redis client instance
        """
        if self._client is None:
            self._create_client()
        return self._client

    def _create_client(self) -> None:
        """Create Redis client with connection pool."""
        retry = Retry(
            ExponentialBackoff(
                cap=RETRY_MAX_BACKOFF_SECONDS,
                base=RETRY_MIN_BACKOFF_SECONDS,
            ),
            self.settings.REDIS_MAX_RETRIES,
        )

        self._pool = ConnectionPool.from_url(
            self.settings.REDIS_URL,
            max_connections=self.settings.REDIS_MAX_CONNECTIONS,
            socket_timeout=self.settings.REDIS_SOCKET_TIMEOUT,
            socket_connect_timeout=self.settings.REDIS_CONNECT_TIMEOUT,
            decode_responses=True,
            retry=retry,
        )
        self._client = Redis(connection_pool=self._pool)

        logger.info(
            "Redis client created",
            redis_url=self.settings.REDIS_URL.split("@")[-1],
            max_connections=self.settings.REDIS_MAX_CONNECTIONS,
        )

    async def health_check(self) -> bool:
        """
        Check Redis health.

        Returns:
            True if healthy, False otherwise
        """
        try:
            client = self.get_client()
            await client.ping()
            return True
        except Exception as e:
            logger.error("Redis health check failed", error=str(e))
            return False

    def get_pool_stats(self) -> dict:
        """Connection pool statistics."""
        if not self._pool:
            return {"status": "not_initialized"}

        kwargs = self._pool.connection_kwargs
        return {
            "max_connections": self._pool.max_connections,
            "connection_kwargs": {
                "host": kwargs.get("host"),
                "port": kwargs.get("port"),
                "db": kwargs.get("db"),
            },
        }

    async def close(self) -> None:
        """Close Redis connection and clean up resources."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("Redis client closed")

        if self._pool:
            await self._pool.disconnect()
            self._pool = None
            logger.info("Redis connection pool closed")
