import os
import json
import logging
from redis import Redis
from redis.exceptions import ConnectionError, RedisError
from typing import Optional, Any

logger = logging.getLogger(__name__)


class RedisClient:
    """Short-lived cache for shaped report responses.

    The connection is opened lazily. Every operation degrades to a no-op
    while Redis is unreachable.
    """

    def __init__(self, host: Optional[str] = None, port: Optional[int] = None):
        self.host = host or os.getenv('REDIS_HOST', 'localhost')
        self.port = int(port or os.getenv('REDIS_PORT', 6379))
        self.redis_client = None

    def _connection(self) -> Optional[Redis]:
        if self.redis_client is None:
            try:
                self.redis_client = Redis(
                    host=self.host,
                    port=self.port,
                    decode_responses=True,
                    socket_connect_timeout=5
                )
            except RedisError as e:
                logger.error(f"Failed to create Redis connection: {e}")
                return None
        return self.redis_client

    def is_connected(self) -> bool:
        """
        Check if Redis connection is alive
        """
        client = self._connection()
        if not client:
            return False
        try:
            client.ping()
            return True
        except (ConnectionError, RedisError):
            return False

    def set_with_ttl(self, key: str, value: Any, ttl_seconds: int = 300) -> None:
        """
        Set a key with TTL (Time To Live)
        Returns: None - Silently skips if Redis is unavailable
        """
        if not self.is_connected():
            logger.warning("Redis connection is not available, skipping cache set")
            return

        try:
            self.redis_client.setex(
                name=key,
                time=ttl_seconds,
                value=json.dumps(value)
            )
        except (ConnectionError, RedisError) as e:
            logger.warning(f"Redis error while setting key: {e}")
        except (TypeError, ValueError) as e:
            logger.error(f"Value for {key} is not JSON serializable: {e}")

    def get(self, key: str) -> Optional[Any]:
        """
        Get value from Redis
        Returns: None if key doesn't exist, is malformed, or Redis is unavailable
        """
        if not self.is_connected():
            logger.warning("Redis connection is not available, skipping cache get")
            return None

        try:
            value = self.redis_client.get(key)
            if value:
                return json.loads(value)
            return None
        except (ConnectionError, RedisError) as e:
            logger.warning(f"Redis error while getting key: {e}")
            return None
        except ValueError as e:
            logger.warning(f"Discarding malformed cache entry {key}: {e}")
            return None

    def generate_cache_key(self, prefix: str, **kwargs) -> str:
        """
        Generate a cache key based on prefix and request parameters
        """
        # Sort kwargs by key to ensure consistent key generation
        sorted_params = sorted(kwargs.items())
        params_str = '_'.join(f"{k}:{v}" for k, v in sorted_params)
        return f"{prefix}:{params_str}"


# Create a singleton instance
redis_client = RedisClient()
