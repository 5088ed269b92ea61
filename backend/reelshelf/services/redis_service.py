"""Redis service for caching and rate limiting."""

import redis
import json
from typing import Optional, Any

from reelshelf.config import settings
from reelshelf.services.logging_service import logger

# Redis client (singleton)
redis_client: Optional[redis.Redis] = None
_connection_failed = False


def get_redis_client() -> Optional[redis.Redis]:
    """
    Get or create Redis client instance.

    Returns None when REDIS_URL is empty or the first connection attempt
    failed. A failed attempt is not retried until reset_redis_client(),
    which the readiness check calls.
    """
    global redis_client, _connection_failed

    if redis_client is not None or _connection_failed:
        return redis_client

    if not settings.REDIS_URL:
        _connection_failed = True
        return None

    try:
        client = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True,
            health_check_interval=30
        )
        # Test connection
        client.ping()
        redis_client = client
        logger.info("Redis connected")
    except redis.RedisError as e:
        logger.warning("Redis connection failed, continuing without cache", error=str(e))
        _connection_failed = True
        redis_client = None

    return redis_client


def reset_redis_client():
    """Forget the cached client so the next call reconnects."""
    global redis_client, _connection_failed
    redis_client = None
    _connection_failed = False


def is_redis_available() -> bool:
    """Check if Redis is available."""
    client = get_redis_client()
    if client is None:
        return False

    try:
        client.ping()
        return True
    except redis.RedisError:
        return False


class RedisCache:
    """Redis caching utility class."""

    def __init__(self, prefix: str = "cache"):
        """
        Initialize Redis cache with key prefix.

        Args:
            prefix: Key prefix for namespacing
        """
        self.prefix = prefix

    @property
    def client(self) -> Optional[redis.Redis]:
        return get_redis_client()

    def _make_key(self, key: str) -> str:
        """Create prefixed cache key."""
        return f"{self.prefix}:{key}"

    def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache.

        Args:
            key: Cache key

        Returns:
            Cached value or None
        """
        client = self.client
        if not client:
            return None

        try:
            value = client.get(self._make_key(key))
            if value:
                return json.loads(value)
            return None
        except (redis.RedisError, ValueError) as e:
            logger.warning("Redis GET error", key=key, error=str(e))
            return None

    def set(self, key: str, value: Any, ttl: int = 300) -> bool:
        """
        Set value in cache with TTL.

        Args:
            key: Cache key
            value: Value to cache (must be JSON serializable)
            ttl: Time to live in seconds (default 5 minutes)

        Returns:
            True if successful, False otherwise
        """
        client = self.client
        if not client:
            return False

        try:
            client.setex(self._make_key(key), ttl, json.dumps(value))
            return True
        except (redis.RedisError, TypeError) as e:
            logger.warning("Redis SET error", key=key, error=str(e))
            return False

    def increment(self, key: str, amount: int = 1, ttl: Optional[int] = None) -> Optional[int]:
        """
        Increment counter in cache.

        Args:
            key: Cache key
            amount: Amount to increment by
            ttl: Optional TTL for new keys

        Returns:
            New value or None
        """
        client = self.client
        if not client:
            return None

        try:
            full_key = self._make_key(key)
            value = client.incrby(full_key, amount)

            # -1 means the key has no expiry yet
            if ttl and client.ttl(full_key) < 0:
                client.expire(full_key, ttl)

            return value
        except redis.RedisError as e:
            logger.warning("Redis INCREMENT error", key=key, error=str(e))
            return None


class RateLimiter:
    """Redis-based fixed-window rate limiter."""

    def __init__(self, max_requests: int = 60, window_seconds: int = 60):
        """
        Initialize rate limiter.

        Args:
            max_requests: Maximum requests per window
            window_seconds: Time window in seconds
        """
        self.cache = RedisCache(prefix="ratelimit")
        self.max_requests = max_requests
        self.window_seconds = window_seconds

    def is_allowed(self, identifier: str) -> bool:
        """
        Check if request is allowed for identifier.

        Args:
            identifier: Unique identifier (e.g., user_id, IP address)

        Returns:
            True if allowed, False if rate limited
        """
        if not self.cache.client:
            # No Redis, allow all requests
            return True

        current = self.cache.increment(identifier, ttl=self.window_seconds)

        if current is None:
            return True

        return current <= self.max_requests

    def get_remaining(self, identifier: str) -> int:
        """
        Get remaining requests for identifier.

        Args:
            identifier: Unique identifier

        Returns:
            Number of remaining requests
        """
        if not self.cache.client:
            return self.max_requests

        current = self.cache.get(identifier)
        if current is None:
            return self.max_requests

        return max(0, self.max_requests - int(current))


# Initialize global instances
catalog_cache = RedisCache(prefix="catalog")
rate_limiter = RateLimiter(max_requests=settings.RATE_LIMIT_PER_MINUTE, window_seconds=60)
