import redis
import json
import logging
from typing import Optional, Any

logger = logging.getLogger(__name__)

# Cache TTL settings (in seconds)
CACHE_TTL_SHORT = 300  # 5 minutes

# Set by init_cache; None means caching is disabled
redis_client = None


def init_cache(app):
    """Connect to Redis using the app config, or leave caching disabled"""
    global redis_client

    if not app.config.get('CACHE_ENABLED'):
        redis_client = None
        logger.info("Caching disabled by configuration")
        return

    host = app.config.get('REDIS_HOST', 'localhost')
    port = app.config.get('REDIS_PORT', 6379)

    try:
        client = redis.Redis(
            host=host,
            port=port,
            db=app.config.get('REDIS_DB', 0),
            password=app.config.get('REDIS_PASSWORD'),
            decode_responses=True,
            socket_connect_timeout=5
        )
        # Test connection
        client.ping()
        redis_client = client
        logger.info(f"Redis connected successfully at {host}:{port}")
    except redis.RedisError as e:
        logger.warning(f"Redis connection failed: {str(e)}. Caching will be disabled.")
        redis_client = None


class CacheManager:
    """Manager for Redis caching operations"""

    @staticmethod
    def is_available() -> bool:
        """Check if Redis is available"""
        return redis_client is not None

    @staticmethod
    def get(key: str) -> Optional[Any]:
        """
        Get value from cache

        Args:
            key: Cache key

        Returns:
            Cached value or None if not found/error
        """
        if not CacheManager.is_available():
            return None

        try:
            value = redis_client.get(key)
            if value:
                return json.loads(value)
            return None
        except redis.RedisError as e:
            logger.error(f"Cache get error for key '{key}': {str(e)}")
            return None

    @staticmethod
    def set(key: str, value: Any, ttl: int = CACHE_TTL_SHORT) -> bool:
        """
        Set value in cache with TTL

        Args:
            key: Cache key
            value: Value to cache (will be JSON serialized)
            ttl: Time to live in seconds

        Returns:
            True if successful, False otherwise
        """
        if not CacheManager.is_available():
            return False

        try:
            redis_client.setex(
                key,
                ttl,
                json.dumps(value, default=str)  # default=str handles datetime, etc.
            )
            logger.debug(f"Cached key '{key}' with TTL {ttl}s")
            return True
        except redis.RedisError as e:
            logger.error(f"Cache set error for key '{key}': {str(e)}")
            return False

    @staticmethod
    def delete_pattern(pattern: str) -> int:
        """
        Delete all keys matching a pattern

        Args:
            pattern: Pattern to match (e.g., 'swipes:history:123:*')

        Returns:
            Number of keys deleted
        """
        if not CacheManager.is_available():
            return 0

        try:
            keys = list(redis_client.scan_iter(match=pattern))
            if keys:
                deleted = redis_client.delete(*keys)
                logger.debug(f"Deleted {deleted} cache keys matching '{pattern}'")
                return deleted
            return 0
        except redis.RedisError as e:
            logger.error(f"Cache delete pattern error for '{pattern}': {str(e)}")
            return 0

    @staticmethod
    def invalidate_swipe_history(user_id: str):
        CacheManager.delete_pattern(f"swipes:history:{user_id}:*")

    @staticmethod
    def invalidate_matches(*user_ids: str):
        for user_id in user_ids:
            CacheManager.delete_pattern(build_matches_list_cache_key(user_id))


# Cache key builders
def build_history_cache_key(user_id: str, direction: Optional[str],
                            limit: Optional[int], before: Optional[str]) -> str:
    """Build cache key for one page of swipe history"""
    return f"swipes:history:{user_id}:{direction}:{limit}:{before}"


def build_matches_list_cache_key(user_id: str) -> str:
    """Build cache key for user's matches list"""
    return f"matches:list:{user_id}"
