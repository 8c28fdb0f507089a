import uuid

import redis

from storefront.utils.retry import redis_retry
from storefront.utils.settings import REDIS_URL, CHECKOUT_LOCK_TTL_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# LUA compare-and-delete: only the holder's token can release the key,
# redis runs the script as one uninterrupted operation
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""


class LockService:
    """
    -one in-flight checkout per user (SET NX EX)
    -releasing the lock only with the token that took it
    -TTL so a crashed request never blocks the shopper for good
    """

    def __init__(self, url: str | None = None, ttl: int = CHECKOUT_LOCK_TTL_SECONDS):
        self.redis = redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )
        self.ttl = ttl

    @staticmethod
    def _key(user_id: int) -> str:
        return f"checkout:{user_id}:lock"

    @redis_retry()
    def acquire_checkout_lock(self, user_id: int) -> str | None:
        """Returns the lock token, or None when a checkout is already running."""
        key = self._key(user_id)
        token = uuid.uuid4().hex
        logger.info(f"Acquire lock {key}")
        # SET checkout:1:lock "<token>" NX EX 60
        acquired = self.redis.set(name=key, value=token, nx=True, ex=self.ttl)
        return token if acquired else None

    @redis_retry()
    def release_checkout_lock(self, user_id: int, token: str) -> bool:
        key = self._key(user_id)
        logger.info(f"Release lock {key}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)
