# foodorder/services/cart_cache.py
import redis

from foodorder.utils.retry import redis_retry
from foodorder.utils.settings import REDIS_URL, CART_CACHE_TTL_SECONDS
from foodorder.utils.logging import get_logger

logger = get_logger(__name__)

CART_KEY_PREFIX = "customer_cart_v1"


def cart_key(customer_id: str) -> str:
    return f"{CART_KEY_PREFIX}:{customer_id}"


class CartCache:
    """
    Raw cart payload per customer.
    Parsing and validation live in domain.cart, this only moves strings.
    """

    def __init__(self, url: str | None = None, client=None, ttl: int | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )
        self.ttl = ttl or CART_CACHE_TTL_SECONDS

    @redis_retry()
    def load(self, customer_id: str) -> str | None:
        return self.redis.get(cart_key(customer_id))

    @redis_retry()
    def store(self, customer_id: str, payload: str) -> bool:
        key = cart_key(customer_id)
        logger.info(f"Store cart {key}")
        return bool(self.redis.set(name=key, value=payload, ex=self.ttl))

    @redis_retry()
    def clear(self, customer_id: str) -> bool:
        key = cart_key(customer_id)
        logger.info(f"Clear cart {key}")
        return bool(self.redis.delete(key))
