"""Store backed by Upstash Redis."""
import json
from typing import Any, Dict, Optional

from upstash_redis import Redis

from shopcart.db import TTL, get_redis_sync
from shopcart.logging import get_logger
from .base import Store

logger = get_logger(__name__)


class RedisStore(Store):
    """
    Cart content as a JSON string under ``cart:{instance}`` with a TTL.

    Every write refreshes the TTL, so carts expire ``ttl`` seconds after
    their last change.
    """

    def __init__(self, client: Optional[Redis] = None, ttl: int = TTL.CART) -> None:
        super().__init__()
        self._client = client
        self.ttl = ttl

    @property
    def client(self) -> Redis:
        """Redis client (lazy initialization)."""
        if self._client is None:
            self._client = get_redis_sync()
        return self._client

    def init(self, cart_id: str) -> bool:
        try:
            self.client
        except ValueError as e:
            logger.error(f"Redis store unavailable: {e}")
            return False
        return super().init(cart_id)

    def has(self) -> bool:
        return bool(self.client.exists(self.key()))

    def read(self) -> Dict[str, Dict[str, Any]]:
        data = self.client.get(self.key())
        if not data:
            return {}
        try:
            content = json.loads(data)
        except (json.JSONDecodeError, TypeError) as e:
            # Corrupted data - clear it and start over
            logger.warning(f"Corrupted cart data under {self.key()}: {e}")
            self.client.delete(self.key())
            return {}
        return content if isinstance(content, dict) else {}

    def write(self, value: Dict[str, Dict[str, Any]]) -> None:
        self.client.set(self.key(), json.dumps(value), ex=self.ttl)

    def remove(self) -> None:
        self.client.delete(self.key())
