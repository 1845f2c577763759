"""
Upstash Redis client used by the Redis cart store.

Carts are read and written synchronously, so only the sync client is built.
"""

import os
from typing import Optional

from upstash_redis import Redis

_redis_client: Optional[Redis] = None


def get_redis_sync() -> Redis:
    """
    Shared Upstash client built from UPSTASH_REDIS_REST_URL and
    UPSTASH_REDIS_REST_TOKEN on first use.

    Raises:
        ValueError: If either variable is unset
    """
    global _redis_client

    if _redis_client is None:
        url = os.environ.get("UPSTASH_REDIS_REST_URL", "")
        token = os.environ.get("UPSTASH_REDIS_REST_TOKEN", "")
        if not url or not token:
            raise ValueError("UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set")
        _redis_client = Redis(url=url, token=token)

    return _redis_client


def reset_redis() -> None:
    """Forget the shared client; the next call re-reads the environment."""
    global _redis_client
    _redis_client = None


class TTL:
    """Expiry of Redis keys, in seconds."""

    CART = 86400  # idle carts live one day
