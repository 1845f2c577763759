"""
Shared Dependencies for Routers

Bind a Cart to the current request through the session or cookie store.
"""

from functools import lru_cache

from fastapi import HTTPException, Request, Response

from shopcart.cart import Cart
from shopcart.cart.storage.cookie import CookieStore
from shopcart.cart.storage.session import SessionStore
from shopcart.config import DEFAULT_INSTANCE, CartConfig, load_config
from shopcart.errors import StoreInitializationFailure
from shopcart.logging import get_logger

logger = get_logger(__name__)


@lru_cache
def get_web_config() -> CartConfig:
    """Cart configuration for web requests (read once per process)."""
    return load_config()


def _bind(cart_factory, instance: str) -> Cart:
    try:
        return cart_factory().instance(instance)
    except StoreInitializationFailure as e:
        logger.error(f"Cart store unavailable for request: {e.message}")
        raise HTTPException(status_code=500, detail="Cart storage is not available")


def get_session_cart(request: Request, instance: str = DEFAULT_INSTANCE) -> Cart:
    """Cart kept in the Starlette session (needs SessionMiddleware)."""
    config = get_web_config()
    return _bind(lambda: Cart(config, store=SessionStore(request)), instance)


def get_cookie_cart(request: Request, response: Response, instance: str = DEFAULT_INSTANCE) -> Cart:
    """Cart kept in a cookie; handler_options configure the cookie attributes."""
    config = get_web_config()
    return _bind(lambda: Cart(config, store=CookieStore(request, response, **config.handler_options)), instance)


def get_request_cart(request: Request, response: Response, instance: str = DEFAULT_INSTANCE) -> Cart:
    """Cookie cart when CART_HANDLER=cookie, session cart otherwise."""
    if get_web_config().handler == "cookie":
        return get_cookie_cart(request, response, instance)
    return get_session_cart(request, instance)
