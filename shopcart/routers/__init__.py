"""FastAPI integration for the cart."""
from .cart import router
from .deps import get_cookie_cart, get_request_cart, get_session_cart

__all__ = ["router", "get_cookie_cart", "get_request_cart", "get_session_cart"]
