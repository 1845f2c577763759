"""Store backed by the Starlette/FastAPI session."""
from typing import Any, Dict

from starlette.requests import Request

from shopcart.logging import get_logger
from .base import Store

logger = get_logger(__name__)


class SessionStore(Store):
    """
    Keeps the cart in ``request.session``.

    Requires ``starlette.middleware.sessions.SessionMiddleware``; without it
    ``init`` reports the store as unusable.
    """

    def __init__(self, request: Request) -> None:
        super().__init__()
        self.request = request

    def init(self, cart_id: str) -> bool:
        if "session" not in self.request.scope:
            logger.error("Session store requested but SessionMiddleware is not installed")
            return False
        return super().init(cart_id)

    def has(self) -> bool:
        return self.key() in self.request.session

    def read(self) -> Dict[str, Dict[str, Any]]:
        return dict(self.request.session.get(self.key(), {}))

    def write(self, value: Dict[str, Dict[str, Any]]) -> None:
        self.request.session[self.key()] = value

    def remove(self) -> None:
        self.request.session.pop(self.key(), None)
