"""Store that keeps the cart in a client cookie."""
import base64
import binascii
import json
import re
from typing import Any, Dict, Literal, Optional

from starlette.requests import Request
from starlette.responses import Response

from shopcart.logging import get_logger
from .base import Store

logger = get_logger(__name__)

# Marks a cookie deleted during the current request
_REMOVED = object()

_COOKIE_NAME_UNSAFE = re.compile(r"[^A-Za-z0-9_.-]")


def encode_cookie_value(value: Dict[str, Any]) -> str:
    raw = json.dumps(value, separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_cookie_value(value: str) -> Dict[str, Any]:
    padded = value + "=" * (-len(value) % 4)
    data = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
    if not isinstance(data, dict):
        raise ValueError("Cart cookie does not hold a mapping")
    return data


class CookieStore(Store):
    """
    Cart content as base64url-encoded JSON in a cookie named after the instance.

    Cookies written during a request are visible to reads later in the same
    request; the response carries them to the client.

    Args:
        request: Incoming request (cookies are read from it)
        response: Outgoing response (cookies are set on it)
        expires: Lifetime in minutes; 0 makes a session cookie
    """

    def __init__(
        self,
        request: Request,
        response: Response,
        expires: int = 60,
        path: str = "/",
        domain: Optional[str] = None,
        secure: bool = False,
        httponly: bool = True,
        samesite: Literal["lax", "strict", "none"] = "lax",
    ) -> None:
        super().__init__()
        self.request = request
        self.response = response
        self.expires = expires
        self.path = path
        self.domain = domain
        self.secure = secure
        self.httponly = httponly
        self.samesite = samesite
        self._written: Dict[str, Any] = {}

    def key(self) -> str:
        """Cookie name: cart_{instance}, restricted to token characters."""
        return "cart_" + _COOKIE_NAME_UNSAFE.sub("_", self.cart_id)

    def _raw(self) -> Optional[str]:
        name = self.key()
        if name in self._written:
            value = self._written[name]
            return None if value is _REMOVED else value
        return self.request.cookies.get(name)

    def has(self) -> bool:
        return self._raw() is not None

    def read(self) -> Dict[str, Dict[str, Any]]:
        raw = self._raw()
        if raw is None:
            return {}
        try:
            return decode_cookie_value(raw)
        except (binascii.Error, UnicodeDecodeError, ValueError) as e:
            # Tampered or truncated cookie: treat as an empty cart
            logger.warning(f"Corrupted cart cookie {self.key()}: {e}")
            return {}

    def write(self, value: Dict[str, Dict[str, Any]]) -> None:
        name = self.key()
        encoded = encode_cookie_value(value)
        self._written[name] = encoded
        self.response.set_cookie(
            name,
            encoded,
            max_age=self.expires * 60 if self.expires else None,
            path=self.path,
            domain=self.domain,
            secure=self.secure,
            httponly=self.httponly,
            samesite=self.samesite,
        )

    def remove(self) -> None:
        name = self.key()
        self._written[name] = _REMOVED
        self.response.delete_cookie(
            name,
            path=self.path,
            domain=self.domain,
            secure=self.secure,
            httponly=self.httponly,
            samesite=self.samesite,
        )
