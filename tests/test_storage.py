"""
Tests for cart stores and handler resolution
"""

import json
from decimal import Decimal
from unittest.mock import ANY

import pytest
from starlette.requests import Request
from starlette.responses import Response

from shopcart.cart import Cart, resolve_handler
from shopcart.cart.storage.base import KEY_PREFIX, Store
from shopcart.cart.storage.cookie import CookieStore, decode_cookie_value, encode_cookie_value
from shopcart.cart.storage.memory import MemoryStore
from shopcart.cart.storage.redis import RedisStore
from shopcart.cart.storage.session import SessionStore
from shopcart.config import CartConfig
from shopcart.db import TTL, reset_redis
from shopcart.errors import InvalidHandlerConfiguration, StoreInitializationFailure

ROW_1 = "027c91341fd5cf4d2579b49c4b6a90da"


def make_request(session=None, cookies=None):
    scope = {"type": "http", "headers": []}
    if session is not None:
        scope["session"] = session
    if cookies:
        header = "; ".join(f"{name}={value}" for name, value in cookies.items())
        scope["headers"].append((b"cookie", header.encode("latin-1")))
    return Request(scope)


def set_cookie_headers(response):
    return [value for name, value in response.raw_headers if name == b"set-cookie"]


def last_cookie_value(response, name):
    for header in reversed(set_cookie_headers(response)):
        pair = header.decode("latin-1").split(";", 1)[0]
        cookie_name, _, value = pair.partition("=")
        if cookie_name == name:
            return value
    return None


class TestMemoryStore:
    """Tests for the in-process store."""

    def test_init_creates_empty_partition(self):
        store = MemoryStore()
        assert store.init("default") is True
        assert store.has()
        assert store.read() == {}
        assert store.key() == f"{KEY_PREFIX}default"

    def test_init_keeps_existing_partition(self):
        store = MemoryStore({"cart:default": {"a": {"id": 1}}})
        store.init("default")
        assert store.read() == {"a": {"id": 1}}

    def test_read_returns_a_copy(self):
        store = MemoryStore()
        store.init("default")
        store.write({"a": {"options": {"color": "red"}}})

        store.read()["a"]["options"]["color"] = "blue"
        assert store.read()["a"]["options"]["color"] == "red"

    def test_remove(self):
        store = MemoryStore()
        store.init("default")
        store.remove()
        assert not store.has()
        assert store.read() == {}


class TestResolveHandler:
    """Tests for handler resolution from configuration."""

    @pytest.mark.parametrize(
        "handler",
        ["memory", "shopcart.cart.storage.memory.MemoryStore", MemoryStore],
    )
    def test_resolves_memory_store(self, handler):
        assert resolve_handler(handler) is MemoryStore

    def test_aliases(self):
        assert resolve_handler("session") is SessionStore
        assert resolve_handler("cookie") is CookieStore
        assert resolve_handler("redis") is RedisStore

    @pytest.mark.parametrize("handler", ["nowhere", "shopcart.cart.storage.memory.Missing", "os.path", dict])
    def test_rejects_non_stores(self, handler):
        with pytest.raises(InvalidHandlerConfiguration) as exc_info:
            resolve_handler(handler)
        assert exc_info.value.code == "INVALID_HANDLER"
        assert exc_info.value.message == "handler must be a class that implements shopcart.cart.storage.Store"

    def test_cart_builds_store_from_config(self):
        cart = Cart(CartConfig(handler="memory"))
        assert isinstance(cart.store, MemoryStore)
        assert cart.count() == 0

    def test_cart_rejects_bad_handler(self):
        with pytest.raises(InvalidHandlerConfiguration):
            Cart(CartConfig(handler=dict))

    def test_cart_rejects_bad_handler_options(self):
        with pytest.raises(InvalidHandlerConfiguration):
            Cart(CartConfig(handler="memory", handler_options={"bogus": True}))

    def test_custom_store_subclass(self):
        class ListBackedStore(Store):
            def __init__(self):
                super().__init__()
                self.history = []

            def has(self):
                return bool(self.history)

            def read(self):
                return self.history[-1] if self.history else {}

            def write(self, value):
                self.history.append(value)

            def remove(self):
                self.history.clear()

        cart = Cart(CartConfig(handler=ListBackedStore))
        cart.add(1, name="Some item", price=1)
        assert len(cart.store.history) == 2


class TestRedisStore:
    """Tests for the Upstash Redis store."""

    def test_cart_flow(self, mock_redis_client, product):
        cart = Cart(CartConfig(handler="redis", handler_options={"client": mock_redis_client}))
        cart.add(product(), 2)

        stored = json.loads(mock_redis_client.data["cart:default"])
        assert stored[ROW_1]["quantity"] == 2
        mock_redis_client.set.assert_called_with("cart:default", ANY, ex=TTL.CART)
        assert cart.count() == 2

        cart.destroy()
        assert "cart:default" not in mock_redis_client.data
        assert cart.count() == 0

    def test_custom_ttl(self, mock_redis_client):
        store = RedisStore(client=mock_redis_client, ttl=600)
        store.init("wishlist")
        mock_redis_client.set.assert_called_once_with("cart:wishlist", "{}", ex=600)

    def test_corrupted_data_is_discarded(self, mock_redis_client):
        mock_redis_client.data["cart:default"] = "{not json"
        store = RedisStore(client=mock_redis_client)
        store.init("default")

        assert store.read() == {}
        mock_redis_client.delete.assert_called_once_with("cart:default")

    def test_missing_credentials(self, monkeypatch):
        monkeypatch.delenv("UPSTASH_REDIS_REST_URL", raising=False)
        monkeypatch.delenv("UPSTASH_REDIS_REST_TOKEN", raising=False)
        reset_redis()

        with pytest.raises(StoreInitializationFailure) as exc_info:
            Cart(CartConfig(handler="redis"))
        assert exc_info.value.handler == "RedisStore"
        assert exc_info.value.instance == "default"


class TestSessionStore:
    """Tests for the Starlette session store."""

    def test_cart_flow(self):
        session = {}
        cart = Cart(CartConfig(tax_rate=21), store=SessionStore(make_request(session=session)))

        cart.add(1, 1, name="Test item", price=10.00)
        assert cart.count() == 1
        assert session["cart:default"][ROW_1]["name"] == "Test item"

        cart.destroy()
        assert cart.count() == 0
        assert "cart:default" not in session

    def test_session_content_survives_requests(self, product):
        session = {}
        Cart(store=SessionStore(make_request(session=session))).add(product())

        cart = Cart(store=SessionStore(make_request(session=session)))
        assert list(cart.content()) == [ROW_1]

    def test_disabled_without_session_middleware(self):
        with pytest.raises(StoreInitializationFailure) as exc_info:
            Cart(store=SessionStore(make_request()))
        assert exc_info.value.message == "Handler SessionStore could not be initialized"


class TestCookieStore:
    """Tests for the cookie store."""

    def test_cart_flow(self):
        response = Response()
        cart = Cart(CartConfig(tax_rate=21), store=CookieStore(make_request(), response))

        cart.add(1, 1, name="Test item", price=10.00)
        assert cart.count() == 1

        value = last_cookie_value(response, "cart_default")
        assert decode_cookie_value(value)[ROW_1]["name"] == "Test item"
        assert b"max-age=3600" in set_cookie_headers(response)[-1].lower()

        cart.destroy()
        assert cart.count() == 0
        assert b"max-age=0" in set_cookie_headers(response)[-1].lower()

    def test_cookie_is_read_on_next_request(self, product):
        first = Response()
        Cart(store=CookieStore(make_request(), first)).add(product(), 3)
        value = last_cookie_value(first, "cart_default")

        cart = Cart(store=CookieStore(make_request(cookies={"cart_default": value}), Response()))
        assert cart.get(ROW_1).quantity == 3

    def test_cookie_name_is_sanitized(self):
        store = CookieStore(make_request(), Response())
        store.init("my wishlist:1")
        assert store.key() == "cart_my_wishlist_1"

    def test_corrupted_cookie_reads_empty(self):
        cart = Cart(store=CookieStore(make_request(cookies={"cart_default": "garbage"}), Response()))
        assert cart.count() == 0

    def test_non_mapping_cookie_reads_empty(self):
        value = encode_cookie_value([1, 2])
        store = CookieStore(make_request(cookies={"cart_default": value}), Response())
        store.init("default")
        assert store.read() == {}

    def test_session_cookie(self):
        response = Response()
        CookieStore(make_request(), response, expires=0).init("default")
        assert b"max-age" not in set_cookie_headers(response)[-1].lower()

    def test_decimal_option_survives_the_cookie(self, product):
        first = Response()
        item = Cart(store=CookieStore(make_request(), first)).add(product(), 1, {"weight": Decimal("0.5")})
        value = last_cookie_value(first, "cart_default")

        cart = Cart(store=CookieStore(make_request(cookies={"cart_default": value}), Response()))
        assert cart.get(item.row_key).options.weight == 0.5

    def test_encoding_is_unpadded_base64url(self):
        value = encode_cookie_value({"row": {"name": "Ünïcode?>"}})
        assert "=" not in value
        assert decode_cookie_value(value) == {"row": {"name": "Ünïcode?>"}}
