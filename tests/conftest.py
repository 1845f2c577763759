"""Pytest configuration and fixtures"""
import os
from dataclasses import dataclass
from typing import Union
from unittest.mock import Mock

import pytest

# Set test environment variables
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ["CART_TAX_RATE"] = "21"
os.environ.pop("CART_HANDLER", None)

from shopcart.cart import Cart, MemoryStore
from shopcart.config import CartConfig


@dataclass
class BuyableProduct:
    """Product implementing the Buyable protocol."""
    id: Union[int, str] = 1
    name: str = "Item name"
    price: float = 10.00

    def buyable_identifier(self, options=None):
        return self.id

    def buyable_description(self, options=None):
        return self.name

    def buyable_price(self, options=None):
        return self.price


class EventRecorder:
    """Event dispatcher that remembers what it was given."""

    def __init__(self):
        self.events = []

    def trigger(self, event, target=None):
        self.events.append((event, target))

    @property
    def names(self):
        return [name for name, _ in self.events]


@pytest.fixture
def product():
    """BuyableProduct class; call it like BuyableProduct(2, "Second item", 25.00)."""
    return BuyableProduct


@pytest.fixture
def store():
    """Fresh in-memory store"""
    return MemoryStore()


@pytest.fixture
def events():
    return EventRecorder()


@pytest.fixture
def cart(store, events):
    """Cart with a 21% default tax rate over an in-memory store"""
    return Cart(CartConfig(tax_rate=21), store=store, events=events)


@pytest.fixture
def mock_redis_client():
    """Mock Upstash Redis client backed by a dict"""
    data = {}
    client = Mock()
    client.exists.side_effect = lambda *keys: sum(1 for key in keys if key in data)
    client.get.side_effect = lambda key: data.get(key)
    client.set.side_effect = lambda key, value, ex=None: data.__setitem__(key, value)
    client.delete.side_effect = lambda *keys: sum(1 for key in keys if data.pop(key, None) is not None)
    client.data = data
    return client
