"""shopcart - session shopping cart with content-derived row keys and pluggable stores."""
from shopcart.cart import Buyable, Cart, LineItem, MemoryStore, Store, generate_row_key
from shopcart.config import CartConfig, load_config
from shopcart.errors import (
    CartError,
    InvalidHandlerConfiguration,
    InvalidItem,
    InvalidRowKey,
    StoreInitializationFailure,
)

__version__ = "1.0.0"

__all__ = [
    "Buyable",
    "Cart",
    "LineItem",
    "MemoryStore",
    "Store",
    "generate_row_key",
    "CartConfig",
    "load_config",
    "CartError",
    "InvalidHandlerConfiguration",
    "InvalidItem",
    "InvalidRowKey",
    "StoreInitializationFailure",
]
