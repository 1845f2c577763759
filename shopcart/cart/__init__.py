"""Cart package: line items, row key identity, stores, and the cart facade."""
from .buyable import Buyable, ItemSource
from .identity import RowKeyGenerator, generate_row_key
from .models import ItemOptions, LineItem
from .service import Cart, EventDispatcher, get_cart, reset_cart, resolve_handler
from .storage import MemoryStore, Store

__all__ = [
    "Buyable",
    "ItemSource",
    "RowKeyGenerator",
    "generate_row_key",
    "ItemOptions",
    "LineItem",
    "Cart",
    "EventDispatcher",
    "get_cart",
    "reset_cart",
    "resolve_handler",
    "MemoryStore",
    "Store",
]
