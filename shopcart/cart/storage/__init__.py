"""Cart stores: the Store contract and the bundled backends."""
from .base import KEY_PREFIX, Store
from .memory import MemoryStore

__all__ = [
    "KEY_PREFIX",
    "Store",
    "MemoryStore",
]
