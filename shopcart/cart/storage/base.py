"""Store contract every cart backend implements."""
from abc import ABC, abstractmethod
from typing import Any, Dict

# Prefix of the key a cart instance is stored under: cart:{instance}
KEY_PREFIX = "cart:"


class Store(ABC):
    """
    Persistence backend for one cart instance's item mapping.

    The mapping is ``row_key -> storage fields`` and is always written as a
    whole. ``init`` binds the store to a partition and may be called again
    to switch partitions.
    """

    def __init__(self) -> None:
        self.cart_id = ""

    def init(self, cart_id: str) -> bool:
        """Bind to ``cart_id``; returns False when the backend is unusable."""
        self.cart_id = cart_id
        if not self.has():
            self.write({})
        return True

    def key(self) -> str:
        """Key of the current partition."""
        return f"{KEY_PREFIX}{self.cart_id}"

    @abstractmethod
    def has(self) -> bool:
        """Whether content exists for the current partition."""

    @abstractmethod
    def read(self) -> Dict[str, Dict[str, Any]]:
        """Raw stored mapping, empty when nothing is stored."""

    @abstractmethod
    def write(self, value: Dict[str, Dict[str, Any]]) -> None:
        """Replace the stored mapping."""

    @abstractmethod
    def remove(self) -> None:
        """Delete the current partition's content."""
