"""In-process store, used by tests and as the default handler."""
import copy
from typing import Any, Dict, Optional

from .base import Store


class MemoryStore(Store):
    """Keeps every partition in a plain dict owned by the store object."""

    def __init__(self, items: Optional[Dict[str, Dict[str, Any]]] = None) -> None:
        super().__init__()
        self.items: Dict[str, Dict[str, Any]] = items if items is not None else {}

    def has(self) -> bool:
        return self.key() in self.items

    def read(self) -> Dict[str, Dict[str, Any]]:
        # Copy so callers mutating the result never touch stored state
        return copy.deepcopy(self.items.get(self.key(), {}))

    def write(self, value: Dict[str, Dict[str, Any]]) -> None:
        self.items[self.key()] = copy.deepcopy(value)

    def remove(self) -> None:
        self.items.pop(self.key(), None)
