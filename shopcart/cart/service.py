"""Cart facade over a pluggable store."""
import importlib
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Protocol, Union

from shopcart.config import DEFAULT_INSTANCE, HANDLER_ALIASES, REQUEST_BOUND_HANDLERS, CartConfig, load_config
from shopcart.errors import InvalidHandlerConfiguration, InvalidRowKey, StoreInitializationFailure
from shopcart.logging import get_logger, sanitize_id_for_logging, sanitize_string_for_logging
from shopcart.money import format_number
from .buyable import Buyable
from .identity import RowKeyGenerator, generate_row_key
from .models import LineItem
from .storage.base import Store

logger = get_logger(__name__)

Content = Dict[str, LineItem]
Patch = Union[int, float, Decimal, str, Buyable, Mapping[str, Any]]


class EventDispatcher(Protocol):
    """Receiver of cart mutation events (cart.added, cart.updated, ...)."""

    def trigger(self, event: str, target: Any = None) -> Any:
        ...


def resolve_handler(handler: Union[str, type]) -> type:
    """
    Resolve a handler alias, dotted path or class to a Store subclass.

    Raises:
        InvalidHandlerConfiguration: If it does not name a Store subclass
    """
    handler_cls: Any = handler
    if isinstance(handler, str):
        path = HANDLER_ALIASES.get(handler, handler)
        module_name, _, class_name = path.rpartition(".")
        try:
            handler_cls = getattr(importlib.import_module(module_name), class_name)
        except (ImportError, AttributeError, ValueError) as e:
            logger.error(f"Cannot import cart handler {sanitize_string_for_logging(path)}: {e}")
            raise InvalidHandlerConfiguration(handler) from e

    if not isinstance(handler_cls, type) or not issubclass(handler_cls, Store):
        logger.error(f"Cart handler {handler_cls!r} does not implement Store")
        raise InvalidHandlerConfiguration(handler)
    return handler_cls


class Cart:
    """
    Shopping cart bound to one named instance of a store.

    Nothing is cached on the object: every call reads the store, and every
    mutation writes the whole item mapping back. Concurrent writers to the
    same instance can therefore lose updates; the store decides the winner.

    Args:
        config: CartConfig or a mapping of its fields
        store: Ready store object; skips handler resolution from config
        events: Optional dispatcher notified after each mutation
        row_key_generator: Replaces the default md5 row key scheme
    """

    DEFAULT_INSTANCE = DEFAULT_INSTANCE

    def __init__(
        self,
        config: Union[CartConfig, Mapping[str, Any], None] = None,
        store: Optional[Store] = None,
        events: Optional[EventDispatcher] = None,
        row_key_generator: Optional[RowKeyGenerator] = None,
    ) -> None:
        if config is None:
            config = CartConfig()
        elif not isinstance(config, CartConfig):
            config = CartConfig(**config)
        self.config = config
        self.events = events
        self.row_key_generator = row_key_generator or generate_row_key
        self.store = store if store is not None else self._build_store()
        self._instance = DEFAULT_INSTANCE
        self.instance(DEFAULT_INSTANCE)

    def _build_store(self) -> Store:
        handler_cls = resolve_handler(self.config.handler)
        try:
            return handler_cls(**self.config.handler_options)
        except TypeError as e:
            logger.error(f"Cannot build cart handler {handler_cls.__name__}: {e}")
            raise InvalidHandlerConfiguration(self.config.handler) from e

    # ==================== INSTANCES ====================

    def instance(self, name: Optional[str] = None) -> "Cart":
        """Bind the cart to another named instance (e.g. "wishlist")."""
        name = name or DEFAULT_INSTANCE
        if not self.store.init(name):
            handler = type(self.store).__name__
            logger.error(f"Cart handler {handler} could not be initialized for instance {sanitize_string_for_logging(name)}")
            raise StoreInitializationFailure(handler, name)
        self._instance = name
        return self

    def current_instance(self) -> str:
        return self._instance

    # ==================== MUTATIONS ====================

    def add(
        self,
        item: Any,
        qty: Any = None,
        options: Optional[Mapping[str, Any]] = None,
        *,
        name: Optional[str] = None,
        price: Any = None,
    ) -> Union[LineItem, None, List[Optional[LineItem]]]:
        """
        Add an item, or a list of items, to the cart.

        ``item`` may be a Buyable, an attribute mapping, a product id (with
        ``name`` and ``price``), or a list of any of those (tuples in a list
        are unpacked as positional arguments). An item whose row key is
        already in the cart only adds its quantity to the existing row.

        Returns None when the resulting quantity is zero or negative: the
        row is removed, or never stored for a new item.
        """
        if self._is_multi(item):
            return [self.add(*entry) if isinstance(entry, (list, tuple)) else self.add(entry) for entry in item]

        line = self._create_item(item, qty, options, name, price)

        content = self._content()
        existing = content.get(line.row_key)
        if existing is not None:
            existing.quantity += line.quantity
            line = existing

        if line.quantity <= 0:
            if existing is None:
                logger.debug(f"Cart item not added, quantity {line.quantity}: {sanitize_id_for_logging(line.row_key)}")
                return None
            del content[line.row_key]
            self._persist(content)
            logger.debug(f"Cart item removed on add: {sanitize_id_for_logging(line.row_key)}")
            self._emit("cart.removed", line)
            return None

        content[line.row_key] = line

        self._persist(content)
        logger.debug(f"Cart item added: {sanitize_id_for_logging(line.row_key)} qty={line.quantity}")
        self._emit("cart.added", line)
        return line

    def update(self, row_key: str, patch: Patch) -> Optional[LineItem]:
        """
        Update the row ``row_key`` with a quantity, a Buyable or a mapping.

        Returns the stored item, or None when the resulting quantity is zero
        or negative and the row was removed.
        """
        content = self._content()
        if row_key not in content:
            raise InvalidRowKey(row_key)
        item = content[row_key]

        if isinstance(patch, Buyable):
            item.update_from_buyable(patch)
        elif isinstance(patch, Mapping):
            item.update_from_mapping(patch)
        else:
            item.set_quantity(patch)

        if item.row_key != row_key:
            del content[row_key]
            existing = content.get(item.row_key)
            if existing is not None:
                existing.quantity += item.quantity
                item = existing

        if item.quantity <= 0:
            content.pop(item.row_key, None)
            self._persist(content)
            logger.debug(f"Cart item removed on update: {sanitize_id_for_logging(item.row_key)}")
            self._emit("cart.removed", item)
            return None

        content[item.row_key] = item
        self._persist(content)
        logger.debug(f"Cart item updated: {sanitize_id_for_logging(row_key)} -> {sanitize_id_for_logging(item.row_key)}")
        self._emit("cart.updated", item)
        return item

    def remove(self, row_key: str) -> None:
        content = self._content()
        if row_key not in content:
            raise InvalidRowKey(row_key)
        item = content.pop(row_key)

        self._persist(content)
        logger.debug(f"Cart item removed: {sanitize_id_for_logging(row_key)}")
        self._emit("cart.removed", item)

    def set_tax_rate(self, row_key: str, tax_rate: Any) -> None:
        """Override the tax rate of a single row."""
        content = self._content()
        if row_key not in content:
            raise InvalidRowKey(row_key)
        content[row_key].set_tax_rate(tax_rate)
        self._persist(content)

    def destroy(self) -> None:
        """Remove every item of the current instance."""
        self.store.remove()
        logger.debug(f"Cart instance destroyed: {sanitize_string_for_logging(self._instance)}")
        self._emit("cart.destroyed", self._instance)

    # ==================== READS ====================

    def get(self, row_key: str) -> LineItem:
        content = self._content()
        if row_key not in content:
            raise InvalidRowKey(row_key)
        return content[row_key]

    def content(self) -> Content:
        """All rows in insertion order."""
        return self._content()

    def count(self):
        """Sum of all quantities."""
        return sum(item.quantity for item in self._content().values())

    def subtotal(
        self,
        decimals: Optional[int] = None,
        decimal_point: Optional[str] = None,
        thousands_separator: Optional[str] = None,
    ) -> Union[Decimal, str]:
        """Sum of quantity * price; a string once a separator is given."""
        values = (item.subtotal for item in self._content().values())
        return self._aggregate(values, decimals, decimal_point, thousands_separator)

    def tax(
        self,
        decimals: Optional[int] = None,
        decimal_point: Optional[str] = None,
        thousands_separator: Optional[str] = None,
    ) -> Union[Decimal, str]:
        """Sum of quantity * unit tax; a string once a separator is given."""
        values = (item.tax_total for item in self._content().values())
        return self._aggregate(values, decimals, decimal_point, thousands_separator)

    def total(
        self,
        decimals: Optional[int] = None,
        decimal_point: Optional[str] = None,
        thousands_separator: Optional[str] = None,
    ) -> Union[Decimal, str]:
        """Sum of quantity * price with tax; a string once a separator is given."""
        values = (item.total for item in self._content().values())
        return self._aggregate(values, decimals, decimal_point, thousands_separator)

    def search(self, predicate: Callable[[LineItem, str], bool]) -> Content:
        """Rows for which ``predicate(item, row_key)`` is true, in cart order."""
        return {key: item for key, item in self._content().items() if predicate(item, key)}

    # ==================== INTERNALS ====================

    def _content(self) -> Content:
        if not self.store.has():
            return {}
        return {
            key: LineItem.from_storage({**data, "row_key": key}, self.row_key_generator)
            for key, data in self.store.read().items()
        }

    def _persist(self, content: Content) -> None:
        self.store.write({key: item.to_storage() for key, item in content.items()})

    def _create_item(self, item: Any, qty: Any, options: Optional[Mapping[str, Any]], name: Any, price: Any) -> LineItem:
        if isinstance(item, Buyable):
            line = LineItem.from_buyable(item, options, 1 if qty is None else qty, self.row_key_generator)
        elif isinstance(item, Mapping):
            line = LineItem.from_dict(item, self.row_key_generator)
            if item.get("tax_rate") is not None or item.get("tax") is not None:
                return line
        else:
            line = LineItem.from_attributes(item, name, price, options, 1 if qty is None else qty, self.row_key_generator)
        return line.set_tax_rate(self.config.tax_rate)

    @staticmethod
    def _is_multi(item: Any) -> bool:
        if not isinstance(item, (list, tuple)) or not item:
            return False
        head = item[0]
        return isinstance(head, (Mapping, list, tuple)) or isinstance(head, Buyable)

    def _aggregate(
        self,
        values: Iterable[Decimal],
        decimals: Optional[int],
        decimal_point: Optional[str],
        thousands_separator: Optional[str],
    ) -> Union[Decimal, str]:
        amount = sum(values, Decimal("0"))
        if decimal_point is None and thousands_separator is None:
            return amount
        fmt = self.config.format
        return format_number(
            amount,
            fmt.decimals if decimals is None else decimals,
            fmt.decimal_point if decimal_point is None else decimal_point,
            fmt.thousands_separator if thousands_separator is None else thousands_separator,
        )

    def _emit(self, event: str, target: Any = None) -> None:
        if self.events is not None:
            self.events.trigger(event, target)


# Singleton instance
_cart: Optional[Cart] = None


def get_cart() -> Cart:
    """
    Get a Cart singleton configured from the environment.

    The session and cookie handlers live on a request, so they are only
    available through the dependencies in shopcart.routers.deps.

    Raises:
        InvalidHandlerConfiguration: If CART_HANDLER names a request-bound handler
    """
    global _cart
    if _cart is None:
        config = load_config()
        if isinstance(config.handler, str) and config.handler in REQUEST_BOUND_HANDLERS:
            logger.error(f"Cart handler {config.handler} needs a request; use shopcart.routers.deps")
            raise InvalidHandlerConfiguration(config.handler)
        _cart = Cart(config)
    return _cart


def reset_cart() -> None:
    """Forget the singleton so the next get_cart() re-reads configuration."""
    global _cart
    _cart = None
