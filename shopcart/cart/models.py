"""Cart line item model with Decimal-based pricing."""
import json
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Mapping, Optional, Union

from shopcart.errors import (
    ERROR_INVALID_ID,
    ERROR_INVALID_NAME,
    ERROR_INVALID_PRICE,
    ERROR_INVALID_QUANTITY,
    ERROR_INVALID_TAX_RATE,
    InvalidItem,
)
from shopcart.money import HUNDRED, Number, format_number, parse_amount, percent
from .buyable import Buyable
from .identity import ItemId, RowKeyGenerator, generate_row_key

Quantity = Union[int, Decimal]

# Fields of the export representation, in order
EXPORT_FIELDS = ("row_key", "id", "name", "quantity", "price", "options", "tax", "subtotal")

# Money attributes LineItem.formatted() accepts
MONEY_ATTRIBUTES = ("price", "price_with_tax", "subtotal", "total", "tax", "tax_total")


class ItemOptions(dict):
    """Selected options of a line item; ``options.color`` reads like ``options["color"]``."""

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__"):
            raise AttributeError(name)
        return self.get(name)


def _validate_id(item_id: Any) -> ItemId:
    if isinstance(item_id, bool) or not isinstance(item_id, (int, str)):
        raise InvalidItem(ERROR_INVALID_ID, field="id")
    if item_id in (0, "", "0"):
        raise InvalidItem(ERROR_INVALID_ID, field="id")
    return item_id


def _validate_name(name: Any) -> str:
    if not isinstance(name, str) or not name:
        raise InvalidItem(ERROR_INVALID_NAME, field="name")
    return name


def _parse_price(value: Any) -> Decimal:
    try:
        price = parse_amount(value)
    except ValueError as e:
        raise InvalidItem(ERROR_INVALID_PRICE, field="price") from e
    if price < 0:
        raise InvalidItem(ERROR_INVALID_PRICE, field="price")
    return price


def _parse_quantity(value: Any) -> Quantity:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    try:
        return parse_amount(value)
    except ValueError as e:
        raise InvalidItem(ERROR_INVALID_QUANTITY, field="quantity") from e


def _parse_tax_rate(value: Any) -> Decimal:
    try:
        return parse_amount(value)
    except ValueError as e:
        raise InvalidItem(ERROR_INVALID_TAX_RATE, field="tax_rate") from e


def _storable_option(value: Any) -> Any:
    # Decimal becomes float: JSON-safe and serialized as the same d: entry in the row key
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, Mapping):
        return {key: _storable_option(entry) for key, entry in value.items()}
    if isinstance(value, (list, tuple)):
        return [_storable_option(entry) for entry in value]
    return value


def rate_from_tax_amount(tax: Any, price: Decimal) -> Decimal:
    """Tax rate implied by an explicit per-unit tax amount (100 * tax / price)."""
    if price == 0:
        return Decimal("0")
    return _parse_tax_rate(tax) * HUNDRED / price


@dataclass
class LineItem:
    """
    Single row of a cart.

    The row key is derived from ``id`` and ``options`` and recomputed every
    time either of them is changed through this class.
    """
    id: ItemId
    name: str
    price: Decimal
    quantity: Quantity = 1
    options: ItemOptions = field(default_factory=ItemOptions)
    tax_rate: Decimal = Decimal("0")
    row_key_generator: RowKeyGenerator = field(default=generate_row_key, repr=False, compare=False)
    _row_key: str = field(init=False, default="", repr=False)

    def __post_init__(self):
        self.id = _validate_id(self.id)
        self.name = _validate_name(self.name)
        self.price = _parse_price(self.price)
        self.quantity = _parse_quantity(self.quantity)
        self.tax_rate = _parse_tax_rate(self.tax_rate)
        self.options = ItemOptions(self.options or {})
        self._refresh_row_key()

    def __repr__(self) -> str:
        return f"LineItem(row_key={self._row_key!r}, id={self.id!r}, name={self.name!r}, quantity={self.quantity!r})"

    @property
    def row_key(self) -> str:
        return self._row_key

    @property
    def tax(self) -> Decimal:
        """Tax for one unit."""
        return percent(self.price, self.tax_rate)

    @property
    def price_with_tax(self) -> Decimal:
        return self.price + self.tax

    @property
    def subtotal(self) -> Decimal:
        """Price of the whole row without tax."""
        return self.quantity * self.price

    @property
    def total(self) -> Decimal:
        """Price of the whole row with tax."""
        return self.quantity * self.price_with_tax

    @property
    def tax_total(self) -> Decimal:
        """Tax of the whole row."""
        return self.tax * self.quantity

    def formatted(
        self,
        attribute: str,
        decimals: int = 2,
        decimal_point: str = ".",
        thousands_separator: str = ",",
    ) -> str:
        """Render one of the money attributes, e.g. ``item.formatted("tax", 2, ",", ".")``."""
        if attribute not in MONEY_ATTRIBUTES:
            raise ValueError(f"Not a money attribute: {attribute}")
        return format_number(getattr(self, attribute), decimals, decimal_point, thousands_separator)

    def set_quantity(self, quantity: Any) -> "LineItem":
        self.quantity = _parse_quantity(quantity)
        return self

    def set_tax_rate(self, tax_rate: Any) -> "LineItem":
        self.tax_rate = _parse_tax_rate(tax_rate)
        return self

    def update_from_buyable(self, item: Buyable) -> None:
        """Refresh id, name and price from a product, keeping the current options."""
        self.id = _validate_id(item.buyable_identifier(self.options))
        self.name = _validate_name(item.buyable_description(self.options))
        self.price = _parse_price(item.buyable_price(self.options))
        self._refresh_row_key()

    def update_from_mapping(self, attributes: Mapping[str, Any]) -> None:
        """
        Override fields present in ``attributes``.

        ``options`` are merged over the current ones rather than replacing them.
        """
        if "id" in attributes:
            self.id = _validate_id(attributes["id"])
        if "name" in attributes:
            self.name = _validate_name(attributes["name"])
        if "price" in attributes:
            self.price = _parse_price(attributes["price"])
        quantity = attributes.get("quantity", attributes.get("qty"))
        if quantity is not None:
            self.quantity = _parse_quantity(quantity)
        if attributes.get("tax_rate") is not None:
            self.tax_rate = _parse_tax_rate(attributes["tax_rate"])
        if attributes.get("options"):
            self.options = ItemOptions({**self.options, **attributes["options"]})
        self._refresh_row_key()

    def _refresh_row_key(self) -> None:
        self._row_key = self.row_key_generator(self.id, dict(self.options))

    @classmethod
    def from_buyable(
        cls,
        item: Buyable,
        options: Optional[Mapping[str, Any]] = None,
        quantity: Any = 1,
        row_key_generator: RowKeyGenerator = generate_row_key,
    ) -> "LineItem":
        options = dict(options or {})
        return cls(
            id=item.buyable_identifier(options),
            name=item.buyable_description(options),
            price=item.buyable_price(options),
            quantity=quantity,
            options=ItemOptions(options),
            row_key_generator=row_key_generator,
        )

    @classmethod
    def from_attributes(
        cls,
        item_id: ItemId,
        name: str,
        price: Number,
        options: Optional[Mapping[str, Any]] = None,
        quantity: Any = 1,
        row_key_generator: RowKeyGenerator = generate_row_key,
    ) -> "LineItem":
        return cls(
            id=item_id,
            name=name,
            price=price,
            quantity=quantity,
            options=ItemOptions(options or {}),
            row_key_generator=row_key_generator,
        )

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        row_key_generator: RowKeyGenerator = generate_row_key,
    ) -> "LineItem":
        """
        Create from an attribute mapping, an export dict or a storage dict.

        ``qty`` is accepted as an alias of ``quantity``. Without ``tax_rate``
        an explicit per-unit ``tax`` amount is turned back into a rate.
        """
        missing = [key for key in ("id", "name", "price") if key not in data]
        if missing:
            raise InvalidItem(f"Missing item attribute(s): {', '.join(missing)}", field=missing[0])

        quantity = data.get("quantity", data.get("qty", 1))
        item = cls(
            id=data["id"],
            name=data["name"],
            price=data["price"],
            quantity=1 if quantity is None else quantity,
            options=ItemOptions(data.get("options") or {}),
            row_key_generator=row_key_generator,
        )
        if data.get("tax_rate") is not None:
            item.set_tax_rate(data["tax_rate"])
        elif data.get("tax") is not None:
            item.tax_rate = rate_from_tax_amount(data["tax"], item.price)
        return item

    @classmethod
    def from_storage(
        cls,
        data: Mapping[str, Any],
        row_key_generator: RowKeyGenerator = generate_row_key,
    ) -> "LineItem":
        """Rebuild a stored row; the stored row key stays authoritative."""
        item = cls.from_dict(data, row_key_generator)
        if data.get("row_key"):
            item._row_key = data["row_key"]
        return item

    def to_dict(self) -> dict:
        """Export representation; ``tax`` and ``subtotal`` are derived now."""
        return {
            "row_key": self.row_key,
            "id": self.id,
            "name": self.name,
            "quantity": self.quantity,
            "price": self.price,
            "options": dict(self.options),
            "tax": self.tax,
            "subtotal": self.subtotal,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)

    def to_storage(self) -> dict:
        """JSON-safe representation kept by stores."""
        return {
            "row_key": self.row_key,
            "id": self.id,
            "name": self.name,
            "quantity": self.quantity if isinstance(self.quantity, int) else str(self.quantity),
            "price": str(self.price),
            "options": _storable_option(dict(self.options)),
            "tax_rate": str(self.tax_rate),
        }


__all__ = [
    "EXPORT_FIELDS",
    "MONEY_ATTRIBUTES",
    "ItemOptions",
    "LineItem",
    "Quantity",
    "rate_from_tax_amount",
]
