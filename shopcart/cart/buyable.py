"""Buyable contract for product-like objects added to the cart."""
from typing import Any, Mapping, Optional, Protocol, Union, runtime_checkable

from shopcart.money import Number


@runtime_checkable
class Buyable(Protocol):
    """
    Anything the cart can price and describe.

    Each accessor receives the selected options, so products may vary their
    identifier, label or price per option (size, colour, ...).
    """

    def buyable_identifier(self, options: Optional[Mapping[str, Any]] = None) -> Union[int, str]:
        ...

    def buyable_description(self, options: Optional[Mapping[str, Any]] = None) -> str:
        ...

    def buyable_price(self, options: Optional[Mapping[str, Any]] = None) -> Number:
        ...


# Input accepted by Cart.add for a single item
ItemSource = Union[Buyable, Mapping[str, Any]]


__all__ = ["Buyable", "ItemSource"]
