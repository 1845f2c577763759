"""
Cart errors and their message constants.

Message strings are kept as module constants so callers and tests match on
one definition.
"""

ERROR_INVALID_ID = "Please supply a valid identifier."
ERROR_INVALID_NAME = "Please supply a valid name."
ERROR_INVALID_PRICE = "Please supply a valid price."
ERROR_INVALID_QUANTITY = "Please supply a valid quantity."
ERROR_INVALID_TAX_RATE = "Please supply a valid tax rate."
ERROR_INVALID_ROW_KEY = "The cart does not contain rowId {row_key}."
ERROR_STORE_INIT = "Handler {handler} could not be initialized"
ERROR_INVALID_HANDLER = "handler must be a class that implements {contract}"


class CartError(Exception):
    """Base error raised by the cart."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class InvalidItem(CartError):
    """Malformed line item input (empty id or name, bad price)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="INVALID_ITEM")
        self.field = field


class InvalidRowKey(CartError):
    """Operation referenced a row key absent from the cart."""

    def __init__(self, row_key: str) -> None:
        super().__init__(ERROR_INVALID_ROW_KEY.format(row_key=row_key), code="INVALID_ROW_KEY")
        self.row_key = row_key


class StoreInitializationFailure(CartError):
    """Backing store could not be prepared for an instance."""

    def __init__(self, handler: str, instance: str | None = None) -> None:
        super().__init__(ERROR_STORE_INIT.format(handler=handler), code="STORE_INIT_FAILED")
        self.handler = handler
        self.instance = instance


class InvalidHandlerConfiguration(CartError):
    """Configured handler does not implement the store contract."""

    def __init__(self, handler: object, contract: str = "shopcart.cart.storage.Store") -> None:
        super().__init__(ERROR_INVALID_HANDLER.format(contract=contract), code="INVALID_HANDLER")
        self.handler = handler


__all__ = [
    "CartError",
    "InvalidItem",
    "InvalidRowKey",
    "StoreInitializationFailure",
    "InvalidHandlerConfiguration",
]
