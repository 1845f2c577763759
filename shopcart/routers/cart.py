"""
Cart Router

Session (or cookie) shopping cart endpoints.

Money values are floats at this boundary; the cart itself keeps Decimals.
Pass ?instance=wishlist to work on another cart instance.
"""
from fastapi import APIRouter, Depends, HTTPException

from shopcart.cart import Cart, LineItem
from shopcart.errors import InvalidItem, InvalidRowKey
from shopcart.logging import get_logger, sanitize_string_for_logging
from shopcart.money import to_float
from .deps import get_request_cart
from .models import AddCartItemRequest, SetTaxRateRequest, UpdateCartItemRequest

logger = get_logger(__name__)

router = APIRouter(tags=["cart"])


def _format_item(item: LineItem) -> dict:
    data = item.to_dict()
    data["quantity"] = to_float(item.quantity) if not isinstance(item.quantity, int) else item.quantity
    data["price"] = to_float(item.price)
    data["tax"] = to_float(item.tax)
    data["subtotal"] = to_float(item.subtotal)
    data["tax_rate"] = to_float(item.tax_rate)
    data["total"] = to_float(item.total)
    return data


def _format_cart_response(cart: Cart) -> dict:
    items = [_format_item(item) for item in cart.content().values()]
    count = cart.count()
    return {
        "instance": cart.current_instance(),
        "items": items,
        "count": count if isinstance(count, int) else to_float(count),
        "subtotal": to_float(cart.subtotal()),
        "tax": to_float(cart.tax()),
        "total": to_float(cart.total()),
    }


def _quantity(value: float):
    return int(value) if float(value).is_integer() else value


@router.get("/cart")
def get_cart_content(cart: Cart = Depends(get_request_cart)):
    """Get the cart with per-row and aggregate amounts."""
    return _format_cart_response(cart)


@router.post("/cart/items", status_code=201)
def add_cart_item(request: AddCartItemRequest, cart: Cart = Depends(get_request_cart)):
    """
    Add an item; an identical item (same id and options) only raises the quantity.

    A resulting quantity of 0 or less removes the row and returns item=None.
    """
    attributes = request.model_dump(exclude_none=True)
    attributes["quantity"] = _quantity(request.quantity)
    try:
        item = cart.add(attributes)
    except InvalidItem as e:
        raise HTTPException(status_code=422, detail=e.message)
    return {
        "item": _format_item(item) if item is not None else None,
        "cart": _format_cart_response(cart),
    }


@router.patch("/cart/items/{row_key}")
def update_cart_item(row_key: str, request: UpdateCartItemRequest, cart: Cart = Depends(get_request_cart)):
    """Update quantity or attributes of a row (quantity 0 = remove)."""
    patch = request.model_dump(exclude_none=True)
    if "quantity" in patch:
        patch["quantity"] = _quantity(patch["quantity"])
    try:
        if set(patch) == {"quantity"}:
            item = cart.update(row_key, patch["quantity"])
        else:
            item = cart.update(row_key, patch)
    except InvalidRowKey as e:
        raise HTTPException(status_code=404, detail=e.message)
    except InvalidItem as e:
        raise HTTPException(status_code=422, detail=e.message)
    return {
        "item": _format_item(item) if item is not None else None,
        "cart": _format_cart_response(cart),
    }


@router.put("/cart/items/{row_key}/tax")
def set_cart_item_tax(row_key: str, request: SetTaxRateRequest, cart: Cart = Depends(get_request_cart)):
    """Override the tax rate of one row."""
    try:
        cart.set_tax_rate(row_key, request.tax_rate)
    except InvalidRowKey as e:
        raise HTTPException(status_code=404, detail=e.message)
    return _format_cart_response(cart)


@router.delete("/cart/items/{row_key}")
def remove_cart_item(row_key: str, cart: Cart = Depends(get_request_cart)):
    """Remove a row."""
    try:
        cart.remove(row_key)
    except InvalidRowKey as e:
        raise HTTPException(status_code=404, detail=e.message)
    return _format_cart_response(cart)


@router.delete("/cart")
def clear_cart(cart: Cart = Depends(get_request_cart)):
    """Empty the current cart instance."""
    cart.destroy()
    logger.info(f"Cart instance {sanitize_string_for_logging(cart.current_instance())} cleared")
    return _format_cart_response(cart)
