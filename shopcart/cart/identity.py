"""
Row key derivation for cart items.

A row key is the MD5 hex digest of the product id followed by the PHP
``serialize()`` encoding of its options sorted by name. The encoding matches
PHP byte for byte so keys already persisted by PHP shops stay valid.
"""
import hashlib
import math
import re
from decimal import Decimal
from typing import Any, Callable, Mapping, Union

ItemId = Union[int, str]
RowKeyGenerator = Callable[[ItemId, Mapping[str, Any]], str]

_INT_KEY = re.compile(r"^(0|-?[1-9][0-9]*)$")


def _format_float(value: float) -> str:
    """Float text as PHP prints it with serialize_precision = -1."""
    if math.isnan(value):
        return "NAN"
    if math.isinf(value):
        return "INF" if value > 0 else "-INF"
    if value.is_integer() and abs(value) < 1e15:
        return str(int(value))
    text = repr(value)
    if "e" not in text:
        return text
    mantissa, exponent = text.split("e")
    if "." not in mantissa:
        mantissa += ".0"
    return f"{mantissa}E{'+' if int(exponent) >= 0 else '-'}{abs(int(exponent))}"


def _serialize_key(key: Any) -> str:
    if isinstance(key, bool):
        return f"i:{int(key)};"
    if isinstance(key, int):
        return f"i:{key};"
    text = str(key)
    # PHP casts canonical integer strings used as array keys to ints
    if _INT_KEY.match(text) and -(2 ** 63) <= int(text) < 2 ** 63:
        return f"i:{text};"
    return f's:{len(text.encode("utf-8"))}:"{text}";'


def php_serialize(value: Any) -> str:
    """Encode a scalar, mapping or sequence the way PHP's serialize() does."""
    if value is None:
        return "N;"
    if isinstance(value, bool):
        return f"b:{int(value)};"
    if isinstance(value, int):
        return f"i:{value};"
    if isinstance(value, float):
        return f"d:{_format_float(value)};"
    if isinstance(value, Decimal):
        return f"d:{_format_float(float(value))};"
    if isinstance(value, str):
        return f's:{len(value.encode("utf-8"))}:"{value}";'
    if isinstance(value, Mapping):
        body = "".join(_serialize_key(k) + php_serialize(v) for k, v in value.items())
        return f"a:{len(value)}:{{{body}}}"
    if isinstance(value, (list, tuple)):
        body = "".join(f"i:{i};" + php_serialize(v) for i, v in enumerate(value))
        return f"a:{len(value)}:{{{body}}}"
    raise TypeError(f"Cannot serialize option value of type {type(value).__name__}")


def normalize_options(options: Mapping[str, Any] | None) -> dict:
    """Options sorted by name in ascending code point order."""
    if not options:
        return {}
    return dict(sorted(options.items(), key=lambda entry: str(entry[0])))


def _id_text(item_id: ItemId) -> str:
    if isinstance(item_id, float):
        return _format_float(item_id)
    return str(item_id)


def generate_row_key(item_id: ItemId, options: Mapping[str, Any] | None = None) -> str:
    """
    Default row key: md5(id . serialize(ksort(options))).

    >>> generate_row_key(1, {})
    '027c91341fd5cf4d2579b49c4b6a90da'
    """
    payload = _id_text(item_id) + php_serialize(normalize_options(options))
    return hashlib.md5(payload.encode("utf-8"), usedforsecurity=False).hexdigest()


__all__ = [
    "ItemId",
    "RowKeyGenerator",
    "php_serialize",
    "normalize_options",
    "generate_row_key",
]
