"""Cart configuration loaded from the environment."""
import os
from decimal import Decimal
from typing import Any, Dict, Union

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, field_validator

from shopcart.money import parse_amount

DEFAULT_INSTANCE = "default"

# Handler aliases accepted in CART_HANDLER / CartConfig.handler
HANDLER_ALIASES: Dict[str, str] = {
    "memory": "shopcart.cart.storage.memory.MemoryStore",
    "session": "shopcart.cart.storage.session.SessionStore",
    "cookie": "shopcart.cart.storage.cookie.CookieStore",
    "redis": "shopcart.cart.storage.redis.RedisStore",
}

# Handlers built per request by shopcart.routers.deps, never from config alone
REQUEST_BOUND_HANDLERS = ("session", "cookie")


class NumberFormat(BaseModel):
    """Defaults for formatted cart totals."""
    decimals: int = 2
    decimal_point: str = "."
    thousands_separator: str = ","


class CartConfig(BaseModel):
    """Configuration of a cart instance."""
    handler: Union[str, type] = "memory"
    handler_options: Dict[str, Any] = Field(default_factory=dict)
    tax_rate: Decimal = Decimal("20")
    format: NumberFormat = Field(default_factory=NumberFormat)

    model_config = {"arbitrary_types_allowed": True}

    @field_validator("tax_rate", mode="before")
    @classmethod
    def convert_tax_rate(cls, v):
        return parse_amount(v)


def load_config(**overrides: Any) -> CartConfig:
    """
    Build a CartConfig from environment variables and a .env file in the working directory.

    Environment:
        CART_HANDLER: memory | session | cookie | redis | dotted.path.Class
        CART_TAX_RATE: default tax rate in percent
        CART_FORMAT_DECIMALS, CART_FORMAT_DECIMAL_POINT, CART_FORMAT_THOUSANDS_SEPARATOR
        CART_REDIS_TTL: seconds before an idle Redis cart expires

    Keyword overrides win over the environment.
    """
    load_dotenv(find_dotenv(usecwd=True))

    data: Dict[str, Any] = {
        "handler": os.environ.get("CART_HANDLER", "memory"),
        "tax_rate": os.environ.get("CART_TAX_RATE", "20"),
        "format": {
            "decimals": int(os.environ.get("CART_FORMAT_DECIMALS", "2")),
            "decimal_point": os.environ.get("CART_FORMAT_DECIMAL_POINT", "."),
            "thousands_separator": os.environ.get("CART_FORMAT_THOUSANDS_SEPARATOR", ","),
        },
    }

    redis_ttl = os.environ.get("CART_REDIS_TTL")
    if redis_ttl and data["handler"] == "redis":
        data["handler_options"] = {"ttl": int(redis_ttl)}

    data.update(overrides)
    return CartConfig(**data)


__all__ = ["DEFAULT_INSTANCE", "HANDLER_ALIASES", "REQUEST_BOUND_HANDLERS", "NumberFormat", "CartConfig", "load_config"]
