"""
Cart API Pydantic Models
"""
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field


class AddCartItemRequest(BaseModel):
    id: Union[int, str]
    name: str
    price: float
    quantity: float = 1
    options: Dict[str, Any] = Field(default_factory=dict)
    tax_rate: Optional[float] = None


class UpdateCartItemRequest(BaseModel):
    """Only the fields sent are applied; quantity 0 removes the row."""
    id: Optional[Union[int, str]] = None
    name: Optional[str] = None
    price: Optional[float] = None
    quantity: Optional[float] = None
    options: Optional[Dict[str, Any]] = None
    tax_rate: Optional[float] = None


class SetTaxRateRequest(BaseModel):
    tax_rate: float
