"""
Pydantic schemas for stateless pricing calculations.
"""

from typing import Optional
from pydantic import BaseModel, Field


class DerivePriceRequest(BaseModel):
    """
    Derive a sale price, a margin, or both.

    Provide cost_price (or foreign_price and an optional exchange_rate) and
    either margin or unit_price.
    """
    cost_price: Optional[float] = Field(None, description="Cost in local currency")
    foreign_price: Optional[float] = Field(None, description="Sourcing price in foreign currency")
    exchange_rate: Optional[float] = Field(None, description="Local units per foreign unit")
    margin: Optional[float] = Field(None, description="Target gross margin %")
    unit_price: Optional[float] = Field(None, description="Sale price")


class DerivePriceResponse(BaseModel):
    cost_price: float
    unit_price: Optional[float] = None
    margin: Optional[float] = None
    warning: bool = False
    requires_confirmation: bool = False
    message: Optional[str] = None
