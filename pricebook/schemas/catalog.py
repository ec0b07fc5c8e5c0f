"""
Pydantic schemas for the reference catalog.
"""

from typing import Optional, List
from pydantic import BaseModel, ConfigDict

from pricebook.schemas.price_override import PriceOverrideResponse


class ServiceTypeResponse(BaseModel):
    id: str
    name: str
    description: str
    default_margin: float
    minimum_margin: float

    model_config = ConfigDict(from_attributes=True)


class ProductVariantResponse(BaseModel):
    id: str
    name: str
    description: str
    specifications: List[str] = []
    is_default: bool = False

    model_config = ConfigDict(from_attributes=True)


class ProductTypeResponse(BaseModel):
    id: str
    name: str
    description: str
    service_type_id: str
    category: str
    variants: List[ProductVariantResponse] = []

    model_config = ConfigDict(from_attributes=True)


class VariantPriceResponse(BaseModel):
    """A variant with its current price, if any"""
    variant: ProductVariantResponse
    configured: bool
    display_price: str
    active_price: Optional[PriceOverrideResponse] = None


class ProductTypePricesResponse(BaseModel):
    product_type: ProductTypeResponse
    variants: List[VariantPriceResponse]
