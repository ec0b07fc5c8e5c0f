"""
Pydantic schemas for Sourced Products.
Request and response models for sourced_products API endpoints.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Sourced Product Schemas
# ============================================================================

class SourcedProductBase(BaseModel):
    """Base schema for SourcedProduct"""
    name: str = Field(..., max_length=255, description="Product name")
    product_type_id: Optional[str] = Field(None, max_length=100, description="Linked catalog product type")
    variant_id: Optional[str] = Field(None, max_length=100, description="Linked catalog variant")
    sourcing_platform: Optional[str] = Field(None, max_length=50, description="1688, alibaba, aliexpress, taobao...")
    foreign_price: Optional[Decimal] = Field(None, ge=0, description="Sourcing price in foreign currency")
    foreign_currency: str = Field("CNY", max_length=10, description="Currency of the sourcing price")
    exchange_rate: Optional[float] = Field(None, description="Local units per foreign unit; unset or 0 uses the default")
    margin: Optional[float] = Field(None, description="Gross margin %; defaults to the configured margin")
    auto_price: bool = Field(True, description="Derive the sale price from cost and margin")
    price: Optional[Decimal] = Field(None, ge=0, description="Manual sale price (ignored in auto-price mode)")
    weight_kg: Optional[float] = Field(None, ge=0, description="Shipping weight in kg")
    volume_m3: Optional[float] = Field(None, ge=0, description="Shipping volume in cubic metres")


class SourcedProductCreate(SourcedProductBase):
    """Schema for creating a sourced product"""
    base_cost: Optional[float] = Field(None, ge=0, description="Local cost when there is no foreign price")


class SourcedProductUpdate(BaseModel):
    """Schema for updating a sourced product (all fields optional)"""
    name: Optional[str] = Field(None, max_length=255)
    product_type_id: Optional[str] = Field(None, max_length=100)
    variant_id: Optional[str] = Field(None, max_length=100)
    sourcing_platform: Optional[str] = Field(None, max_length=50)
    foreign_price: Optional[Decimal] = Field(None, ge=0)
    foreign_currency: Optional[str] = Field(None, max_length=10)
    exchange_rate: Optional[float] = None
    base_cost: Optional[float] = Field(None, ge=0)
    margin: Optional[float] = None
    auto_price: Optional[bool] = None
    price: Optional[Decimal] = Field(None, ge=0)
    weight_kg: Optional[float] = Field(None, ge=0)
    volume_m3: Optional[float] = Field(None, ge=0)


class SourcedProductResponse(BaseModel):
    """Schema for sourced product response"""
    id: int
    name: str
    product_type_id: Optional[str] = None
    variant_id: Optional[str] = None
    sourcing_platform: Optional[str] = None
    foreign_price: Optional[Decimal] = None
    foreign_currency: str
    exchange_rate: Optional[float] = None
    base_cost: Optional[float] = None
    margin: float
    price: Optional[Decimal] = None
    currency: str
    auto_price: bool
    weight_kg: Optional[float] = None
    volume_m3: Optional[float] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SourcedProductListResponse(BaseModel):
    """Schema for paginated list of sourced products"""
    items: List[SourcedProductResponse]
    total: int
    skip: int
    limit: int


# ============================================================================
# Pricing Summary Schemas
# ============================================================================

class ShippingOptionResponse(BaseModel):
    id: str
    label: str
    description: str
    duration_days: int
    cost: int
    total: int
    currency: str


class ProductPricingSummary(BaseModel):
    """Sale price with the shipping options available for a product"""
    product_id: int
    base_cost: Optional[float] = None
    margin: float
    sale_price: Optional[int] = None
    currency: str
    shipping_options: List[ShippingOptionResponse] = []
