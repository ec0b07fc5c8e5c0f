"""
Schemas for the application.

This module exports all Pydantic models and schemas used for request/response validation.
"""

from pricebook.schemas.admin import (
    AdminBase,
    AdminCreate,
    AdminOut,
    AdminAuth,
    AdminAuthResponse,
)

from pricebook.schemas.catalog import (
    ServiceTypeResponse,
    ProductVariantResponse,
    ProductTypeResponse,
    VariantPriceResponse,
    ProductTypePricesResponse,
)

from pricebook.schemas.price_override import (
    # Record schemas
    PriceOverrideResponse,
    PriceOverrideListResponse,
    PriceOverrideFilter,
    ActivePriceResponse,
    # Edit schemas
    SetPriceRequest,
    SetPriceResponse,
    PriceEditPreviewRequest,
    PriceEditPreviewResponse,
    # Bulk schemas
    BulkMarginRequest,
    BulkMarginResponse,
    PairRef,
    CSVUploadResponse,
)

from pricebook.schemas.pricing import (
    DerivePriceRequest,
    DerivePriceResponse,
)

from pricebook.schemas.sourced_product import (
    SourcedProductBase,
    SourcedProductCreate,
    SourcedProductUpdate,
    SourcedProductResponse,
    SourcedProductListResponse,
    ShippingOptionResponse,
    ProductPricingSummary,
)

__all__ = [
    # Admin schemas
    "AdminBase",
    "AdminCreate",
    "AdminOut",
    "AdminAuth",
    "AdminAuthResponse",
    # Catalog schemas
    "ServiceTypeResponse",
    "ProductVariantResponse",
    "ProductTypeResponse",
    "VariantPriceResponse",
    "ProductTypePricesResponse",
    # Price override schemas
    "PriceOverrideResponse",
    "PriceOverrideListResponse",
    "PriceOverrideFilter",
    "ActivePriceResponse",
    "SetPriceRequest",
    "SetPriceResponse",
    "PriceEditPreviewRequest",
    "PriceEditPreviewResponse",
    "BulkMarginRequest",
    "BulkMarginResponse",
    "PairRef",
    "CSVUploadResponse",
    # Pricing schemas
    "DerivePriceRequest",
    "DerivePriceResponse",
    # Sourced product schemas
    "SourcedProductBase",
    "SourcedProductCreate",
    "SourcedProductUpdate",
    "SourcedProductResponse",
    "SourcedProductListResponse",
    "ShippingOptionResponse",
    "ProductPricingSummary",
]
