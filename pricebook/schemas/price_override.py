"""
Pydantic schemas for Price Overrides.
Request and response models for price_overrides API endpoints.

Margin and cost ranges are checked by the pricing engine, not here, so that
out-of-range values surface as INVALID_MARGIN / INVALID_COST errors.
"""

from datetime import datetime
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, ConfigDict, Field, model_validator


# ============================================================================
# Price Override Schemas
# ============================================================================

class PriceOverrideResponse(BaseModel):
    """Schema for a stored price override record"""
    id: str
    product_type_id: str
    variant_id: str
    unit_price: float
    cost_price: float
    margin: float
    currency: str
    valid_from: datetime
    valid_until: Optional[datetime] = None
    is_active: bool
    last_updated: datetime
    updated_by: str

    model_config = ConfigDict(from_attributes=True)


class SetPriceRequest(BaseModel):
    """Schema for saving a price: cost plus either a sale price or a margin"""
    product_type_id: str = Field(..., max_length=100, description="Catalog product type ID")
    variant_id: str = Field(..., max_length=100, description="Variant ID within the product type")
    cost_price: float = Field(..., description="Supplier cost in local currency (>= 0)")
    unit_price: Optional[float] = Field(None, description="Sale price; margin is derived from it")
    margin: Optional[float] = Field(None, description="Gross margin % in [0, 99]; sale price is derived from it")
    confirmed: bool = Field(False, description="Confirm saving a very low margin")
    currency: Optional[str] = Field(None, max_length=10, description="Currency code (defaults to configured currency)")

    @model_validator(mode="after")
    def check_price_or_margin(self):
        if (self.unit_price is None) == (self.margin is None):
            raise ValueError("Provide exactly one of unit_price or margin")
        return self


class SetPriceResponse(BaseModel):
    """Schema for the result of saving a price"""
    record: PriceOverrideResponse
    replaced: Optional[PriceOverrideResponse] = None
    warning: bool = False
    requires_confirmation: bool = False
    warnings: List[str] = []


class ActivePriceResponse(BaseModel):
    """Schema for the current price of a pair"""
    product_type_id: str
    variant_id: str
    configured: bool
    message: Optional[str] = None
    record: Optional[PriceOverrideResponse] = None


class PriceOverrideListResponse(BaseModel):
    """Schema for paginated list of price override records"""
    items: List[PriceOverrideResponse]
    total: int
    skip: int
    limit: int


# ============================================================================
# Query and Filter Schemas
# ============================================================================

class PriceOverrideFilter(BaseModel):
    """Schema for filtering price override records"""
    product_type_id: Optional[str] = Field(None, description="Filter by product type ID")
    variant_id: Optional[str] = Field(None, description="Filter by variant ID")
    active_only: bool = Field(False, description="Only return active records")
    updated_by: Optional[str] = Field(None, description="Filter by updater (partial match)")
    max_margin: Optional[float] = Field(None, description="Only records with margin at or below this value")
    search: Optional[str] = Field(None, description="Search across product type and variant IDs")


# ============================================================================
# Bulk Margin Schemas
# ============================================================================

class BulkMarginRequest(BaseModel):
    """Schema for applying one margin to a slice of the catalog"""
    target_margin: float = Field(..., description="Gross margin % in [0, 99]")
    product_type_id: Optional[str] = Field(None, description="Limit to one product type")
    service_type_id: Optional[str] = Field(None, description="Limit to product types of a service")
    search: Optional[str] = Field(None, description="Narrow by product type or variant name")


class PairRef(BaseModel):
    product_type_id: str
    variant_id: str


class BulkMarginResponse(BaseModel):
    """Response for bulk margin rewrite"""
    success: bool
    target_margin: float
    product_type_count: int
    updated_count: int = 0
    skipped_count: int = 0
    created: List[PriceOverrideResponse] = []
    skipped: List[PairRef] = []


# ============================================================================
# Edit Preview Schemas
# ============================================================================

class PriceEditPreviewRequest(BaseModel):
    """Current form values plus the field the user just changed"""
    unit_price: float = Field(0, description="Current sale price")
    cost_price: float = Field(0, description="Current cost price")
    margin: float = Field(0, description="Current margin %")
    field: str = Field(..., pattern="^(unit_price|cost_price|margin)$", description="Field that changed")
    value: float = Field(..., description="New value of the changed field")


class PriceEditPreviewResponse(BaseModel):
    """Reconciled form values with the low-margin assessment"""
    unit_price: float
    cost_price: float
    margin: float
    warning: bool
    requires_confirmation: bool
    message: Optional[str] = None


# ============================================================================
# CSV Import Schemas
# ============================================================================

class CSVUploadResponse(BaseModel):
    """Response schema for CSV upload endpoint"""
    success: bool
    total_rows: int
    created_count: int = 0
    skipped_count: int = 0
    failed_count: int = 0
    errors: List[Dict[str, Any]] = []
    warnings: List[str] = []
    processing_time_seconds: float
