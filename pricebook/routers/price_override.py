"""
API Router for Price Override endpoints.

Every write goes through the pricing engine so that derivation, the
low-margin gate and the one-active-record rule apply the same way to single
edits, bulk margin rewrites and CSV imports.
"""

import logging
import time
from io import StringIO
from typing import List, Optional

import pandas as pd
from fastapi import APIRouter, Depends, HTTPException, status, Query, File, Form, UploadFile
from sqlalchemy.orm import Session

from pricebook.core.auth import get_current_user_email
from pricebook.core.database import get_db
from pricebook.core.exceptions import PricebookError
from pricebook.services.price_override_repository import SqlOverrideRepository
from pricebook.services.pricing import (
    MarginThresholds,
    PriceEdit,
    assess_margin,
    reconcile_edit,
)
from pricebook.services.pricing_engine import PricingEngine, ScopeFilter, get_pricing_engine
from pricebook.schemas.price_override import (
    ActivePriceResponse,
    BulkMarginRequest,
    BulkMarginResponse,
    CSVUploadResponse,
    PairRef,
    PriceEditPreviewRequest,
    PriceEditPreviewResponse,
    PriceOverrideFilter,
    PriceOverrideListResponse,
    PriceOverrideResponse,
    SetPriceRequest,
    SetPriceResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/price-overrides", tags=["Price Overrides"])

PRICE_NOT_CONFIGURED = "Price not configured"

MAX_CSV_BYTES = 5 * 1024 * 1024
MAX_CSV_ROWS = 5000

CSV_COLUMN_ALIASES = {
    "product_type_id": "product_type_id",
    "product_type": "product_type_id",
    "type": "product_type_id",
    "variant_id": "variant_id",
    "variant": "variant_id",
    "cost_price": "cost_price",
    "cost": "cost_price",
    "unit_price": "unit_price",
    "price": "unit_price",
    "sale_price": "unit_price",
    "margin": "margin",
    "margin_percent": "margin",
}


def _to_response(record) -> Optional[PriceOverrideResponse]:
    return PriceOverrideResponse.model_validate(record) if record is not None else None


# ============================================================================
# CREATE ENDPOINTS
# ============================================================================

@router.post("/", response_model=SetPriceResponse, status_code=status.HTTP_201_CREATED)
def set_price(
    request: SetPriceRequest,
    engine: PricingEngine = Depends(get_pricing_engine),
    email: str = Depends(get_current_user_email)
):
    """
    Save the price of one (product type, variant) pair.

    **Required fields:**
    - product_type_id, variant_id: must exist in the catalog
    - cost_price: supplier cost (>= 0)
    - exactly one of unit_price or margin

    A margin below the confirmation threshold is refused with 409
    MARGIN_CONFIRMATION_REQUIRED unless `confirmed` is true. The previous
    active record, if any, is kept as history and returned as `replaced`.
    """
    result = engine.set_price(
        request.product_type_id,
        request.variant_id,
        cost_price=request.cost_price,
        unit_price=request.unit_price,
        margin=request.margin,
        updated_by=email,
        confirmed=request.confirmed,
        currency=request.currency,
    )
    return SetPriceResponse(
        record=_to_response(result.record),
        replaced=_to_response(result.replaced),
        warning=result.assessment.warning,
        requires_confirmation=result.assessment.requires_confirmation,
        warnings=result.warnings,
    )


@router.post("/bulk-margin", response_model=BulkMarginResponse)
def bulk_set_margin(
    request: BulkMarginRequest,
    engine: PricingEngine = Depends(get_pricing_engine),
    email: str = Depends(get_current_user_email)
):
    """
    Apply one margin to every priced variant of a slice of the catalog.

    Scope is either one `product_type_id`, or the product types of a
    `service_type_id` optionally narrowed by `search`. Without any filter the
    whole catalog is rewritten. Variants with no active price or no cost are
    reported in `skipped` and left untouched.
    """
    scope = engine.resolve_scope(ScopeFilter(
        product_type_id=request.product_type_id,
        service_type_id=request.service_type_id,
        search=request.search,
    ))
    result = engine.bulk_set_margin(request.target_margin, scope, updated_by=email)

    return BulkMarginResponse(
        success=True,
        target_margin=request.target_margin,
        product_type_count=len(scope),
        updated_count=len(result.created),
        skipped_count=len(result.skipped),
        created=[_to_response(r) for r in result.created],
        skipped=[PairRef(product_type_id=pt, variant_id=v) for pt, v in result.skipped],
    )


@router.post("/preview", response_model=PriceEditPreviewResponse)
def preview_price_edit(
    request: PriceEditPreviewRequest,
    _: str = Depends(get_current_user_email)
):
    """
    Reconcile a price form after one field changed, without saving anything.

    Changing cost or sale price recomputes the margin; changing the margin
    recomputes the sale price. The result carries the low-margin assessment
    the form should display.
    """
    edit = reconcile_edit(
        PriceEdit(unit_price=request.unit_price, cost_price=request.cost_price, margin=request.margin),
        request.field,
        request.value,
    )
    assessment = assess_margin(edit.margin, MarginThresholds.from_settings())

    return PriceEditPreviewResponse(
        unit_price=edit.unit_price,
        cost_price=edit.cost_price,
        margin=edit.margin,
        warning=assessment.warning,
        requires_confirmation=assessment.requires_confirmation,
        message=assessment.message,
    )


def _parse_amount(value) -> Optional[float]:
    if value is None or pd.isna(value) or str(value).strip() == "":
        return None
    return float(value)


def _row_data(row) -> dict:
    return {k: (None if pd.isna(v) else str(v)) for k, v in row.items()}


@router.post("/upload-csv", response_model=CSVUploadResponse)
def upload_csv_prices(
    file: UploadFile = File(..., description="CSV file with one price per row"),
    confirm_low_margins: bool = Form(False, description="Confirm rows whose margin needs confirmation"),
    engine: PricingEngine = Depends(get_pricing_engine),
    email: str = Depends(get_current_user_email)
):
    """
    Upload a CSV file of prices.

    **CSV Format:**
    Required headers (case-insensitive): product_type_id, variant_id, cost_price
    and either unit_price or margin per row.

    **Example CSV:**
    ```csv
    product_type_id,variant_id,cost_price,margin,unit_price
    nvr_systems,nvr_8ch,60000,30,
    nvr_systems,nvr_16ch,90000,,120000
    ```

    Each row is saved like a single price edit; rows that fail are reported
    in `errors` and do not stop the import.
    """
    start_time = time.time()

    if not file.filename or not file.filename.lower().endswith(".csv"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File must be a CSV file (.csv extension)"
        )

    content = file.file.read()
    if len(content) > MAX_CSV_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="File size exceeds 5 MB limit"
        )

    try:
        content_str = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        content_str = content.decode("latin-1")

    try:
        df = pd.read_csv(StringIO(content_str), dtype=str)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Could not parse CSV file: {str(e)}"
        )

    if len(df) > MAX_CSV_ROWS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"CSV contains {len(df)} rows. Maximum allowed is {MAX_CSV_ROWS} rows."
        )

    column_mapping = {}
    for col in df.columns:
        key = col.strip().lower().replace(" ", "_")
        if key in CSV_COLUMN_ALIASES:
            column_mapping[col] = CSV_COLUMN_ALIASES[key]
    df.rename(columns=column_mapping, inplace=True)

    required_columns = ["product_type_id", "variant_id", "cost_price"]
    missing_columns = [col for col in required_columns if col not in df.columns]
    if missing_columns:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Missing required columns: {', '.join(missing_columns)}"
        )
    if "unit_price" not in df.columns and "margin" not in df.columns:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="CSV must contain a unit_price or a margin column"
        )

    created_count = 0
    skipped_count = 0
    errors = []
    warnings: List[str] = []

    for idx, row in df.iterrows():
        line = idx + 2  # header row plus 0-indexing
        if all(pd.isna(row[col]) or not str(row[col]).strip() for col in required_columns):
            skipped_count += 1
            continue

        try:
            result = engine.set_price(
                str(row["product_type_id"]).strip(),
                str(row["variant_id"]).strip(),
                cost_price=_parse_amount(row["cost_price"]),
                unit_price=_parse_amount(row.get("unit_price")),
                margin=_parse_amount(row.get("margin")),
                updated_by=email,
                confirmed=confirm_low_margins,
            )
        except PricebookError as e:
            errors.append({"row": line, "error": e.message, "code": e.code, "data": _row_data(row)})
            continue
        except ValueError as e:
            errors.append({"row": line, "error": str(e), "code": "INVALID_ROW", "data": _row_data(row)})
            continue

        created_count += 1
        warnings.extend(f"Row {line}: {w}" for w in result.warnings)

    logger.info(
        "CSV price import by %s: %d created, %d skipped, %d failed",
        email, created_count, skipped_count, len(errors),
    )

    return CSVUploadResponse(
        success=len(errors) == 0,
        total_rows=len(df),
        created_count=created_count,
        skipped_count=skipped_count,
        failed_count=len(errors),
        errors=errors,
        warnings=warnings,
        processing_time_seconds=round(time.time() - start_time, 2)
    )


# ============================================================================
# READ ENDPOINTS
# ============================================================================

@router.get("/active/{product_type_id}/{variant_id}", response_model=ActivePriceResponse)
def get_active_price(
    product_type_id: str,
    variant_id: str,
    engine: PricingEngine = Depends(get_pricing_engine),
    _: str = Depends(get_current_user_email)
):
    """
    Get the current price of a pair.

    A pair that was never priced is not an error: the response has
    `configured: false` and the message "Price not configured".
    """
    if engine.catalog.get_variant(product_type_id, variant_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Variant '{variant_id}' of product type '{product_type_id}' not found"
        )

    record = engine.get_active_price(product_type_id, variant_id)
    return ActivePriceResponse(
        product_type_id=product_type_id,
        variant_id=variant_id,
        configured=record is not None,
        message=None if record is not None else PRICE_NOT_CONFIGURED,
        record=_to_response(record),
    )


@router.get("/history/{product_type_id}/{variant_id}", response_model=List[PriceOverrideResponse])
def get_price_history(
    product_type_id: str,
    variant_id: str,
    engine: PricingEngine = Depends(get_pricing_engine),
    _: str = Depends(get_current_user_email)
):
    """All records for a pair, newest first."""
    return [_to_response(r) for r in engine.price_history(product_type_id, variant_id)]


@router.get("/", response_model=PriceOverrideListResponse)
def get_all_price_overrides(
    db: Session = Depends(get_db),
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(50, ge=1, le=500, description="Maximum records to return"),
    product_type_id: Optional[str] = Query(None, description="Filter by product type ID"),
    variant_id: Optional[str] = Query(None, description="Filter by variant ID"),
    active_only: bool = Query(False, description="Only return active records"),
    updated_by: Optional[str] = Query(None, description="Filter by updater (partial match)"),
    max_margin: Optional[float] = Query(None, description="Only records with margin at or below this value"),
    search: Optional[str] = Query(None, description="Search in product type and variant IDs"),
    _: str = Depends(get_current_user_email)
):
    """
    Get price override records with optional filters and pagination.

    **Query Parameters:**
    - skip / limit: pagination (default limit 50, max 500)
    - product_type_id, variant_id: exact match
    - active_only: current prices only
    - updated_by: partial match on the updater email
    - max_margin: low-margin audit
    - search: partial match on product type or variant ID
    """
    filters = PriceOverrideFilter(
        product_type_id=product_type_id,
        variant_id=variant_id,
        active_only=active_only,
        updated_by=updated_by,
        max_margin=max_margin,
        search=search,
    )

    records, total = SqlOverrideRepository(db).get_all(skip, limit, filters)

    return PriceOverrideListResponse(
        items=[_to_response(r) for r in records],
        total=total,
        skip=skip,
        limit=limit
    )
