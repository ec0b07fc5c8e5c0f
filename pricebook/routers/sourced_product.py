"""
API Router for Sourced Product endpoints.
CRUD for products bought abroad, plus their pricing summary with shipping options.
"""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from pricebook.core.auth import get_current_user_email
from pricebook.core.database import get_db
from pricebook.services.sourced_product_repository import SourcedProductRepository
from pricebook.schemas.sourced_product import (
    ProductPricingSummary,
    SourcedProductCreate,
    SourcedProductListResponse,
    SourcedProductResponse,
    SourcedProductUpdate,
)

router = APIRouter(prefix="/sourced-products", tags=["Sourced Products"])


def _get_or_404(db: Session, product_id: int):
    product = SourcedProductRepository.get_by_id(db, product_id)
    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Sourced product with ID {product_id} not found"
        )
    return product


# ============================================================================
# CREATE / UPDATE / DELETE
# ============================================================================

@router.post("/", response_model=SourcedProductResponse, status_code=status.HTTP_201_CREATED)
def create_sourced_product(
    product: SourcedProductCreate,
    db: Session = Depends(get_db),
    _: str = Depends(get_current_user_email)
):
    """
    Create a sourced product.

    With a `foreign_price`, the local cost is foreign_price x exchange_rate
    (default rate when unset). In auto-price mode the sale price is derived
    from that cost and the margin (default margin when unset).
    """
    db_product = SourcedProductRepository.create(db, product)
    return SourcedProductResponse.model_validate(db_product)


@router.put("/{product_id}", response_model=SourcedProductResponse)
def update_sourced_product(
    product_id: int,
    product_update: SourcedProductUpdate,
    db: Session = Depends(get_db),
    _: str = Depends(get_current_user_email)
):
    """Update a sourced product (only provided fields are updated)"""
    db_product = SourcedProductRepository.update(db, product_id, product_update)
    if not db_product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Sourced product with ID {product_id} not found"
        )
    return SourcedProductResponse.model_validate(db_product)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_sourced_product(
    product_id: int,
    db: Session = Depends(get_db),
    _: str = Depends(get_current_user_email)
):
    """Delete a sourced product"""
    if not SourcedProductRepository.delete(db, product_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Sourced product with ID {product_id} not found"
        )
    return None


# ============================================================================
# READ
# ============================================================================

@router.get("/", response_model=SourcedProductListResponse)
def get_all_sourced_products(
    db: Session = Depends(get_db),
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(20, ge=1, le=100, description="Maximum records to return"),
    search: Optional[str] = Query(None, description="Search in name and sourcing platform"),
    product_type_id: Optional[str] = Query(None, description="Filter by linked product type"),
    _: str = Depends(get_current_user_email)
):
    """Get sourced products with optional filters and pagination"""
    products, total = SourcedProductRepository.get_all(db, skip, limit, search, product_type_id)

    return SourcedProductListResponse(
        items=[SourcedProductResponse.model_validate(p) for p in products],
        total=total,
        skip=skip,
        limit=limit
    )


@router.get("/{product_id}", response_model=SourcedProductResponse)
def get_sourced_product(
    product_id: int,
    db: Session = Depends(get_db),
    _: str = Depends(get_current_user_email)
):
    """Get sourced product by ID"""
    return SourcedProductResponse.model_validate(_get_or_404(db, product_id))


@router.get("/{product_id}/pricing", response_model=ProductPricingSummary)
def get_sourced_product_pricing(
    product_id: int,
    db: Session = Depends(get_db),
    _: str = Depends(get_current_user_email)
):
    """
    Sale price with every shipping option the product qualifies for.

    Air options need `weight_kg`, sea freight needs `volume_m3`; each option
    reports its cost and the total with the sale price.
    """
    product = _get_or_404(db, product_id)
    return ProductPricingSummary(**SourcedProductRepository.pricing_summary(product))
