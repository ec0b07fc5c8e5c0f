"""
API Router for the reference catalog.

The catalog itself is read-only; the prices endpoint joins each variant with
its active price override.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query

from pricebook.core.auth import get_current_user_email
from pricebook.services.catalog import Catalog, ProductType, get_catalog
from pricebook.services.pricing_engine import PricingEngine, get_pricing_engine
from pricebook.schemas.catalog import (
    ProductTypePricesResponse,
    ProductTypeResponse,
    ProductVariantResponse,
    ServiceTypeResponse,
    VariantPriceResponse,
)
from pricebook.schemas.price_override import PriceOverrideResponse

router = APIRouter(prefix="/catalog", tags=["Catalog"])

PRICE_NOT_CONFIGURED = "Price not configured"


def format_price(amount: float, currency: str) -> str:
    """Whole units with a space as thousands separator, e.g. '85 714 FCFA'."""
    return f"{int(round(amount)):,} {currency}".replace(",", " ")


def _product_type_response(product_type: ProductType) -> ProductTypeResponse:
    return ProductTypeResponse(
        id=product_type.id,
        name=product_type.name,
        description=product_type.description,
        service_type_id=product_type.service_type_id,
        category=product_type.category,
        variants=[
            ProductVariantResponse(
                id=v.id,
                name=v.name,
                description=v.description,
                specifications=list(v.specifications),
                is_default=v.is_default,
            )
            for v in product_type.variants
        ],
    )


def _get_product_type_or_404(catalog: Catalog, product_type_id: str) -> ProductType:
    product_type = catalog.get_product_type(product_type_id)
    if product_type is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Product type '{product_type_id}' not found"
        )
    return product_type


@router.get("/service-types", response_model=List[ServiceTypeResponse])
def get_service_types(catalog: Catalog = Depends(get_catalog)):
    """List the service types with their default and minimum margins."""
    return [ServiceTypeResponse.model_validate(s) for s in catalog.service_types]


@router.get("/product-types", response_model=List[ProductTypeResponse])
def get_product_types(
    service_type_id: Optional[str] = Query(None, description="Filter by service type"),
    search: Optional[str] = Query(None, description="Search in product type and variant names"),
    catalog: Catalog = Depends(get_catalog)
):
    """List product types, optionally filtered by service type and name."""
    return [
        _product_type_response(pt)
        for pt in catalog.filter_product_types(service_type_id, search)
    ]


@router.get("/product-types/{product_type_id}", response_model=ProductTypeResponse)
def get_product_type(product_type_id: str, catalog: Catalog = Depends(get_catalog)):
    """Get one product type with its variants."""
    return _product_type_response(_get_product_type_or_404(catalog, product_type_id))


@router.get("/product-types/{product_type_id}/prices", response_model=ProductTypePricesResponse)
def get_product_type_prices(
    product_type_id: str,
    engine: PricingEngine = Depends(get_pricing_engine),
    _: str = Depends(get_current_user_email)
):
    """
    Every variant of a product type with its current price.

    Variants that were never priced show "Price not configured".
    """
    product_type = _get_product_type_or_404(engine.catalog, product_type_id)
    product_type_response = _product_type_response(product_type)

    variants = []
    for variant in product_type_response.variants:
        record = engine.get_active_price(product_type.id, variant.id)
        variants.append(VariantPriceResponse(
            variant=variant,
            configured=record is not None,
            display_price=format_price(record.unit_price, record.currency) if record else PRICE_NOT_CONFIGURED,
            active_price=PriceOverrideResponse.model_validate(record) if record else None,
        ))

    return ProductTypePricesResponse(product_type=product_type_response, variants=variants)
