"""
Stateless pricing calculations.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from pricebook.core.auth import get_current_user_email
from pricebook.services.pricing import (
    MarginThresholds,
    assess_margin,
    derive_local_cost,
    derive_margin_from_prices,
    derive_sale_price,
    validate_cost,
)
from pricebook.schemas.pricing import DerivePriceRequest, DerivePriceResponse

router = APIRouter(prefix="/pricing", tags=["Pricing"])


@router.post("/derive", response_model=DerivePriceResponse)
def derive_price(request: DerivePriceRequest, _: str = Depends(get_current_user_email)):
    """
    Compute the missing side of a price without saving anything.

    - cost from `cost_price`, or from `foreign_price` x `exchange_rate`
      (default rate when unset or not positive)
    - with `margin`: the sale price that realises it
    - with `unit_price`: the margin it realises
    - with neither: only the cost
    """
    if request.cost_price is not None:
        cost = validate_cost(request.cost_price)
    elif request.foreign_price is not None:
        cost = derive_local_cost(request.foreign_price, request.exchange_rate)
    else:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Provide cost_price or foreign_price"
        )

    if request.margin is not None and request.unit_price is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Provide at most one of margin or unit_price"
        )

    if request.margin is not None:
        unit_price = derive_sale_price(cost, request.margin)
        margin = float(request.margin)
    elif request.unit_price is not None:
        unit_price = request.unit_price
        margin = derive_margin_from_prices(unit_price, cost)
    else:
        return DerivePriceResponse(cost_price=cost)

    assessment = assess_margin(margin, MarginThresholds.from_settings())
    return DerivePriceResponse(
        cost_price=cost,
        unit_price=unit_price,
        margin=margin,
        warning=assessment.warning,
        requires_confirmation=assessment.requires_confirmation,
        message=assessment.message,
    )
