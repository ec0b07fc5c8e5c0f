"""
Shipping options for sourced products.

Air methods bill per kilogram, sea freight per cubic metre; each method has a
minimum charge. A method is offered only when the product has the measure it
bills on.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from pricebook.services.pricing import round_price


@dataclass(frozen=True)
class ShippingRate:
    id: str
    label: str
    description: str
    duration_days: int
    billing: str  # per_kg | per_cubic_meter
    rate: float
    minimum_charge: float = 0


BASE_SHIPPING_RATES: Dict[str, ShippingRate] = {
    "air_15": ShippingRate(
        id="air_15",
        label="Air freight 15 days",
        description="Economy air freight from China in 10-15 working days",
        duration_days=15,
        billing="per_kg",
        rate=7500,
        minimum_charge=18000,
    ),
    "air_express": ShippingRate(
        id="air_express",
        label="Air express 3 days",
        description="Door-to-door express delivery in about 72h",
        duration_days=3,
        billing="per_kg",
        rate=10500,
        minimum_charge=25000,
    ),
    "sea_freight": ShippingRate(
        id="sea_freight",
        label="Sea freight 60 days",
        description="Consolidated container sea freight",
        duration_days=60,
        billing="per_cubic_meter",
        rate=145000,
        minimum_charge=145000,
    ),
}


def shipping_cost(method: ShippingRate, weight_kg: Optional[float], volume_m3: Optional[float]) -> Optional[int]:
    """Billed cost for one method, or None when the billing measure is missing."""
    measure = weight_kg if method.billing == "per_kg" else volume_m3
    if measure is None or measure <= 0:
        return None
    return round_price(max(measure * method.rate, method.minimum_charge))


def compute_shipping_options(
    sale_price: Optional[int],
    weight_kg: Optional[float],
    volume_m3: Optional[float],
    currency: str,
) -> List[dict]:
    options = []
    for method in BASE_SHIPPING_RATES.values():
        cost = shipping_cost(method, weight_kg, volume_m3)
        if cost is None:
            continue
        options.append({
            "id": method.id,
            "label": method.label,
            "description": method.description,
            "duration_days": method.duration_days,
            "cost": cost,
            "total": sale_price + cost if sale_price is not None else cost,
            "currency": currency,
        })
    return options
