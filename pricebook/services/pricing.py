"""
Price derivation and currency conversion.

Margin is gross margin, expressed as a percentage of the sale price:
    margin = (sale - cost) / sale * 100
so the sale price is backed out of the cost rather than marked up from it:
    sale = cost / (1 - margin / 100)

Everything in this module is a pure function; persistence lives in
override_store / price_override_repository.
"""

import math
from dataclasses import dataclass, replace
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from pricebook.core.config import settings
from pricebook.core.exceptions import InvalidCostError, InvalidMarginError

MIN_MARGIN = 0
MAX_MARGIN = 99

EDITABLE_FIELDS = ("unit_price", "cost_price", "margin")


def _is_number(value) -> bool:
    return (
        isinstance(value, (int, float, Decimal))
        and not isinstance(value, bool)
        and math.isfinite(float(value))
    )


def round_price(value: float) -> int:
    """Round half away from zero to a whole currency unit."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def validate_margin(margin) -> float:
    if not _is_number(margin) or not MIN_MARGIN <= float(margin) <= MAX_MARGIN:
        raise InvalidMarginError(margin)
    return float(margin)


def validate_cost(cost, field: str = "cost_price") -> float:
    if not _is_number(cost) or float(cost) < 0:
        raise InvalidCostError(cost, field=field)
    return float(cost)


def resolve_margin(margin: Optional[float]) -> float:
    """Return the given margin, or the configured default when unset."""
    if margin is None:
        return float(settings.DEFAULT_MARGIN)
    return validate_margin(margin)


def derive_sale_price(cost_price, margin_percent) -> int:
    """
    Sale price that realises ``margin_percent`` gross margin on ``cost_price``.

    >>> derive_sale_price(60000, 30)
    85714
    """
    cost = validate_cost(cost_price)
    margin = validate_margin(margin_percent)
    return round_price(cost / (1 - margin / 100))


def derive_margin_from_prices(sale_price, cost_price) -> float:
    """Realised gross margin; 0 when the sale price is not positive."""
    cost = validate_cost(cost_price)
    if _is_number(sale_price) and float(sale_price) <= 0:
        return 0.0
    sale = validate_cost(sale_price, field="unit_price")
    return (sale - cost) / sale * 100


def derive_local_cost(foreign_price, exchange_rate=None, default_rate: Optional[float] = None) -> float:
    """
    Local-currency cost of a foreign sourcing price. Not rounded.

    A missing, zero or negative rate falls back to ``default_rate`` (or the
    configured DEFAULT_EXCHANGE_RATE).
    """
    price = validate_cost(foreign_price, field="foreign_price")
    if not _is_number(exchange_rate) or float(exchange_rate) <= 0:
        exchange_rate = default_rate if default_rate is not None else settings.DEFAULT_EXCHANGE_RATE
    return price * float(exchange_rate)


# ============================================================================
# Edit surface
# ============================================================================

@dataclass(frozen=True)
class PriceEdit:
    """The three linked fields of a price editing form"""
    unit_price: float = 0
    cost_price: float = 0
    margin: float = 0


def reconcile_edit(edit: PriceEdit, field: str, value) -> PriceEdit:
    """
    Apply a change to one field and recompute the dependent one.

    Changing cost or sale price recomputes the margin; changing the margin
    recomputes the sale price with cost held fixed. Cost is never derived.
    """
    if field not in EDITABLE_FIELDS:
        raise ValueError(f"Unknown price field '{field}'")

    if field == "margin":
        margin = validate_margin(value)
        updated = replace(edit, margin=margin)
        if updated.cost_price > 0:
            updated = replace(updated, unit_price=derive_sale_price(updated.cost_price, margin))
        return updated

    amount = validate_cost(value, field=field)
    updated = replace(edit, **{field: amount})
    if updated.unit_price > 0:
        updated = replace(updated, margin=derive_margin_from_prices(updated.unit_price, updated.cost_price))
    return updated


# ============================================================================
# Low-margin policy
# ============================================================================

@dataclass(frozen=True)
class MarginThresholds:
    warning: float = 15.0
    confirmation: float = 10.0

    @classmethod
    def from_settings(cls, config=None) -> "MarginThresholds":
        config = config or settings
        return cls(
            warning=config.LOW_MARGIN_WARNING_THRESHOLD,
            confirmation=config.LOW_MARGIN_CONFIRM_THRESHOLD,
        )


@dataclass(frozen=True)
class MarginAssessment:
    margin: float
    warning: bool
    requires_confirmation: bool

    @property
    def message(self) -> Optional[str]:
        if self.requires_confirmation:
            return f"Very low margin ({self.margin:.1f}%). Confirmation required."
        if self.warning:
            return f"Low margin ({self.margin:.1f}%)."
        return None


def assess_margin(margin: float, thresholds: Optional[MarginThresholds] = None) -> MarginAssessment:
    """Advisory gate: never rejects, only flags."""
    thresholds = thresholds or MarginThresholds.from_settings()
    return MarginAssessment(
        margin=margin,
        warning=margin < thresholds.warning,
        requires_confirmation=margin < thresholds.confirmation,
    )
