"""
Pricing errors.

Validation errors are raised before any store mutation so a rejected
single-item operation never leaves a partial write behind. The API layer
turns them into JSON responses through a single exception handler.

Usage:
    from pricebook.core.exceptions import InvalidMarginError

    if not 0 <= margin <= 99:
        raise InvalidMarginError(margin)
"""

from typing import Optional, Any, Dict


class PricebookError(Exception):
    """Base exception for all pricing errors"""

    status_code = 400

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "detail": self.message,
            "code": self.code,
            "details": self.details
        }


class InvalidMarginError(PricebookError):
    """Margin outside the accepted [0, 99] range"""

    status_code = 422

    def __init__(self, margin: Any):
        super().__init__(
            f"Margin must be a number between 0 and 99, got {margin!r}",
            code="INVALID_MARGIN",
            details={"margin": margin if isinstance(margin, (int, float)) else str(margin)}
        )


class InvalidCostError(PricebookError):
    """Negative or non-numeric cost price"""

    status_code = 422

    def __init__(self, cost: Any, field: str = "cost_price"):
        super().__init__(
            f"{field} must be a non-negative number, got {cost!r}",
            code="INVALID_COST",
            details={"field": field, "value": cost if isinstance(cost, (int, float)) else str(cost)}
        )


class UnknownProductError(PricebookError):
    """Product type / variant pair not present in the catalog"""

    status_code = 404

    def __init__(self, product_type_id: str, variant_id: Optional[str] = None):
        target = f"{product_type_id}/{variant_id}" if variant_id else product_type_id
        super().__init__(
            f"Unknown catalog entry '{target}'",
            code="NOT_FOUND",
            details={"product_type_id": product_type_id, "variant_id": variant_id}
        )


class MarginConfirmationRequired(PricebookError):
    """Margin below the confirmation threshold and the caller did not confirm"""

    status_code = 409

    def __init__(self, margin: float, threshold: float):
        super().__init__(
            f"Very low margin ({margin:.1f}%). Resubmit with confirmation to save.",
            code="MARGIN_CONFIRMATION_REQUIRED",
            details={"margin": round(margin, 2), "threshold": threshold}
        )


class OverrideConflictError(PricebookError):
    """Active record changed between read and write"""

    status_code = 409

    def __init__(self, product_type_id: str, variant_id: str, expected_active_id: Optional[str]):
        super().__init__(
            f"Concurrent price update detected for {product_type_id}/{variant_id}",
            code="OVERRIDE_CONFLICT",
            details={
                "product_type_id": product_type_id,
                "variant_id": variant_id,
                "expected_active_id": expected_active_id,
            }
        )
