"""
API routers for the application.
"""

from fastapi import APIRouter
from pricebook.routers import admin, catalog, price_override, pricing, sourced_product

api_router = APIRouter()

# Include routers
api_router.include_router(admin.router)
api_router.include_router(catalog.router)  # Reference catalog and per-variant prices
api_router.include_router(price_override.router)  # Price history and edits
api_router.include_router(sourced_product.router)
api_router.include_router(pricing.router)  # Stateless calculations

__all__ = ["api_router", "admin", "catalog", "price_override", "pricing", "sourced_product"]
