"""
Database models for the application.
"""

from pricebook.core.database import Base
from pricebook.models.admin import Admin
from pricebook.models.price_override import PriceOverride
from pricebook.models.sourced_product import SourcedProduct

__all__ = [
    "Base",
    "Admin",
    "PriceOverride",
    "SourcedProduct",
]
