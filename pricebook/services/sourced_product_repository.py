"""
Repository layer for Sourced Product operations.
Handles database queries for the sourced_products table and keeps the
derived cost and sale price in step with the sourcing fields.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from fastapi import HTTPException, status

from pricebook.core.config import settings
from pricebook.models.sourced_product import SourcedProduct
from pricebook.schemas.sourced_product import SourcedProductCreate, SourcedProductUpdate
from pricebook.services.pricing import derive_local_cost, derive_sale_price, resolve_margin, round_price
from pricebook.services.shipping import compute_shipping_options

logger = logging.getLogger(__name__)

# Fields whose change invalidates the derived cost or sale price
PRICING_FIELDS = {"foreign_price", "exchange_rate", "base_cost", "margin", "auto_price"}


def apply_derived_pricing(product: SourcedProduct) -> None:
    """Recompute base_cost from the sourcing price, then the sale price in auto mode."""
    if product.foreign_price is not None:
        product.base_cost = derive_local_cost(float(product.foreign_price), product.exchange_rate)

    if product.auto_price and product.base_cost:
        product.price = derive_sale_price(product.base_cost, product.margin)


def _normalize_rate(rate: Optional[float]) -> Optional[float]:
    return rate if rate is not None and rate > 0 else None


class SourcedProductRepository:
    """Repository for Sourced Product operations"""

    @staticmethod
    def create(db: Session, data: SourcedProductCreate) -> SourcedProduct:
        """Create a sourced product with derived cost and price"""
        values = data.model_dump()
        values["margin"] = resolve_margin(values.get("margin"))
        values["exchange_rate"] = _normalize_rate(values.get("exchange_rate"))

        db_product = SourcedProduct(**values, currency=settings.DEFAULT_CURRENCY)
        apply_derived_pricing(db_product)

        try:
            db.add(db_product)
            db.commit()
            db.refresh(db_product)
        except IntegrityError as e:
            db.rollback()
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Database integrity error: {str(e.orig)}"
            )

        logger.info("Created sourced product %s (cost=%s, price=%s)", db_product.id, db_product.base_cost, db_product.price)
        return db_product

    @staticmethod
    def get_by_id(db: Session, product_id: int) -> Optional[SourcedProduct]:
        """Get sourced product by ID"""
        return db.query(SourcedProduct).filter(SourcedProduct.id == product_id).first()

    @staticmethod
    def get_all(
        db: Session,
        skip: int = 0,
        limit: int = 100,
        search: Optional[str] = None,
        product_type_id: Optional[str] = None,
    ) -> Tuple[List[SourcedProduct], int]:
        """Get sourced products with optional filters and pagination"""
        query = db.query(SourcedProduct)

        if product_type_id:
            query = query.filter(SourcedProduct.product_type_id == product_type_id)

        if search:
            search_pattern = f"%{search}%"
            query = query.filter(
                or_(
                    SourcedProduct.name.ilike(search_pattern),
                    SourcedProduct.sourcing_platform.ilike(search_pattern)
                )
            )

        total = query.count()
        products = query.order_by(SourcedProduct.name).offset(skip).limit(limit).all()
        return products, total

    @staticmethod
    def update(db: Session, product_id: int, data: SourcedProductUpdate) -> Optional[SourcedProduct]:
        """
        Update provided fields only.

        A change to any sourcing or margin field recomputes the cost and,
        in auto-price mode, the sale price.
        """
        db_product = SourcedProductRepository.get_by_id(db, product_id)

        if not db_product:
            return None

        update_data = data.model_dump(exclude_unset=True)
        if "margin" in update_data:
            update_data["margin"] = resolve_margin(update_data["margin"])
        if "exchange_rate" in update_data:
            update_data["exchange_rate"] = _normalize_rate(update_data["exchange_rate"])

        for field, value in update_data.items():
            setattr(db_product, field, value)

        if PRICING_FIELDS & update_data.keys():
            apply_derived_pricing(db_product)

        try:
            db.commit()
            db.refresh(db_product)
            return db_product
        except IntegrityError as e:
            db.rollback()
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Database integrity error: {str(e.orig)}"
            )

    @staticmethod
    def delete(db: Session, product_id: int) -> bool:
        """Delete a sourced product by ID"""
        db_product = SourcedProductRepository.get_by_id(db, product_id)

        if not db_product:
            return False

        db.delete(db_product)
        db.commit()
        return True

    @staticmethod
    def pricing_summary(product: SourcedProduct) -> dict:
        """Sale price plus every shipping option the product can use"""
        sale_price = round_price(float(product.price)) if product.price is not None else None
        return {
            "product_id": product.id,
            "base_cost": product.base_cost,
            "margin": product.margin,
            "sale_price": sale_price,
            "currency": product.currency,
            "shipping_options": compute_shipping_options(
                sale_price, product.weight_kg, product.volume_m3, product.currency
            ),
        }
