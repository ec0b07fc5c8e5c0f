"""
Repository layer for Price Override operations.
Handles all database queries and writes for the price_overrides table.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import and_, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pricebook.core.exceptions import OverrideConflictError
from pricebook.models.price_override import PriceOverride
from pricebook.schemas.price_override import PriceOverrideFilter
from pricebook.services.override_store import PriceOverrideRecord

logger = logging.getLogger(__name__)


def to_record(row: PriceOverride) -> PriceOverrideRecord:
    return PriceOverrideRecord(
        id=row.id,
        product_type_id=row.product_type_id,
        variant_id=row.variant_id,
        unit_price=float(row.unit_price),
        cost_price=float(row.cost_price),
        margin=float(row.margin),
        currency=row.currency,
        valid_from=row.valid_from,
        last_updated=row.last_updated,
        updated_by=row.updated_by,
        is_active=row.is_active,
        valid_until=row.valid_until,
    )


class SqlOverrideRepository:
    """Repository for Price Override operations"""

    def __init__(self, db: Session):
        self.db = db

    def _pair_filter(self, product_type_id: str, variant_id: str):
        return and_(
            PriceOverride.product_type_id == product_type_id,
            PriceOverride.variant_id == variant_id,
        )

    def list_all(self) -> List[PriceOverrideRecord]:
        rows = self.db.query(PriceOverride).order_by(PriceOverride.last_updated).all()
        return [to_record(row) for row in rows]

    def query_by_pair(self, product_type_id: str, variant_id: str) -> List[PriceOverrideRecord]:
        rows = (
            self.db.query(PriceOverride)
            .filter(self._pair_filter(product_type_id, variant_id))
            .order_by(PriceOverride.last_updated)
            .all()
        )
        return [to_record(row) for row in rows]

    def append(self, record: PriceOverrideRecord, expected_active_id: Optional[str]) -> PriceOverrideRecord:
        """
        Conditional write: deactivate the expected active row, then insert.

        Both statements run in one transaction. If the expected row is no
        longer the active one (or the unique active-pair index rejects the
        insert) the transaction is rolled back and OverrideConflictError is
        raised for the caller to retry.
        """
        pair = self._pair_filter(record.product_type_id, record.variant_id)
        active = PriceOverride.is_active.is_(True)

        try:
            if expected_active_id is None:
                touched = self.db.execute(
                    update(PriceOverride).where(pair, active).values(is_active=False)
                ).rowcount
                conflict = touched != 0
            else:
                touched = self.db.execute(
                    update(PriceOverride)
                    .where(pair, active, PriceOverride.id == expected_active_id)
                    .values(is_active=False)
                ).rowcount
                conflict = touched != 1
                if not conflict:
                    # Repair any extra active rows left by an earlier race
                    self.db.execute(update(PriceOverride).where(pair, active).values(is_active=False))

            if conflict:
                self.db.rollback()
                raise OverrideConflictError(record.product_type_id, record.variant_id, expected_active_id)

            self.db.add(PriceOverride(
                id=record.id,
                product_type_id=record.product_type_id,
                variant_id=record.variant_id,
                unit_price=record.unit_price,
                cost_price=record.cost_price,
                margin=record.margin,
                currency=record.currency,
                valid_from=record.valid_from,
                valid_until=record.valid_until,
                is_active=True,
                last_updated=record.last_updated,
                updated_by=record.updated_by,
            ))
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise OverrideConflictError(record.product_type_id, record.variant_id, expected_active_id)

        logger.debug("Stored price override %s for %s/%s", record.id, record.product_type_id, record.variant_id)
        return record

    # ============================================================================
    # LISTING
    # ============================================================================

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        filters: Optional[PriceOverrideFilter] = None
    ) -> Tuple[List[PriceOverrideRecord], int]:
        """Get override records with optional filters and pagination"""
        query = self.db.query(PriceOverride)

        if filters:
            if filters.product_type_id:
                query = query.filter(PriceOverride.product_type_id == filters.product_type_id)

            if filters.variant_id:
                query = query.filter(PriceOverride.variant_id == filters.variant_id)

            if filters.active_only:
                query = query.filter(PriceOverride.is_active.is_(True))

            if filters.updated_by:
                query = query.filter(PriceOverride.updated_by.ilike(f"%{filters.updated_by}%"))

            if filters.max_margin is not None:
                query = query.filter(PriceOverride.margin <= filters.max_margin)

            if filters.search:
                search_pattern = f"%{filters.search}%"
                query = query.filter(
                    or_(
                        PriceOverride.product_type_id.ilike(search_pattern),
                        PriceOverride.variant_id.ilike(search_pattern)
                    )
                )

        total = query.count()
        rows = query.order_by(PriceOverride.last_updated.desc()).offset(skip).limit(limit).all()

        return [to_record(row) for row in rows], total
