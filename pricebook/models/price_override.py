"""
Price Override model.
Stores every price ever saved for a catalog (product type, variant) pair.
"""

from sqlalchemy import Column, String, Numeric, Float, Boolean, DateTime, Index, text
from pricebook.core.database import Base


class PriceOverride(Base):
    """Price Override model - append-only price history, one active row per pair"""
    __tablename__ = "price_overrides"

    id = Column(String(36), primary_key=True, index=True)
    product_type_id = Column(String(100), nullable=False, index=True)  # e.g. nvr_systems
    variant_id = Column(String(100), nullable=False, index=True)  # e.g. nvr_8ch
    unit_price = Column(Numeric(14, 2), nullable=False)  # Sale price
    cost_price = Column(Numeric(14, 2), nullable=False)  # Supplier cost, local currency
    margin = Column(Float, nullable=False)  # Gross margin %, derived
    currency = Column(String(10), nullable=False)
    valid_from = Column(DateTime(timezone=True), nullable=False)
    valid_until = Column(DateTime(timezone=True), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    last_updated = Column(DateTime(timezone=True), nullable=False)
    updated_by = Column(String(255), nullable=False)

    # At most one active row per pair
    __table_args__ = (
        Index(
            "uq_price_override_active_pair",
            "product_type_id",
            "variant_id",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active"),
        ),
    )

    def __repr__(self):
        return (
            f"<PriceOverride(id='{self.id}', pair='{self.product_type_id}/{self.variant_id}', "
            f"unit_price={self.unit_price}, is_active={self.is_active})>"
        )
