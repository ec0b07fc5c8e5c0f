"""
Sourced Product model.
Catalog items bought abroad, priced from a foreign sourcing price and an exchange rate.
"""

from sqlalchemy import Column, Integer, String, Numeric, Float, Boolean, DateTime
from sqlalchemy.sql import func
from pricebook.core.database import Base


class SourcedProduct(Base):
    """Sourced Product model - cost derived from foreign price, optional auto pricing"""
    __tablename__ = "sourced_products"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    product_type_id = Column(String(100), nullable=True, index=True)
    variant_id = Column(String(100), nullable=True)
    sourcing_platform = Column(String(50), nullable=True)  # 1688, alibaba, aliexpress, ...
    foreign_price = Column(Numeric(14, 2), nullable=True)  # Price in foreign_currency
    foreign_currency = Column(String(10), nullable=False, default="CNY")
    exchange_rate = Column(Float, nullable=True)  # Local units per foreign unit
    base_cost = Column(Float, nullable=True)  # Local currency, not rounded
    margin = Column(Float, nullable=False)
    price = Column(Numeric(14, 2), nullable=True)  # Sale price, local currency
    currency = Column(String(10), nullable=False)
    auto_price = Column(Boolean, default=True, nullable=False)
    weight_kg = Column(Float, nullable=True)
    volume_m3 = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<SourcedProduct(id={self.id}, name='{self.name}', price={self.price})>"
