"""Price Observation model (one row per recorded sighting)"""
from decimal import Decimal

from sqlalchemy import Column, Integer, BigInteger, String, Boolean, DateTime
from sqlalchemy.sql import func
from sqlalchemy.types import TypeDecorator
import uuid

from pricecheck.core.database import Base


class ExactDecimal(TypeDecorator):
    """Decimal stored as its string form so every digit round-trips"""
    impl = String
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(Decimal(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(value)


class PriceObservation(Base):
    __tablename__ = "price_observations"

    id = Column(Integer, primary_key=True, index=True)
    observation_id = Column(String(36), unique=True, nullable=False, default=lambda: str(uuid.uuid4()))

    # Back-reference to products.product_identity; not a foreign key since
    # observations and products are written independently
    product_identity = Column(BigInteger, nullable=False, index=True)
    product_name = Column(String(200), nullable=False, default="")
    store_name = Column(String(100), nullable=False)

    # Prices as paid and as labelled
    total_price = Column(ExactDecimal)
    original_price = Column(ExactDecimal)
    special_price = Column(ExactDecimal)

    # Package size and the derived per-100 / per-piece price
    quantity = Column(ExactDecimal)
    unit_kind = Column(String(3), nullable=False, default="pcs")
    unit_price = Column(ExactDecimal)

    discount_note = Column(String(500), nullable=False, default="")

    # Manual review tag
    is_flagged = Column(Boolean, default=False, index=True)
    flag_reason = Column(String(50))

    timestamp = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    recorded_by = Column(String(64), nullable=False, default="anonymous")
