"""Product model"""
from sqlalchemy import Column, Integer, BigInteger, String, DateTime
from sqlalchemy.sql import func

from pricecheck.core.database import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    product_identity = Column(BigInteger, unique=True, nullable=False, index=True)
    barcode = Column(String(64), index=True)
    product_name = Column(String(200), nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
