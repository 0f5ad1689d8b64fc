"""Store model"""
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func

from pricecheck.core.database import Base


class Store(Base):
    __tablename__ = "stores"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)
    sort = Column(Integer, nullable=False, default=500)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
