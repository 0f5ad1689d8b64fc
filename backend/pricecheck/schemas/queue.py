"""Pending review queue schemas"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from pricecheck.schemas.observation import ComparisonResponse
from pricecheck.services.price_calculations import UnitKind


class PendingCardResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    card_id: str
    created_at: datetime
    product_identity: int
    barcode: Optional[str] = None
    product_name: str
    store_name: str
    total_price: Decimal
    original_price: Optional[Decimal] = None
    special_price: Optional[Decimal] = None
    quantity: Optional[Decimal] = None
    unit_kind: UnitKind
    unit_price: Optional[Decimal] = None
    discount_note: str = ""


class QueueStatsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total: int
    oldest: Optional[datetime] = None
    newest: Optional[datetime] = None


class QueueListResponse(BaseModel):
    cards: List[PendingCardResponse]
    stats: QueueStatsResponse


class CardComparisonResponse(BaseModel):
    """Unit-price verdict for a queued card"""
    card: PendingCardResponse
    unit_price_display: str
    comparison: ComparisonResponse


class CommitRequest(BaseModel):
    store_name: Optional[str] = Field(None, min_length=1, max_length=100, description="Override the extracted store")
