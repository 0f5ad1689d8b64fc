"""Price observation schemas - records, edits and comparison responses"""
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional, Literal

from pydantic import BaseModel, ConfigDict, Field

from pricecheck.services.price_calculations import UnitKind


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PriceObservation(BaseModel):
    """One recorded sighting of a product's price (fixed shape, optional fields)"""
    model_config = ConfigDict(from_attributes=True)

    observation_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    product_identity: int
    product_name: str = ""
    store_name: str

    # total_price is the effective price paid; unit_price is derived from it
    total_price: Optional[Decimal] = None
    original_price: Optional[Decimal] = None
    special_price: Optional[Decimal] = None
    quantity: Optional[Decimal] = None
    unit_kind: UnitKind = UnitKind.PIECES
    unit_price: Optional[Decimal] = None
    discount_note: str = ""

    # Manual review tag set by the anomaly detector
    is_flagged: bool = False
    flag_reason: Optional[str] = None

    timestamp: datetime = Field(default_factory=utcnow)
    recorded_by: str = "anonymous"


class Product(BaseModel):
    """Lazily created product master record"""
    model_config = ConfigDict(from_attributes=True)

    product_identity: int
    barcode: Optional[str] = None
    product_name: str = ""
    created_at: datetime = Field(default_factory=utcnow)


class ObservationCreate(BaseModel):
    """Manual or AI-assisted price entry"""
    barcode: Optional[str] = Field(None, max_length=64)
    product_name: str = Field("", max_length=200)
    store_name: str = Field(..., min_length=1, max_length=100)

    price: Optional[Decimal] = Field(None, description="Listed price when no original/special split is known")
    original_price: Optional[Decimal] = None
    special_price: Optional[Decimal] = None

    quantity: Optional[Decimal] = Field(None, description="Total grams, milliliters or pieces in the package")
    unit_kind: UnitKind = UnitKind.PIECES
    discount_note: str = Field("", max_length=500)
    recorded_by: str = Field("anonymous", max_length=64)


class ObservationUpdate(BaseModel):
    """Manual edit of a saved record; unset fields are left unchanged"""
    product_name: Optional[str] = Field(None, max_length=200)
    store_name: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[Decimal] = None
    original_price: Optional[Decimal] = None
    special_price: Optional[Decimal] = None
    quantity: Optional[Decimal] = None
    unit_kind: Optional[UnitKind] = None
    discount_note: Optional[str] = Field(None, max_length=500)


class ComparisonResponse(BaseModel):
    """Best-price verdict for a new observation"""
    is_best: bool
    basis: Literal['total_price', 'unit_price']
    reference_price: Optional[Decimal] = None
    reference_store: Optional[str] = None
    price_difference: Optional[Decimal] = None
    message: str


class AnomalyResponse(BaseModel):
    is_anomalous: bool
    confidence: float
    reason: str
    deviation: Optional[float] = None
    average_price: Optional[float] = None
    data_points: int = 0


class AnomalyFlagResponse(BaseModel):
    record_id: str
    flagged_at: datetime
    status: str
    review_required: bool


class RecordResponse(BaseModel):
    """Saved record with its comparison verdict"""
    observation: PriceObservation
    unit_price_display: str
    unit_price_status: str = Field(..., description="'ok' or the reason no unit price is available")
    comparison: ComparisonResponse
    anomaly: AnomalyResponse
    flag: Optional[AnomalyFlagResponse] = None


class RecordListResponse(BaseModel):
    records: List[PriceObservation]
    count: int


class BulkDeleteRequest(BaseModel):
    observation_ids: List[str] = Field(..., min_length=1, max_length=500)


class BulkDeleteResponse(BaseModel):
    deleted: int


class ValidationRequest(BaseModel):
    confirmed: bool
    has_original_photo: bool = False


class ValidationResponse(BaseModel):
    validated: bool
    validated_at: datetime
    has_original_photo: bool
    validation_method: str


class IdentityResponse(BaseModel):
    product_identity: int
    source: Literal['barcode', 'name_store']


class PriceSummaryResponse(BaseModel):
    """Unit price statistics across a product's history"""
    product_identity: int
    record_count: int
    lowest_unit_price: Optional[Decimal] = None
    average_unit_price: Optional[Decimal] = None
    highest_unit_price: Optional[Decimal] = None
    latest: Optional[PriceObservation] = None
