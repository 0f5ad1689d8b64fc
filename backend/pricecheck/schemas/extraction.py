"""Vision model extraction payload

The model is asked for a fixed JSON object but regularly returns blanks,
strings where numbers belong, or drops keys entirely. Every field is
coerced leniently: anything malformed becomes absent instead of failing
the whole payload.
"""
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pricecheck.services.price_calculations import to_decimal


class ExtractionPayload(BaseModel):
    """Structured fields extracted from a price tag or receipt photo"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    scanned_barcode: str = Field("", alias="scannedBarcode")
    product_name: str = Field("", alias="productName")
    original_price: Optional[Decimal] = Field(None, alias="originalPrice")
    special_price: Optional[Decimal] = Field(None, alias="specialPrice")
    listed_price: Optional[Decimal] = Field(None, alias="listedPrice")
    total_capacity: Optional[Decimal] = Field(None, alias="totalCapacity")
    base_unit: Optional[str] = Field(None, alias="baseUnit")
    store_name: str = Field("", alias="storeName")
    discount_details: str = Field("", alias="discountDetails")

    @field_validator(
        "scanned_barcode", "product_name", "store_name", "discount_details",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        if value is None or isinstance(value, (dict, list, bool)):
            return ""
        return str(value).strip()

    @field_validator(
        "original_price", "special_price", "listed_price", "total_capacity",
        mode="before",
    )
    @classmethod
    def _coerce_number(cls, value: Any) -> Optional[Decimal]:
        return to_decimal(value)

    @field_validator("base_unit", mode="before")
    @classmethod
    def _coerce_unit(cls, value: Any) -> Optional[str]:
        if not isinstance(value, str) or not value.strip():
            return None
        return value.strip()
