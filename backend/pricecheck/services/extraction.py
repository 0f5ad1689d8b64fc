"""Extraction service - turn vision model output into an observation draft"""
import logging
from typing import Any, Dict

from pydantic import ValidationError

from pricecheck.core.config import settings
from pricecheck.schemas.extraction import ExtractionPayload
from pricecheck.schemas.observation import ObservationCreate
from pricecheck.services.price_calculations import UnitKind, parse_unit_kind

logger = logging.getLogger(__name__)


def parse_extraction(raw: Any) -> ExtractionPayload:
    """
    Parse the model's JSON object.

    Field-level problems are absorbed by the payload schema; a payload
    that is not an object at all yields an empty extraction.
    """
    if not isinstance(raw, dict):
        logger.warning("Extraction payload is not an object: %s", type(raw).__name__)
        return ExtractionPayload()

    try:
        payload = ExtractionPayload.model_validate(raw)
    except ValidationError as e:
        logger.warning("Discarding malformed extraction payload: %s", e)
        return ExtractionPayload()

    logger.info("Extraction received: %s", extraction_summary(payload))
    return payload


def draft_from_extraction(payload: ExtractionPayload) -> ObservationCreate:
    """
    Map extracted fields onto a price entry.

    listedPrice/totalCapacity/baseUnit become price/quantity/unit_kind.
    Unknown units fall back to pieces and a missing store to the AI
    placeholder store.
    """
    unit_kind = parse_unit_kind(payload.base_unit) or UnitKind.PIECES
    store_name = payload.store_name or settings.AI_DEFAULT_STORE_NAME

    return ObservationCreate(
        barcode=payload.scanned_barcode[:64] or None,
        product_name=payload.product_name[:200],
        store_name=store_name[:100],
        price=payload.listed_price,
        original_price=payload.original_price,
        special_price=payload.special_price,
        quantity=payload.total_capacity,
        unit_kind=unit_kind,
        discount_note=payload.discount_details[:500],
    )


def extraction_summary(payload: ExtractionPayload) -> Dict[str, Any]:
    """Compact dict for logging what the model returned."""
    return {
        "barcode": payload.scanned_barcode or None,
        "product": payload.product_name or None,
        "price": str(payload.listed_price) if payload.listed_price is not None else None,
        "store": payload.store_name or None,
        "discount": payload.discount_details or None,
    }
