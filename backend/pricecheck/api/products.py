"""Product endpoints - identity lookup and price summaries"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from pricecheck.api.deps import get_observation_service
from pricecheck.schemas.observation import IdentityResponse, PriceSummaryResponse
from pricecheck.services.observation_service import ObservationService
from pricecheck.services.product_identity import compute_identity

router = APIRouter()


@router.get("/identity", response_model=IdentityResponse)
async def product_identity(
    barcode: Optional[str] = Query(None, max_length=64),
    product_name: Optional[str] = Query(None, max_length=200),
    store_name: Optional[str] = Query(None, max_length=100),
):
    """Identity for a barcode, or for a name + store pair when there is no barcode."""
    return IdentityResponse(
        product_identity=compute_identity(barcode, product_name, store_name),
        source="barcode" if barcode else "name_store",
    )


@router.get("/{product_identity}/summary", response_model=PriceSummaryResponse)
async def product_summary(
    product_identity: int,
    service: ObservationService = Depends(get_observation_service),
):
    """Lowest, average and highest unit price plus the latest record."""
    summary = await service.price_summary(product_identity)
    return PriceSummaryResponse(
        product_identity=summary.product_identity,
        record_count=summary.record_count,
        lowest_unit_price=summary.lowest_unit_price,
        average_unit_price=summary.average_unit_price,
        highest_unit_price=summary.highest_unit_price,
        latest=summary.latest,
    )
