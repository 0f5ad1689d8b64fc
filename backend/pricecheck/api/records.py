"""Price record endpoints - save, compare, edit and delete observations"""
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from pricecheck.api.deps import get_observation_service, invalid_price, record_not_found
from pricecheck.core.rate_limit import limiter, WRITE_LIMIT
from pricecheck.repositories.base import RecordNotFoundError
from pricecheck.schemas.observation import (
    AnomalyFlagResponse,
    AnomalyResponse,
    BulkDeleteRequest,
    BulkDeleteResponse,
    ComparisonResponse,
    ObservationCreate,
    ObservationUpdate,
    PriceObservation,
    RecordListResponse,
    RecordResponse,
    ValidationRequest,
    ValidationResponse,
)
from pricecheck.services.anomaly_detection import validate_anomalous_price
from pricecheck.services.observation_service import (
    InvalidPriceError,
    ObservationService,
    RecordOutcome,
)
from pricecheck.services.price_calculations import format_unit_price

router = APIRouter()


def to_record_response(outcome: RecordOutcome) -> RecordResponse:
    unit_outcome = outcome.unit_price_outcome
    flag = None
    if outcome.flag:
        flag = AnomalyFlagResponse(
            record_id=outcome.flag.record_id,
            flagged_at=outcome.flag.flagged_at,
            status=outcome.flag.status,
            review_required=outcome.flag.review_required,
        )

    return RecordResponse(
        observation=outcome.observation,
        unit_price_display=format_unit_price(outcome.observation.unit_price),
        unit_price_status="ok" if unit_outcome.ok else unit_outcome.reason,
        comparison=ComparisonResponse.model_validate(asdict(outcome.comparison)),
        anomaly=AnomalyResponse.model_validate(asdict(outcome.anomaly)),
        flag=flag,
    )


@router.post("/", response_model=RecordResponse, status_code=201)
@limiter.limit(WRITE_LIMIT)
async def create_record(
    request: Request,
    data: ObservationCreate,
    service: ObservationService = Depends(get_observation_service),
):
    """
    Save a price observation and compare it with the product's history.

    The comparison is on total price; an exact tie only counts as best
    when this record carries a discount note.
    """
    try:
        outcome = await service.record_price(data)
    except InvalidPriceError as e:
        raise invalid_price(e)

    return to_record_response(outcome)


@router.get("/", response_model=RecordListResponse)
async def list_records(
    product_identity: Optional[int] = Query(None, ge=0, description="Limit to one product"),
    service: ObservationService = Depends(get_observation_service),
):
    """List records newest first, optionally for a single product."""
    if product_identity is not None:
        records = await service.product_history(product_identity)
    else:
        records = await service.repository.list_all()
        records = sorted(reversed(records), key=lambda r: r.timestamp, reverse=True)

    return RecordListResponse(records=records, count=len(records))


@router.get("/count")
async def count_records(service: ObservationService = Depends(get_observation_service)):
    """Record total, used to detect concurrent edits before committing a batch edit."""
    return {"count": await service.record_count()}


@router.get("/{record_id}", response_model=PriceObservation)
async def get_record(
    record_id: str,
    service: ObservationService = Depends(get_observation_service),
):
    try:
        return await service.repository.get(record_id)
    except RecordNotFoundError as e:
        raise record_not_found(e)


@router.patch("/{record_id}", response_model=PriceObservation)
async def update_record(
    record_id: str,
    data: ObservationUpdate,
    service: ObservationService = Depends(get_observation_service),
):
    """Edit a record; total and unit price are recomputed from the edited inputs."""
    try:
        return await service.edit_observation(record_id, data)
    except RecordNotFoundError as e:
        raise record_not_found(e)
    except InvalidPriceError as e:
        raise invalid_price(e)


@router.delete("/{record_id}", status_code=204)
async def delete_record(
    record_id: str,
    service: ObservationService = Depends(get_observation_service),
):
    try:
        await service.delete_observation(record_id)
    except RecordNotFoundError as e:
        raise record_not_found(e)


@router.post("/bulk-delete", response_model=BulkDeleteResponse)
async def bulk_delete_records(
    data: BulkDeleteRequest,
    service: ObservationService = Depends(get_observation_service),
):
    deleted = await service.delete_observations(data.observation_ids)
    return BulkDeleteResponse(deleted=deleted)


@router.post("/{record_id}/validation", response_model=ValidationResponse)
async def validate_record(
    record_id: str,
    data: ValidationRequest,
    service: ObservationService = Depends(get_observation_service),
):
    """Record a manual confirmation of a flagged price. Nothing is enforced."""
    try:
        await service.repository.get(record_id)
    except RecordNotFoundError as e:
        raise record_not_found(e)

    validation = validate_anomalous_price(data.has_original_photo, data.confirmed)
    return ValidationResponse.model_validate(asdict(validation))
