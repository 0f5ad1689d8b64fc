"""Review queue endpoints - hold AI extractions, compare by unit price, then commit"""
from dataclasses import asdict
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Request

from pricecheck.api.deps import card_not_found, get_observation_service, invalid_price
from pricecheck.api.records import to_record_response
from pricecheck.core.rate_limit import limiter, WRITE_LIMIT
from pricecheck.schemas.observation import ComparisonResponse, RecordResponse
from pricecheck.schemas.queue import (
    CardComparisonResponse,
    CommitRequest,
    PendingCardResponse,
    QueueListResponse,
    QueueStatsResponse,
)
from pricecheck.services.extraction import draft_from_extraction, parse_extraction
from pricecheck.services.observation_service import (
    InvalidPriceError,
    ObservationService,
    PendingCardNotFoundError,
)
from pricecheck.services.price_calculations import format_unit_price

router = APIRouter()


@router.post("/", response_model=PendingCardResponse, status_code=201)
@limiter.limit(WRITE_LIMIT)
async def enqueue_extraction(
    request: Request,
    payload: Dict[str, Any] = Body(..., description="JSON object returned by the vision model"),
    service: ObservationService = Depends(get_observation_service),
):
    """
    Queue a vision model extraction for review.

    Malformed fields are treated as absent; the card is held even when it
    has no usable price so the user can fix it before committing.
    """
    extraction = parse_extraction(payload)
    card = service.enqueue(draft_from_extraction(extraction))
    return PendingCardResponse.model_validate(card)


@router.get("/", response_model=QueueListResponse)
async def list_queue(service: ObservationService = Depends(get_observation_service)):
    queue = service.pending_queue
    return QueueListResponse(
        cards=[PendingCardResponse.model_validate(card) for card in queue.list()],
        stats=QueueStatsResponse.model_validate(queue.stats()),
    )


@router.get("/{card_id}/comparison", response_model=CardComparisonResponse)
async def compare_card(
    card_id: str,
    service: ObservationService = Depends(get_observation_service),
):
    """Compare a queued card's unit price with saved records and other queued cards."""
    try:
        comparison = await service.compare_pending(card_id)
    except PendingCardNotFoundError as e:
        raise card_not_found(e)

    card = service.pending_queue.get(card_id)
    return CardComparisonResponse(
        card=PendingCardResponse.model_validate(card),
        unit_price_display=format_unit_price(card.unit_price),
        comparison=ComparisonResponse.model_validate(asdict(comparison)),
    )


@router.post("/{card_id}/commit", response_model=RecordResponse, status_code=201)
@limiter.limit(WRITE_LIMIT)
async def commit_card(
    request: Request,
    card_id: str,
    data: Optional[CommitRequest] = None,
    service: ObservationService = Depends(get_observation_service),
):
    """Save a queued card as a price record and remove it from the queue."""
    store_name = data.store_name if data else None
    try:
        outcome = await service.commit_pending(card_id, store_name=store_name)
    except PendingCardNotFoundError as e:
        raise card_not_found(e)
    except InvalidPriceError as e:
        raise invalid_price(e)

    return to_record_response(outcome)


@router.delete("/{card_id}", status_code=204)
async def discard_card(
    card_id: str,
    service: ObservationService = Depends(get_observation_service),
):
    try:
        service.discard_pending(card_id)
    except PendingCardNotFoundError as e:
        raise card_not_found(e)
