"""Shared endpoint dependencies"""
from typing import AsyncIterator

from fastapi import Depends, HTTPException

from pricecheck.core.config import settings
from pricecheck.core.database import AsyncSessionLocal
from pricecheck.repositories.base import PriceRecordRepository, RecordNotFoundError
from pricecheck.repositories.memory import InMemoryPriceRecordRepository
from pricecheck.repositories.sql import SqlPriceRecordRepository
from pricecheck.services.observation_service import ObservationService, PendingCardNotFoundError
from pricecheck.services.pending_queue import PendingQueue

# Process-wide state: the review queue is never persisted, and the memory
# backend lives as long as the process
pending_queue = PendingQueue()
memory_repository = InMemoryPriceRecordRepository()


async def get_repository() -> AsyncIterator[PriceRecordRepository]:
    """Repository for the configured backend; a session is only opened for SQL."""
    if settings.STORAGE_BACKEND == "memory":
        yield memory_repository
        return

    async with AsyncSessionLocal() as db:
        yield SqlPriceRecordRepository(db)


def get_pending_queue() -> PendingQueue:
    return pending_queue


async def get_observation_service(
    repository: PriceRecordRepository = Depends(get_repository),
    queue: PendingQueue = Depends(get_pending_queue),
) -> ObservationService:
    return ObservationService(repository, pending_queue=queue)


def record_not_found(exc: RecordNotFoundError) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={
            "error": "record_not_found",
            "message": f"No price record with id {exc.observation_id}",
        },
    )


def card_not_found(exc: PendingCardNotFoundError) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={
            "error": "card_not_found",
            "message": f"No pending card with id {exc.card_id}",
        },
    )


def invalid_price(exc: Exception) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail={
            "error": "invalid_price",
            "message": str(exc) or "A valid price is required",
        },
    )
