"""Observation Service - save price records and compare them with history"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Optional

from pricecheck.core.config import settings
from pricecheck.repositories.base import PriceRecordRepository
from pricecheck.schemas.observation import (
    ObservationCreate,
    ObservationUpdate,
    PriceObservation,
    Product,
)
from pricecheck.services.anomaly_detection import (
    AnomalyFlag,
    AnomalyReport,
    detect_anomaly,
    flag_anomalous_price,
)
from pricecheck.services.comparison_engine import ComparisonEngine, ComparisonResult
from pricecheck.services.pending_queue import PendingCard, PendingQueue
from pricecheck.services.price_calculations import (
    UnitPriceOutcome,
    calculate_unit_price,
    resolve_effective_price,
    to_decimal,
    unit_price_result,
)
from pricecheck.services.product_identity import compute_identity

logger = logging.getLogger(__name__)


class InvalidPriceError(ValueError):
    """Entry carries no usable price"""


class PendingCardNotFoundError(LookupError):
    def __init__(self, card_id: str):
        super().__init__(card_id)
        self.card_id = card_id


@dataclass
class RecordOutcome:
    """Saved record together with everything computed while saving it"""
    observation: PriceObservation
    comparison: ComparisonResult
    anomaly: AnomalyReport
    unit_price_outcome: UnitPriceOutcome
    flag: Optional[AnomalyFlag] = None


@dataclass
class PriceSummary:
    product_identity: int
    record_count: int
    lowest_unit_price: Optional[Decimal] = None
    average_unit_price: Optional[Decimal] = None
    highest_unit_price: Optional[Decimal] = None
    latest: Optional[PriceObservation] = None


def effective_total(price, original_price, special_price) -> Decimal:
    """
    Price paid for an entry.

    The special/original split wins when present; otherwise the listed
    price. Zero means no valid price was given.
    """
    total = resolve_effective_price(original_price, special_price)
    if not total:
        total = to_decimal(price) or Decimal("0")
    return total


class ObservationService:
    """
    Service for creating and managing price observations.

    Owns the read-compare-write cycle: history is read before the new
    record is written, so a record is never compared against itself.
    Derived fields (identity, total price, unit price) are always
    recomputed from their inputs here.
    """

    def __init__(
        self,
        repository: PriceRecordRepository,
        pending_queue: Optional[PendingQueue] = None,
        engine: Optional[ComparisonEngine] = None,
    ):
        self.repository = repository
        self.pending_queue = pending_queue if pending_queue is not None else PendingQueue()
        self.engine = engine or ComparisonEngine()

    async def record_price(self, draft: ObservationCreate) -> RecordOutcome:
        """
        Save a new price entry and judge it against the product's history.

        Anomalous prices are saved anyway, tagged for manual review.
        """
        total_price = effective_total(draft.price, draft.original_price, draft.special_price)
        if not total_price:
            raise InvalidPriceError("A valid price is required")

        identity = compute_identity(draft.barcode, draft.product_name, draft.store_name)
        outcome = unit_price_result(total_price, draft.quantity, draft.unit_kind)

        observation = PriceObservation(
            product_identity=identity,
            product_name=draft.product_name,
            store_name=draft.store_name,
            total_price=total_price,
            original_price=draft.original_price,
            special_price=draft.special_price,
            quantity=draft.quantity,
            unit_kind=draft.unit_kind,
            unit_price=outcome.value if outcome.ok else None,
            discount_note=draft.discount_note,
            recorded_by=draft.recorded_by,
        )

        history = await self.repository.list_for_product(identity)
        comparison = self.engine.compare(observation, history)
        anomaly = detect_anomaly(
            total_price,
            [record.total_price for record in history],
            deviation_threshold=settings.ANOMALY_DEVIATION_THRESHOLD,
            min_confidence=settings.ANOMALY_MIN_CONFIDENCE,
        )

        flag = None
        if anomaly.is_anomalous:
            flag = flag_anomalous_price(observation.observation_id, anomaly)
            observation.is_flagged = True
            observation.flag_reason = anomaly.reason
            logger.warning(
                "Price %s for product %d flagged as %s (avg %.2f, confidence %.2f)",
                total_price, identity, anomaly.reason, anomaly.average_price, anomaly.confidence,
            )

        await self._ensure_product(identity, draft)
        await self.repository.save(observation)

        logger.info(
            "Recorded %s at %s for product %d (best=%s)",
            total_price, draft.store_name, identity, comparison.is_best,
        )

        return RecordOutcome(
            observation=observation,
            comparison=comparison,
            anomaly=anomaly,
            unit_price_outcome=outcome,
            flag=flag,
        )

    async def edit_observation(
        self, observation_id: str, changes: ObservationUpdate
    ) -> PriceObservation:
        """
        Apply a manual edit, then recompute total and unit price.

        The product identity is left alone: an edit corrects a record, it
        does not move it to another product.
        """
        observation = await self.repository.get(observation_id)
        updates = changes.model_dump(exclude_unset=True)

        price = updates.pop("price", None)
        for name, value in updates.items():
            if value is None and name in ("product_name", "store_name", "unit_kind", "discount_note"):
                continue
            setattr(observation, name, value)

        if price is not None and "original_price" not in updates and "special_price" not in updates:
            # A plain price edit replaces the original/special split
            observation.original_price = None
            observation.special_price = None
            total_price = to_decimal(price) or Decimal("0")
        else:
            total_price = effective_total(
                price if price is not None else observation.total_price,
                observation.original_price,
                observation.special_price,
            )

        if not total_price:
            raise InvalidPriceError("A valid price is required")

        observation.total_price = total_price
        observation.unit_price = calculate_unit_price(
            total_price, observation.quantity, observation.unit_kind
        )

        await self.repository.save(observation)
        logger.info("Edited record %s", observation_id)
        return observation

    async def delete_observation(self, observation_id: str) -> None:
        await self.repository.delete(observation_id)
        logger.info("Deleted record %s", observation_id)

    async def delete_observations(self, observation_ids: Iterable[str]) -> int:
        deleted = await self.repository.delete_many(observation_ids)
        logger.info("Bulk deleted %d records", deleted)
        return deleted

    async def product_history(self, product_identity: int) -> List[PriceObservation]:
        """Observations for a product, newest first (later saves win timestamp ties)."""
        records = await self.repository.list_for_product(product_identity)
        return sorted(reversed(records), key=lambda r: r.timestamp, reverse=True)

    async def price_summary(self, product_identity: int) -> PriceSummary:
        """Lowest, average and highest unit price over records that have one."""
        records = await self.product_history(product_identity)
        unit_prices = [
            value for value in (to_decimal(r.unit_price) for r in records)
            if value is not None
        ]

        summary = PriceSummary(
            product_identity=product_identity,
            record_count=len(records),
            latest=records[0] if records else None,
        )
        if unit_prices:
            summary.lowest_unit_price = min(unit_prices)
            summary.highest_unit_price = max(unit_prices)
            summary.average_unit_price = sum(unit_prices) / len(unit_prices)
        return summary

    async def record_count(self) -> int:
        return await self.repository.count()

    def enqueue(self, draft: ObservationCreate) -> PendingCard:
        """Hold an extracted entry for review without saving it."""
        total_price = effective_total(draft.price, draft.original_price, draft.special_price)
        card = PendingCard(
            product_identity=compute_identity(draft.barcode, draft.product_name, draft.store_name),
            product_name=draft.product_name,
            store_name=draft.store_name,
            total_price=total_price,
            unit_kind=draft.unit_kind,
            barcode=draft.barcode,
            original_price=draft.original_price,
            special_price=draft.special_price,
            quantity=draft.quantity,
            unit_price=calculate_unit_price(total_price, draft.quantity, draft.unit_kind),
            discount_note=draft.discount_note,
        )
        self.pending_queue.add(card)
        logger.info("Queued card %s for product %d", card.card_id, card.product_identity)
        return card

    def _pending_card(self, card_id: str) -> PendingCard:
        card = self.pending_queue.get(card_id)
        if card is None:
            raise PendingCardNotFoundError(card_id)
        return card

    async def compare_pending(self, card_id: str) -> ComparisonResult:
        """Unit-price verdict for a queued card against saved and queued peers."""
        card = self._pending_card(card_id)
        history = await self.repository.list_for_product(card.product_identity)
        return self.engine.compare_unit_price(card, history, self.pending_queue.list())

    async def commit_pending(
        self, card_id: str, store_name: Optional[str] = None
    ) -> RecordOutcome:
        """Save a queued card as a record and drop it from the queue."""
        card = self._pending_card(card_id)
        draft = ObservationCreate(
            barcode=card.barcode,
            product_name=card.product_name,
            store_name=store_name or card.store_name,
            price=card.total_price,
            original_price=card.original_price,
            special_price=card.special_price,
            quantity=card.quantity,
            unit_kind=card.unit_kind,
            discount_note=card.discount_note,
        )
        outcome = await self.record_price(draft)
        self.pending_queue.remove(card_id)
        return outcome

    def discard_pending(self, card_id: str) -> PendingCard:
        card = self.pending_queue.remove(card_id)
        if card is None:
            raise PendingCardNotFoundError(card_id)
        return card

    async def _ensure_product(self, identity: int, draft: ObservationCreate):
        """Create the product master record the first time an identity is seen."""
        if await self.repository.get_product(identity) is not None:
            return
        await self.repository.save_product(Product(
            product_identity=identity,
            barcode=draft.barcode,
            product_name=draft.product_name,
        ))
