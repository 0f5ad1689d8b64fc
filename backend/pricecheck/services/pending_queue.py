"""Pending queue - extracted scans waiting for review before they are saved"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional

from pricecheck.services.price_calculations import UnitKind


@dataclass
class PendingCard:
    """An unsaved observation held for review"""
    product_identity: int
    product_name: str
    store_name: str
    total_price: Decimal
    unit_kind: UnitKind = UnitKind.PIECES
    barcode: Optional[str] = None
    original_price: Optional[Decimal] = None
    special_price: Optional[Decimal] = None
    quantity: Optional[Decimal] = None
    unit_price: Optional[Decimal] = None
    discount_note: str = ""
    card_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class QueueStats:
    total: int
    oldest: Optional[datetime] = None
    newest: Optional[datetime] = None


class PendingQueue:
    """
    In-memory holding area for scans that have not been saved yet.

    Cards are kept in insertion order. The unit-price comparison reads
    peers from here so queued scans of the same product see each other.
    """

    def __init__(self):
        self._cards: Dict[str, PendingCard] = {}

    def __len__(self) -> int:
        return len(self._cards)

    def add(self, card: PendingCard) -> PendingCard:
        self._cards[card.card_id] = card
        return card

    def get(self, card_id: str) -> Optional[PendingCard]:
        return self._cards.get(card_id)

    def remove(self, card_id: str) -> Optional[PendingCard]:
        return self._cards.pop(card_id, None)

    def list(self) -> List[PendingCard]:
        return sorted(self._cards.values(), key=lambda card: card.created_at)

    def for_identity(self, product_identity: int) -> List[PendingCard]:
        return [card for card in self.list() if card.product_identity == product_identity]

    def stats(self) -> QueueStats:
        if not self._cards:
            return QueueStats(total=0)

        timestamps = [card.created_at for card in self._cards.values()]
        return QueueStats(
            total=len(timestamps),
            oldest=min(timestamps),
            newest=max(timestamps),
        )

    def clear(self):
        self._cards.clear()
