"""Comparison Engine - is a new observation the best known price?"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Sequence

from pricecheck.services.price_calculations import to_decimal

INFINITY = Decimal("Infinity")


@dataclass
class ComparisonResult:
    """Best-price verdict with the reference it was judged against"""
    is_best: bool
    basis: str  # 'total_price' or 'unit_price'
    message: str
    reference_price: Optional[Decimal] = None
    reference_store: Optional[str] = None
    price_difference: Optional[Decimal] = None


def record_field(record: Any, name: str, default: Any = None) -> Any:
    """Read a field from a record object or a plain mapping."""
    if isinstance(record, dict):
        return record.get(name, default)
    return getattr(record, name, default)


def _price_or_infinity(record: Any, name: str) -> Decimal:
    """Numeric field value; malformed or missing values rank as infinitely expensive."""
    value = to_decimal(record_field(record, name))
    return INFINITY if value is None else value


def _finite(value: Decimal) -> Optional[Decimal]:
    return value if value.is_finite() else None


def _has_discount(record: Any) -> bool:
    note = record_field(record, "discount_note")
    return isinstance(note, str) and note != ""


def _lowest(records: Iterable[Any], name: str) -> Any:
    """First record with the minimum value; later records only win when strictly lower."""
    best = None
    best_value = INFINITY
    for record in records:
        value = _price_or_infinity(record, name)
        if best is None or value < best_value:
            best, best_value = record, value
    return best


class ComparisonEngine:
    """
    Deterministic best-price comparison over an already-fetched history.

    Two rules coexist:
    - Headline (total price): a new low wins outright; an exact tie only
      counts when the new record documents a discount.
    - Unit price (OCR review queue): ties count as best, and records with
      no unit price rank as infinitely expensive.

    Neither raises on malformed history. Every call is a pure function of
    its inputs.
    """

    FIRST_RECORD_MESSAGE = "first record"

    def compare(self, candidate: Any, history: Sequence[Any]) -> ComparisonResult:
        """Headline comparison on total_price."""
        candidate_price = _price_or_infinity(candidate, "total_price")

        if not history:
            return ComparisonResult(
                is_best=True,
                basis="total_price",
                message=self.FIRST_RECORD_MESSAGE,
                reference_price=_finite(candidate_price),
                reference_store=record_field(candidate, "store_name"),
                price_difference=Decimal("0") if candidate_price.is_finite() else None,
            )

        reference = _lowest(history, "total_price")
        reference_price = _price_or_infinity(reference, "total_price")
        reference_store = record_field(reference, "store_name")

        if not candidate_price.is_finite():
            # A candidate without a usable price never beats anything
            is_best = False
        else:
            is_current_best = candidate_price <= reference_price
            is_best = is_current_best and (
                candidate_price < reference_price
                or (candidate_price == reference_price and _has_discount(candidate))
            )

        return ComparisonResult(
            is_best=is_best,
            basis="total_price",
            message=self._headline_message(is_best, reference_price, reference_store),
            reference_price=_finite(reference_price),
            reference_store=reference_store,
            price_difference=self._difference(candidate_price, reference_price),
        )

    def compare_unit_price(
        self,
        candidate: Any,
        history: Sequence[Any],
        pending: Sequence[Any] = (),
    ) -> ComparisonResult:
        """
        Unit-price comparison for the review queue.

        Pending (unsaved) cards for the same product identity are merged
        into the history, so two queued scans are compared with each other
        as well as with what is already saved.
        """
        pool = list(history) + self._pending_peers(candidate, pending)
        candidate_unit = _price_or_infinity(candidate, "unit_price")

        if not pool:
            return ComparisonResult(
                is_best=True,
                basis="unit_price",
                message=self.FIRST_RECORD_MESSAGE,
                reference_price=_finite(candidate_unit),
                reference_store=record_field(candidate, "store_name"),
                price_difference=Decimal("0") if candidate_unit.is_finite() else None,
            )

        reference = _lowest(pool, "unit_price")
        reference_unit = _price_or_infinity(reference, "unit_price")
        reference_store = record_field(reference, "store_name")

        is_best = candidate_unit.is_finite() and candidate_unit <= reference_unit

        if is_best:
            message = "Lowest unit price on record"
        elif not candidate_unit.is_finite():
            message = "No unit price available for comparison"
        else:
            message = (
                f"A lower unit price exists: {reference_unit} at {reference_store}"
            )

        return ComparisonResult(
            is_best=is_best,
            basis="unit_price",
            message=message,
            reference_price=_finite(reference_unit),
            reference_store=reference_store,
            price_difference=self._difference(candidate_unit, reference_unit),
        )

    def _pending_peers(self, candidate: Any, pending: Sequence[Any]) -> List[Any]:
        """Other queued cards sharing the candidate's identity."""
        identity = record_field(candidate, "product_identity")
        own_id = record_field(candidate, "card_id")
        return [
            card for card in pending
            if record_field(card, "product_identity") == identity
            and (own_id is None or record_field(card, "card_id") != own_id)
        ]

    def _headline_message(
        self, is_best: bool, reference_price: Decimal, reference_store: Optional[str]
    ) -> str:
        if is_best:
            return "Lowest price on record (or tied with a discount)"
        if not reference_price.is_finite():
            return "Not the lowest price. No valid historical price to compare with"
        return f"Not the lowest price. Historical low is {reference_price} at {reference_store}"

    def _difference(self, candidate: Decimal, reference: Decimal) -> Optional[Decimal]:
        if candidate.is_finite() and reference.is_finite():
            return candidate - reference
        return None
