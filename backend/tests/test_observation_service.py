import asyncio
from decimal import Decimal

import pytest

from pricecheck.repositories.base import RecordNotFoundError
from pricecheck.schemas.observation import ObservationCreate, ObservationUpdate
from pricecheck.services.observation_service import (
    InvalidPriceError,
    PendingCardNotFoundError,
)
from pricecheck.services.product_identity import compute_identity


def entry(**overrides):
    data = {
        "barcode": "4710000000001",
        "product_name": "Family Milk",
        "store_name": "PX Mart",
        "price": Decimal("59"),
        "quantity": Decimal("1860"),
        "unit_kind": "ml",
    }
    data.update(overrides)
    return ObservationCreate(**data)


def test_first_record_is_best_and_creates_product(service, repository):
    outcome = asyncio.run(service.record_price(entry()))

    assert outcome.comparison.is_best
    assert outcome.comparison.message == "first record"
    assert outcome.observation.product_identity == compute_identity("4710000000001")
    assert outcome.observation.unit_price == (Decimal("59") / Decimal("1860")) * 100
    assert outcome.unit_price_outcome.ok

    product = asyncio.run(repository.get_product(outcome.observation.product_identity))
    assert product is not None
    assert product.barcode == "4710000000001"


def test_history_excludes_the_new_record(service):
    asyncio.run(service.record_price(entry(price=Decimal("50"))))
    outcome = asyncio.run(service.record_price(entry(price=Decimal("50"))))

    # Plain tie with the earlier record, so not best
    assert not outcome.comparison.is_best
    assert outcome.comparison.reference_price == Decimal("50")


def test_discounted_tie_is_best(service):
    asyncio.run(service.record_price(entry(price=Decimal("50"))))
    outcome = asyncio.run(service.record_price(entry(price=Decimal("50"), discount_note="BOGO")))
    assert outcome.comparison.is_best


def test_special_price_is_the_total(service):
    outcome = asyncio.run(service.record_price(entry(
        price=None, original_price=Decimal("59"), special_price=Decimal("39"),
    )))
    assert outcome.observation.total_price == Decimal("39")
    assert outcome.observation.unit_price == (Decimal("39") / Decimal("1860")) * 100


def test_missing_quantity_keeps_status(service):
    outcome = asyncio.run(service.record_price(entry(quantity=None)))
    assert outcome.observation.unit_price is None
    assert outcome.unit_price_outcome.reason == "invalid_quantity"


def test_no_price_is_rejected(service, repository):
    with pytest.raises(InvalidPriceError):
        asyncio.run(service.record_price(entry(price=None)))
    assert asyncio.run(repository.count()) == 0


def test_name_and_store_identity_without_barcode(service):
    outcome = asyncio.run(service.record_price(entry(barcode=None)))
    assert outcome.observation.product_identity == compute_identity(None, "Family Milk", "PX Mart")


def test_anomalous_price_is_flagged_but_saved(service, repository):
    for _ in range(10):
        asyncio.run(service.record_price(entry(price=Decimal("10"))))

    outcome = asyncio.run(service.record_price(entry(price=Decimal("100"))))
    assert outcome.anomaly.is_anomalous
    assert outcome.flag is not None
    assert outcome.observation.is_flagged
    assert outcome.observation.flag_reason == "significantly_higher"

    saved = asyncio.run(repository.get(outcome.observation.observation_id))
    assert saved.is_flagged


def test_edit_recomputes_unit_price(service):
    outcome = asyncio.run(service.record_price(entry()))
    record_id = outcome.observation.observation_id

    edited = asyncio.run(service.edit_observation(record_id, ObservationUpdate(
        price=Decimal("80"), quantity=Decimal("2000"), discount_note="members only",
    )))
    assert edited.total_price == Decimal("80")
    assert edited.unit_price == (Decimal("80") / Decimal("2000")) * 100
    assert edited.discount_note == "members only"

    edited = asyncio.run(service.edit_observation(record_id, ObservationUpdate(unit_kind="pcs", quantity=Decimal("4"))))
    assert edited.unit_price == Decimal("20")


def test_edit_special_price_is_authoritative(service):
    outcome = asyncio.run(service.record_price(entry()))
    edited = asyncio.run(service.edit_observation(
        outcome.observation.observation_id,
        ObservationUpdate(original_price=Decimal("59"), special_price=Decimal("45")),
    ))
    assert edited.total_price == Decimal("45")


def test_edit_unknown_record(service):
    with pytest.raises(RecordNotFoundError):
        asyncio.run(service.edit_observation("missing", ObservationUpdate(price=Decimal("1"))))


def test_delete_keeps_product(service, repository):
    outcome = asyncio.run(service.record_price(entry()))
    asyncio.run(service.delete_observation(outcome.observation.observation_id))

    assert asyncio.run(repository.count()) == 0
    assert asyncio.run(repository.get_product(outcome.observation.product_identity)) is not None


def test_bulk_delete_skips_unknown_ids(service):
    first = asyncio.run(service.record_price(entry()))
    second = asyncio.run(service.record_price(entry(price=Decimal("45"))))
    deleted = asyncio.run(service.delete_observations([
        first.observation.observation_id, second.observation.observation_id, "missing",
    ]))
    assert deleted == 2


def test_history_newest_first_and_summary(service):
    asyncio.run(service.record_price(entry(price=Decimal("60"), quantity=Decimal("1000"))))
    asyncio.run(service.record_price(entry(price=Decimal("40"), quantity=Decimal("1000"))))
    asyncio.run(service.record_price(entry(price=Decimal("50"), quantity=None)))

    identity = compute_identity("4710000000001")
    history = asyncio.run(service.product_history(identity))
    assert [r.total_price for r in history] == [Decimal("50"), Decimal("40"), Decimal("60")]

    summary = asyncio.run(service.price_summary(identity))
    assert summary.record_count == 3
    assert summary.lowest_unit_price == Decimal("4")
    assert summary.highest_unit_price == Decimal("6")
    assert summary.average_unit_price == Decimal("5")
    assert summary.latest.total_price == Decimal("50")


def test_pending_cards_compare_with_each_other(service, pending_queue):
    first = service.enqueue(entry(price=Decimal("50"), quantity=Decimal("1000")))
    second = service.enqueue(entry(price=Decimal("40"), quantity=Decimal("1000")))

    assert len(pending_queue) == 2
    assert not asyncio.run(service.compare_pending(first.card_id)).is_best
    assert asyncio.run(service.compare_pending(second.card_id)).is_best


def test_pending_card_compares_with_saved_history(service):
    asyncio.run(service.record_price(entry(price=Decimal("30"), quantity=Decimal("1000"))))
    card = service.enqueue(entry(price=Decimal("40"), quantity=Decimal("1000")))
    result = asyncio.run(service.compare_pending(card.card_id))
    assert not result.is_best
    assert result.reference_price == Decimal("3")


def test_commit_pending_saves_and_dequeues(service, pending_queue, repository):
    card = service.enqueue(entry())
    outcome = asyncio.run(service.commit_pending(card.card_id, store_name="Costco"))

    assert outcome.observation.store_name == "Costco"
    assert pending_queue.get(card.card_id) is None
    assert asyncio.run(repository.count()) == 1


def test_unknown_pending_card(service):
    with pytest.raises(PendingCardNotFoundError):
        asyncio.run(service.compare_pending("missing"))
    with pytest.raises(PendingCardNotFoundError):
        service.discard_pending("missing")
