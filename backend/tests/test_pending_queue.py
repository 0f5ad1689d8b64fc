from datetime import datetime, timedelta, timezone
from decimal import Decimal

from pricecheck.services.pending_queue import PendingCard, PendingQueue


def card(identity=1, price="10", **kwargs):
    return PendingCard(
        product_identity=identity,
        product_name="Oolong Tea",
        store_name="7-Eleven",
        total_price=Decimal(price),
        **kwargs,
    )


def test_add_get_remove():
    queue = PendingQueue()
    held = queue.add(card())

    assert len(queue) == 1
    assert queue.get(held.card_id) is held
    assert queue.remove(held.card_id) is held
    assert queue.get(held.card_id) is None
    assert queue.remove(held.card_id) is None


def test_list_oldest_first():
    now = datetime.now(timezone.utc)
    queue = PendingQueue()
    newer = queue.add(card(created_at=now))
    older = queue.add(card(created_at=now - timedelta(minutes=5)))

    assert queue.list() == [older, newer]


def test_for_identity():
    queue = PendingQueue()
    tea = queue.add(card(identity=1))
    queue.add(card(identity=2))
    assert queue.for_identity(1) == [tea]


def test_stats():
    queue = PendingQueue()
    assert queue.stats().total == 0
    assert queue.stats().oldest is None

    now = datetime.now(timezone.utc)
    queue.add(card(created_at=now))
    queue.add(card(created_at=now - timedelta(hours=1)))

    stats = queue.stats()
    assert stats.total == 2
    assert stats.oldest == now - timedelta(hours=1)
    assert stats.newest == now


def test_clear():
    queue = PendingQueue()
    queue.add(card())
    queue.clear()
    assert len(queue) == 0
