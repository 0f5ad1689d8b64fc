"""Seed service for initial data"""
import logging

from sqlalchemy import select

from pricecheck.core.database import AsyncSessionLocal
from pricecheck.models.store import Store

logger = logging.getLogger(__name__)

# Common chains offered before a user has added any store of their own
DEFAULT_STORES = [
    ("PX Mart", 1),
    ("PX Mart Plus", 2),
    ("Carrefour", 3),
    ("7-Eleven", 4),
    ("FamilyMart", 5),
    ("Hi-Life", 6),
    ("Costco", 7),
    ("Watsons", 8),
    ("Cosmed", 9),
    ("Simple Mart", 10),
    ("RT-Mart", 11),
    ("Other", 999),
]


async def seed_data():
    """Seed the default store list, and fix sort order of stores already present"""
    async with AsyncSessionLocal() as db:
        result = await db.execute(select(Store))
        existing = {store.name: store for store in result.scalars().all()}

        added = 0
        resorted = 0
        for name, sort in DEFAULT_STORES:
            store = existing.get(name)
            if store is None:
                db.add(Store(name=name, sort=sort))
                added += 1
            elif store.sort != sort:
                store.sort = sort
                resorted += 1

        if added or resorted:
            await db.commit()
            logger.info("Seeded stores: %d added, %d re-sorted", added, resorted)
