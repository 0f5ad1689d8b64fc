"""SQLAlchemy repository - the document store behind price records"""
import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pricecheck.models.observation import PriceObservation as PriceObservationRow
from pricecheck.models.product import Product as ProductRow
from pricecheck.models.store import Store as StoreRow
from pricecheck.repositories.base import PriceRecordRepository, RecordNotFoundError
from pricecheck.schemas.observation import PriceObservation, Product
from pricecheck.schemas.store import Store

logger = logging.getLogger(__name__)

# Columns copied verbatim between the schema and the row
_OBSERVATION_FIELDS = (
    "observation_id",
    "product_identity",
    "product_name",
    "store_name",
    "total_price",
    "original_price",
    "special_price",
    "quantity",
    "unit_price",
    "discount_note",
    "is_flagged",
    "flag_reason",
    "timestamp",
    "recorded_by",
)


def _aware(dt: Optional[datetime]) -> Optional[datetime]:
    """SQLite drops tzinfo; stored timestamps are always UTC."""
    if dt is not None and dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def _to_schema(row: PriceObservationRow) -> PriceObservation:
    data = {name: getattr(row, name) for name in _OBSERVATION_FIELDS}
    data["unit_kind"] = row.unit_kind
    data["timestamp"] = _aware(row.timestamp)
    data["is_flagged"] = bool(row.is_flagged)
    return PriceObservation.model_validate(data)


def _apply(row: PriceObservationRow, observation: PriceObservation):
    for name in _OBSERVATION_FIELDS:
        setattr(row, name, getattr(observation, name))
    row.unit_kind = observation.unit_kind.value


class SqlPriceRecordRepository(PriceRecordRepository):
    """Repository bound to one request-scoped AsyncSession"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for_product(self, product_identity: int) -> List[PriceObservation]:
        result = await self.db.execute(
            select(PriceObservationRow)
            .where(PriceObservationRow.product_identity == product_identity)
            .order_by(PriceObservationRow.id)
        )
        return [_to_schema(row) for row in result.scalars().all()]

    async def list_all(self) -> List[PriceObservation]:
        result = await self.db.execute(
            select(PriceObservationRow).order_by(PriceObservationRow.id)
        )
        return [_to_schema(row) for row in result.scalars().all()]

    async def _get_row(self, observation_id: str) -> PriceObservationRow:
        result = await self.db.execute(
            select(PriceObservationRow).where(
                PriceObservationRow.observation_id == observation_id
            )
        )
        row = result.scalar_one_or_none()
        if row is None:
            raise RecordNotFoundError(observation_id)
        return row

    async def get(self, observation_id: str) -> PriceObservation:
        return _to_schema(await self._get_row(observation_id))

    async def save(self, observation: PriceObservation) -> PriceObservation:
        try:
            row = await self._get_row(observation.observation_id)
        except RecordNotFoundError:
            row = PriceObservationRow()
            self.db.add(row)

        _apply(row, observation)
        await self.db.commit()
        return observation

    async def delete(self, observation_id: str) -> None:
        row = await self._get_row(observation_id)
        await self.db.delete(row)
        await self.db.commit()

    async def delete_many(self, observation_ids: Iterable[str]) -> int:
        ids = list(set(observation_ids))
        if not ids:
            return 0

        result = await self.db.execute(
            delete(PriceObservationRow).where(PriceObservationRow.observation_id.in_(ids))
        )
        await self.db.commit()
        return result.rowcount or 0

    async def count(self) -> int:
        result = await self.db.execute(select(func.count(PriceObservationRow.id)))
        return result.scalar_one()

    async def get_product(self, product_identity: int) -> Optional[Product]:
        result = await self.db.execute(
            select(ProductRow).where(ProductRow.product_identity == product_identity)
        )
        row = result.scalar_one_or_none()
        if row is None:
            return None
        return Product(
            product_identity=row.product_identity,
            barcode=row.barcode,
            product_name=row.product_name,
            created_at=_aware(row.created_at) or datetime.now(timezone.utc),
        )

    async def save_product(self, product: Product) -> Product:
        self.db.add(ProductRow(
            product_identity=product.product_identity,
            barcode=product.barcode,
            product_name=product.product_name,
            created_at=product.created_at,
        ))
        try:
            await self.db.commit()
        except IntegrityError:
            # Another session created this product first
            await self.db.rollback()
            existing = await self.get_product(product.product_identity)
            if existing is None:
                raise
            logger.info("Product %d already created by another session", product.product_identity)
            return existing
        return product

    async def list_stores(self) -> List[Store]:
        result = await self.db.execute(select(StoreRow).order_by(StoreRow.sort, StoreRow.name))
        return [Store.model_validate(row) for row in result.scalars().all()]

    async def add_store(self, store: Store) -> Store:
        result = await self.db.execute(select(StoreRow).where(StoreRow.name == store.name))
        existing = result.scalar_one_or_none()
        if existing is not None:
            return Store.model_validate(existing)

        self.db.add(StoreRow(name=store.name, sort=store.sort))
        await self.db.commit()
        return store
