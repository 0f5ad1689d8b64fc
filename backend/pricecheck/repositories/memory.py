"""In-process repository, the server-side stand-in for browser local storage"""
from typing import Dict, Iterable, List, Optional

from pricecheck.repositories.base import PriceRecordRepository, RecordNotFoundError
from pricecheck.schemas.observation import PriceObservation, Product
from pricecheck.schemas.store import Store
from pricecheck.services.seed_service import DEFAULT_STORES


class InMemoryPriceRecordRepository(PriceRecordRepository):
    """Dict-backed store. Records are copied in and out so callers cannot mutate state."""

    def __init__(self, seed_stores: bool = True):
        self._records: Dict[str, PriceObservation] = {}
        self._products: Dict[int, Product] = {}
        self._stores: Dict[str, Store] = {}
        if seed_stores:
            for name, sort in DEFAULT_STORES:
                self._stores[name] = Store(name=name, sort=sort)

    async def list_for_product(self, product_identity: int) -> List[PriceObservation]:
        return [
            record.model_copy(deep=True)
            for record in self._records.values()
            if record.product_identity == product_identity
        ]

    async def list_all(self) -> List[PriceObservation]:
        return [record.model_copy(deep=True) for record in self._records.values()]

    async def get(self, observation_id: str) -> PriceObservation:
        record = self._records.get(observation_id)
        if record is None:
            raise RecordNotFoundError(observation_id)
        return record.model_copy(deep=True)

    async def save(self, observation: PriceObservation) -> PriceObservation:
        self._records[observation.observation_id] = observation.model_copy(deep=True)
        return observation

    async def delete(self, observation_id: str) -> None:
        if self._records.pop(observation_id, None) is None:
            raise RecordNotFoundError(observation_id)

    async def delete_many(self, observation_ids: Iterable[str]) -> int:
        deleted = 0
        for observation_id in set(observation_ids):
            if self._records.pop(observation_id, None) is not None:
                deleted += 1
        return deleted

    async def count(self) -> int:
        return len(self._records)

    async def get_product(self, product_identity: int) -> Optional[Product]:
        product = self._products.get(product_identity)
        return product.model_copy() if product else None

    async def save_product(self, product: Product) -> Product:
        existing = self._products.setdefault(product.product_identity, product.model_copy())
        return existing.model_copy()

    async def list_stores(self) -> List[Store]:
        return sorted(self._stores.values(), key=lambda s: (s.sort, s.name))

    async def add_store(self, store: Store) -> Store:
        existing = self._stores.get(store.name)
        if existing is not None:
            return existing
        self._stores[store.name] = store
        return store
