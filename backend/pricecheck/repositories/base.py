"""Repository interface for price records

The comparison engine never touches storage. Callers fetch a snapshot of
history through this interface, compute, then write back.
"""
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from pricecheck.schemas.observation import PriceObservation, Product
from pricecheck.schemas.store import Store


class RecordNotFoundError(LookupError):
    """No observation with the requested id"""

    def __init__(self, observation_id: str):
        super().__init__(observation_id)
        self.observation_id = observation_id


class PriceRecordRepository(ABC):

    @abstractmethod
    async def list_for_product(self, product_identity: int) -> List[PriceObservation]:
        """All observations for an identity, oldest first."""

    @abstractmethod
    async def list_all(self) -> List[PriceObservation]:
        """Every observation, oldest first."""

    @abstractmethod
    async def get(self, observation_id: str) -> PriceObservation:
        """Raises RecordNotFoundError when missing."""

    @abstractmethod
    async def save(self, observation: PriceObservation) -> PriceObservation:
        """Insert, or replace the record with the same observation_id."""

    @abstractmethod
    async def delete(self, observation_id: str) -> None:
        """Raises RecordNotFoundError when missing."""

    @abstractmethod
    async def delete_many(self, observation_ids: Iterable[str]) -> int:
        """Delete what exists; unknown ids are skipped. Returns the number deleted."""

    @abstractmethod
    async def count(self) -> int:
        ...

    @abstractmethod
    async def get_product(self, product_identity: int) -> Optional[Product]:
        ...

    @abstractmethod
    async def save_product(self, product: Product) -> Product:
        """Insert a product; if the identity already exists the stored product is returned."""

    @abstractmethod
    async def list_stores(self) -> List[Store]:
        """Stores ordered by sort key, then name."""

    @abstractmethod
    async def add_store(self, store: Store) -> Store:
        """Add a store; an existing store with the same name is returned unchanged."""
