"""Store endpoints"""
from fastapi import APIRouter, Depends

from pricecheck.api.deps import get_repository
from pricecheck.repositories.base import PriceRecordRepository
from pricecheck.schemas.store import Store, StoreCreate, StoreListResponse

router = APIRouter()


@router.get("/", response_model=StoreListResponse)
async def list_stores(repository: PriceRecordRepository = Depends(get_repository)):
    """Stores in display order."""
    stores = await repository.list_stores()
    return StoreListResponse(stores=stores, count=len(stores))


@router.post("/", response_model=Store, status_code=201)
async def add_store(
    data: StoreCreate,
    repository: PriceRecordRepository = Depends(get_repository),
):
    """Add a store; adding a name that already exists returns the existing store."""
    return await repository.add_store(Store(name=data.name.strip(), sort=data.sort))
