"""Store schemas"""
from typing import List
from pydantic import BaseModel, ConfigDict, Field


class Store(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    sort: int


class StoreCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    sort: int = Field(500, ge=0)


class StoreListResponse(BaseModel):
    stores: List[Store]
    count: int
