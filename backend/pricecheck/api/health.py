"""Health endpoint"""
from fastapi import APIRouter

from pricecheck.core.config import settings

router = APIRouter()


@router.get("/health")
async def health():
    return {
        "status": "ok",
        "environment": settings.ENVIRONMENT,
        "storage": settings.STORAGE_BACKEND,
    }
