import os

# Must be set before pricecheck.core.config is imported
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("RATE_LIMIT_PER_MINUTE", "10000")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest

from pricecheck.repositories.memory import InMemoryPriceRecordRepository
from pricecheck.services.observation_service import ObservationService
from pricecheck.services.pending_queue import PendingQueue


@pytest.fixture
def repository():
    return InMemoryPriceRecordRepository()


@pytest.fixture
def pending_queue():
    return PendingQueue()


@pytest.fixture
def service(repository, pending_queue):
    return ObservationService(repository, pending_queue=pending_queue)


@pytest.fixture
def client(repository, pending_queue):
    from fastapi.testclient import TestClient

    from pricecheck.api.deps import get_pending_queue, get_repository
    from pricecheck.main import app

    app.dependency_overrides[get_repository] = lambda: repository
    app.dependency_overrides[get_pending_queue] = lambda: pending_queue
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
