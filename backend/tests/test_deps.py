import asyncio

from pricecheck.api import deps
from pricecheck.repositories.sql import SqlPriceRecordRepository


def first_repository():
    async def runner():
        generator = deps.get_repository()
        repository = await generator.__anext__()
        await generator.aclose()
        return repository

    return asyncio.run(runner())


def test_memory_backend_opens_no_session(monkeypatch):
    def no_session():
        raise AssertionError("a database session was opened")

    monkeypatch.setattr(deps.settings, "STORAGE_BACKEND", "memory")
    monkeypatch.setattr(deps, "AsyncSessionLocal", no_session)

    assert first_repository() is deps.memory_repository


def test_sql_backend_gets_a_session(monkeypatch):
    opened = []

    class FakeSession:
        async def __aenter__(self):
            opened.append(self)
            return self

        async def __aexit__(self, *exc_info):
            opened.remove(self)

    monkeypatch.setattr(deps.settings, "STORAGE_BACKEND", "sql")
    monkeypatch.setattr(deps, "AsyncSessionLocal", FakeSession)

    repository = first_repository()
    assert isinstance(repository, SqlPriceRecordRepository)
    assert isinstance(repository.db, FakeSession)
    assert opened == []
