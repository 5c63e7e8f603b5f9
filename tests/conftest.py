from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from fakes import FakePool, FakeStore, install


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def store(monkeypatch) -> FakeStore:
    install(monkeypatch)
    return FakeStore()


@pytest.fixture
def pool(store: FakeStore) -> FakePool:
    return FakePool(store)


@pytest.fixture
def client(pool: FakePool):
    from main import app

    # No `with`: the lifespan would open a real asyncpg pool.
    app.state.pool = pool
    try:
        yield TestClient(app)
    finally:
        app.state.pool = None

