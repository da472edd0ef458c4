"""API test fixtures: FastAPI demo app driven through httpx.

Design Decisions:
    - The demo app's shared repository is swapped per test so records never leak
      between tests
    - ASGITransport does not run the lifespan; logging stays under pytest's control
"""

import pytest
from httpx import ASGITransport, AsyncClient

import rest_dialect.main as main_module
from rest_dialect.examples.sample_repository import PersistableSampleRepository


@pytest.fixture
def things(monkeypatch):
    repo = PersistableSampleRepository()
    monkeypatch.setattr(main_module, "things", repo)
    return repo


@pytest.fixture
async def client(things):
    """httpx client against the demo app with a fresh thing repository."""
    async with AsyncClient(
        transport=ASGITransport(app=main_module.app), base_url="http://test",
    ) as c:
        yield c
