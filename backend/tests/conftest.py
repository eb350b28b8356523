"""Shared pytest fixtures for economy tests."""

import pytest
from httpx import ASGITransport, AsyncClient

from economy.events.projector import BalanceProjector
from economy.events.store import LedgerFile
from economy.ledger.router import get_ledger_service
from economy.ledger.service import LedgerService
from economy.main import app
from tests.fixtures import FakeClock


@pytest.fixture
def ledger_path(tmp_path):
    """Ledger location inside a directory that does not exist yet."""
    return tmp_path / "economy" / "ledger"


@pytest.fixture
def ledger_file(ledger_path):
    """LedgerFile on a fresh temporary path."""
    ledger = LedgerFile.open(ledger_path)
    yield ledger
    ledger.close()


@pytest.fixture
def projector():
    return BalanceProjector()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
async def service(ledger_file, clock):
    """LedgerService over an empty ledger, with a controllable clock."""
    svc = LedgerService(ledger_file, clock=clock)
    await svc.load()
    return svc


@pytest.fixture
async def client(service):
    """Async test client with the temporary ledger wired into the app."""
    app.dependency_overrides[get_ledger_service] = lambda: service
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
    app.dependency_overrides.clear()
