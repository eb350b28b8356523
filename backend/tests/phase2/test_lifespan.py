"""Startup wiring: ledger location and refusal to serve a corrupt ledger."""

from pathlib import Path

import pytest
from fastapi import FastAPI

from economy.events.projector import CorruptLedgerError
from economy.ledger.router import get_ledger_service
from economy.main import LEDGER_PATH, LEDGER_PATH_DOCKERISED, lifespan, resolve_ledger_path
from tests.fixtures import make_burn, make_mint, write_ledger


class TestResolveLedgerPath:
    def test_env_override(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ECONOMY_LEDGER_PATH", str(tmp_path / "l"))
        assert resolve_ledger_path() == tmp_path / "l"

    def test_local_default(self, monkeypatch, tmp_path):
        monkeypatch.delenv("ECONOMY_LEDGER_PATH", raising=False)
        monkeypatch.setattr("economy.main.DOCKERENV", tmp_path / "missing")
        assert resolve_ledger_path() == Path(LEDGER_PATH)

    def test_docker_default(self, monkeypatch, tmp_path):
        monkeypatch.delenv("ECONOMY_LEDGER_PATH", raising=False)
        dockerenv = tmp_path / ".dockerenv"
        dockerenv.touch()
        monkeypatch.setattr("economy.main.DOCKERENV", dockerenv)
        assert resolve_ledger_path() == Path(LEDGER_PATH_DOCKERISED)


class TestLifespan:
    async def test_replays_and_wires_service(self, monkeypatch, ledger_path):
        write_ledger(ledger_path, [make_mint(amount=7)])
        monkeypatch.setenv("ECONOMY_LEDGER_PATH", str(ledger_path))
        app = FastAPI()

        async with lifespan(app):
            service = app.dependency_overrides[get_ledger_service]()
            assert service.get_balance("alice") == 7

    async def test_creates_missing_ledger(self, monkeypatch, ledger_path):
        monkeypatch.setenv("ECONOMY_LEDGER_PATH", str(ledger_path))
        async with lifespan(FastAPI()):
            pass
        assert ledger_path.exists()

    async def test_corrupt_ledger_aborts_startup(self, monkeypatch, ledger_path):
        write_ledger(ledger_path, [make_mint(amount=1), make_burn(amount=2)])
        monkeypatch.setenv("ECONOMY_LEDGER_PATH", str(ledger_path))

        with pytest.raises(CorruptLedgerError):
            async with lifespan(FastAPI()):
                pass

    async def test_invalid_utf8_aborts_startup(self, monkeypatch, ledger_path):
        ledger_path.parent.mkdir(parents=True)
        ledger_path.write_bytes(b"\xff\n")
        monkeypatch.setenv("ECONOMY_LEDGER_PATH", str(ledger_path))

        with pytest.raises(CorruptLedgerError):
            async with lifespan(FastAPI()):
                pass
