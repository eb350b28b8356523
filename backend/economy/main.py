"""Economy FastAPI application entry point."""

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from economy.events.projector import CorruptLedgerError
from economy.events.store import LedgerFile
from economy.ledger.router import get_ledger_service
from economy.ledger.router import router as ledger_router
from economy.ledger.service import LedgerService
from economy.models import to_readable

logger = logging.getLogger(__name__)

LEDGER_PATH = "../data/economy/ledger"
LEDGER_PATH_DOCKERISED = "./data/ledger"
DOCKERENV = Path("/.dockerenv")


def resolve_ledger_path() -> Path:
    """ECONOMY_LEDGER_PATH if set, else the Docker or local default."""
    configured = os.environ.get("ECONOMY_LEDGER_PATH")
    if configured:
        return Path(configured)
    if DOCKERENV.exists():
        logger.info("Running in Docker")
        return Path(LEDGER_PATH_DOCKERISED)
    return Path(LEDGER_PATH)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open and replay the ledger, then wire the service."""
    # Load .env from backend/ directory
    load_dotenv(Path(__file__).resolve().parent.parent / ".env")

    ledger_path = resolve_ledger_path()
    logger.info("Loading ledger from %s", ledger_path)
    ledger: LedgerFile | None = None
    try:
        ledger = LedgerFile.open(ledger_path)
        service = LedgerService(ledger)
        await service.load()
    except CorruptLedgerError:
        logger.critical("Refusing to start: ledger at %s is corrupt", ledger_path, exc_info=True)
        if ledger is not None:
            ledger.close()
        raise

    summary = service.summary()
    logger.info(
        "User count %d, economy size %s, CCU %s, TCU %s, fee %d%%, stipend %s",
        summary.user_count,
        to_readable(summary.economy_size),
        to_readable(int(summary.ccu)),
        to_readable(summary.tcu),
        int(summary.fee_rate * 100),
        to_readable(summary.stipend),
    )

    app.dependency_overrides[get_ledger_service] = lambda: service
    app.state.ledger = ledger
    yield

    ledger.close()


app = FastAPI(
    title="Economy",
    description="Virtual-economy ledger with policy-controlled fees and stipends",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.environ.get("ECONOMY_CORS_ORIGINS", "http://localhost:5173").split(","),
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(ledger_router)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok", "version": "0.1.0"}
