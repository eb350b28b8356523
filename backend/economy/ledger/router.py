"""FastAPI routes for balances, policy, history and ledger mutations."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from economy.events.codec import EventDecodeError
from economy.events.projector import CorruptLedgerError
from economy.events.store import LedgerStorageError
from economy.ledger.history import DEFAULT_LIMIT
from economy.ledger.schemas import BurnRequest, EconomySummary, MintRequest, TransferRequest
from economy.ledger.service import LedgerService, TransactionRejectedError
from economy.models import BurnEvent, LedgerEvent, MintEvent, TransactionEvent

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ledger"])


def get_ledger_service() -> LedgerService:
    """Dependency placeholder — replaced at app startup."""
    raise RuntimeError("LedgerService not initialized")


def _rejected(e: TransactionRejectedError) -> HTTPException:
    logger.debug("Rejected: %s", e.reason)
    return HTTPException(status_code=400, detail=e.reason)


def _unavailable(e: LedgerStorageError) -> HTTPException:
    logger.error("Ledger storage failed: %s", e)
    return HTTPException(status_code=503, detail="Ledger unavailable")


def _unreadable(e: EventDecodeError | CorruptLedgerError) -> HTTPException:
    logger.critical("Ledger history is unreadable: %s", e)
    return HTTPException(status_code=503, detail="Ledger unreadable")


# -- Queries --


@router.get("/currentFee")
async def get_current_fee(
    service: LedgerService = Depends(get_ledger_service),
) -> float:
    return service.get_current_fee()


@router.get("/currentStipend")
async def get_current_stipend(
    service: LedgerService = Depends(get_ledger_service),
) -> int:
    return service.get_current_stipend()


@router.get("/balance/{user}")
async def get_balance(
    user: str,
    service: LedgerService = Depends(get_ledger_service),
) -> int:
    return service.get_balance(user)


@router.get("/summary")
async def get_summary(
    service: LedgerService = Depends(get_ledger_service),
) -> EconomySummary:
    return service.summary()


@router.get("/transactions")
async def list_transactions(
    limit: int = Query(default=DEFAULT_LIMIT, ge=1, le=1000),
    service: LedgerService = Depends(get_ledger_service),
) -> list[LedgerEvent]:
    try:
        return await service.list_recent_transactions(limit)
    except LedgerStorageError as e:
        raise _unavailable(e)
    except (EventDecodeError, CorruptLedgerError) as e:
        raise _unreadable(e)


@router.get("/transactions/{user}")
async def list_user_transactions(
    user: str,
    limit: int = Query(default=DEFAULT_LIMIT, ge=1, le=1000),
    service: LedgerService = Depends(get_ledger_service),
) -> list[LedgerEvent]:
    try:
        return await service.list_user_transactions(user, limit)
    except LedgerStorageError as e:
        raise _unavailable(e)
    except (EventDecodeError, CorruptLedgerError) as e:
        raise _unreadable(e)


# -- Mutations --


@router.post("/transact", status_code=status.HTTP_201_CREATED)
async def transact(
    request: TransferRequest,
    service: LedgerService = Depends(get_ledger_service),
) -> TransactionEvent:
    try:
        return await service.transfer(
            request.sender,
            request.recipient,
            request.amount,
            request.note,
            request.link,
            request.asset_refs,
        )
    except TransactionRejectedError as e:
        raise _rejected(e)
    except LedgerStorageError as e:
        raise _unavailable(e)


@router.post("/mint", status_code=status.HTTP_201_CREATED)
async def mint(
    request: MintRequest,
    service: LedgerService = Depends(get_ledger_service),
) -> MintEvent:
    try:
        return await service.mint(request.recipient, request.amount, request.note)
    except TransactionRejectedError as e:
        raise _rejected(e)
    except LedgerStorageError as e:
        raise _unavailable(e)


@router.post("/burn", status_code=status.HTTP_201_CREATED)
async def burn(
    request: BurnRequest,
    service: LedgerService = Depends(get_ledger_service),
) -> BurnEvent:
    try:
        return await service.burn(
            request.sender,
            request.amount,
            request.note,
            request.link,
            request.asset_refs,
        )
    except TransactionRejectedError as e:
        raise _rejected(e)
    except LedgerStorageError as e:
        raise _unavailable(e)


@router.post("/stipend/{user}", status_code=status.HTTP_201_CREATED)
async def request_stipend(
    user: str,
    service: LedgerService = Depends(get_ledger_service),
) -> MintEvent:
    try:
        return await service.request_stipend(user)
    except TransactionRejectedError as e:
        raise _rejected(e)
    except LedgerStorageError as e:
        raise _unavailable(e)
