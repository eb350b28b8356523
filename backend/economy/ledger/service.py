"""Ledger service: the single path through which balances change.

Every mutation runs validate -> append -> apply under one asyncio.Lock, so
two requests can never both pass a balance check against the same stale
balance. The projection is only touched after the ledger record is on disk.
"""

import asyncio
import logging
from collections.abc import Callable

from economy.events.codec import Event, encode
from economy.events.projector import BalanceProjector
from economy.events.store import LedgerFile
from economy.ledger import history
from economy.ledger.schemas import EconomySummary
from economy.models import (
    BurnEvent,
    MintEvent,
    TransactionEvent,
    new_event_id,
    now_ms,
    to_readable,
)
from economy.policy import (
    STIPEND_INTERVAL_MS,
    STIPEND_NOTE,
    TCU,
    ccu,
    current_fee,
    current_stipend,
    fee_for,
)

logger = logging.getLogger(__name__)


class LedgerService:
    """Owns the balance projection and serializes writes to the ledger file."""

    def __init__(self, ledger: LedgerFile, clock: Callable[[], int] = now_ms) -> None:
        self._ledger = ledger
        self._projector = BalanceProjector()
        self._lock = asyncio.Lock()
        self._clock = clock

    async def load(self) -> None:
        """Rebuild the projection from the ledger file.

        Raises CorruptLedgerError if the ledger cannot be replayed; the
        caller decides whether that stops the process.
        """
        async with self._lock:
            lines = await asyncio.to_thread(self._ledger.read_all)
            self._projector.replay_lines(lines)
        logger.info("Loaded %d ledger events", len(lines))

    # -- Queries --

    def get_balance(self, user: str) -> int:
        return self._projector.balance(user)

    def get_current_fee(self) -> float:
        return current_fee(self._projector.supply(), self._projector.user_count())

    def get_current_stipend(self) -> int:
        return current_stipend(self._projector.supply(), self._projector.user_count())

    def summary(self) -> EconomySummary:
        supply = self._projector.supply()
        users = self._projector.user_count()
        return EconomySummary(
            user_count=users,
            economy_size=supply,
            ccu=ccu(supply, users),
            tcu=TCU,
            fee_rate=current_fee(supply, users),
            stipend=current_stipend(supply, users),
        )

    async def list_recent_transactions(self, limit: int = history.DEFAULT_LIMIT) -> list[Event]:
        return await self._recent(limit, None)

    async def list_user_transactions(
        self, user: str, limit: int = history.DEFAULT_LIMIT
    ) -> list[Event]:
        return await self._recent(limit, history.involves(user))

    async def _recent(self, limit: int, predicate: history.EventPredicate | None) -> list[Event]:
        # Only records committed before the read started; skips an in-flight append.
        committed = self._ledger.count
        lines = await asyncio.to_thread(self._ledger.read_all)
        return history.recent(lines[:committed], limit, predicate)

    # -- Mutations --

    async def transfer(
        self,
        sender: str,
        recipient: str,
        amount: int,
        note: str,
        link: str,
        asset_refs: list[int] | None = None,
    ) -> TransactionEvent:
        """Move amount from sender to recipient, burning a policy-sized fee."""
        async with self._lock:
            fee = fee_for(amount, self.get_current_fee())
            self._validate_transfer(sender, recipient, amount, fee, note, link)
            event = TransactionEvent(
                id=new_event_id(),
                time=self._clock(),
                sender=sender,
                recipient=recipient,
                amount=amount,
                fee=fee,
                note=note,
                link=link,
                asset_refs=asset_refs,
            )
            await self._commit(event)
        logger.info(
            "Transaction successful  %s -[%s]-> %s (fee %s)",
            sender, to_readable(amount), recipient, to_readable(fee),
        )
        return event

    async def mint(
        self,
        recipient: str,
        amount: int,
        note: str,
        timestamp: int | None = None,
    ) -> MintEvent:
        """Create amount out of nothing and credit it to recipient."""
        async with self._lock:
            event = await self._mint_locked(recipient, amount, note, timestamp)
        logger.info("Mint successful         %s <-[%s]-", recipient, to_readable(amount))
        return event

    async def burn(
        self,
        sender: str,
        amount: int,
        note: str,
        link: str,
        asset_refs: list[int] | None = None,
    ) -> BurnEvent:
        """Destroy amount from sender's balance."""
        async with self._lock:
            self._validate_burn(sender, amount, note, link)
            event = BurnEvent(
                id=new_event_id(),
                time=self._clock(),
                sender=sender,
                amount=amount,
                note=note,
                link=link,
                asset_refs=asset_refs,
            )
            await self._commit(event)
        logger.info("Burn successful         %s -[%s]->", sender, to_readable(amount))
        return event

    async def request_stipend(self, user: str) -> MintEvent:
        """Mint the current stipend to user, at most once per stipend interval."""
        async with self._lock:
            now = self._clock()
            last = self._projector.last_stipend(user)
            if last is not None and last + STIPEND_INTERVAL_MS > now:
                logger.debug("Stipend for %s refused, last was at %d", user, last)
                raise StipendNotAvailableError(user, last + STIPEND_INTERVAL_MS)
            amount = self.get_current_stipend()
            event = await self._mint_locked(user, amount, STIPEND_NOTE, now)
        logger.info("Stipend successful      %s <-[%s]-", user, to_readable(amount))
        return event

    async def _mint_locked(
        self, recipient: str, amount: int, note: str, timestamp: int | None
    ) -> MintEvent:
        self._validate_mint(recipient, amount, note)
        event = MintEvent(
            id=new_event_id(),
            time=self._clock() if timestamp is None else timestamp,
            recipient=recipient,
            amount=amount,
            note=note,
        )
        await self._commit(event)
        return event

    async def _commit(self, event: Event) -> None:
        """Append durably, then apply. Raises LedgerStorageError with nothing applied.

        Cancellation cannot separate the two: once the write has been handed
        to the worker thread it is waited for and applied before the
        cancellation is re-raised, so the lock is never released with a
        record on disk that the projection has not seen.
        """
        write = asyncio.ensure_future(asyncio.to_thread(self._ledger.append, encode(event)))
        try:
            await asyncio.shield(write)
        except asyncio.CancelledError:
            await write
            self._projector.apply(event)
            logger.warning("%s %s committed after its request was cancelled", event.type, event.id)
            raise
        self._projector.apply(event)

    # -- Validation --

    def _validate_transfer(
        self, sender: str, recipient: str, amount: int, fee: int, note: str, link: str
    ) -> None:
        if amount <= 0:
            raise TransactionRejectedError("transaction must have an amount")
        if not sender:
            raise TransactionRejectedError("transaction must have a sender")
        if not recipient:
            raise TransactionRejectedError("transaction must have a recipient")
        if sender == recipient:
            raise TransactionRejectedError(f"circular transaction: {sender} -> {recipient}")
        if not note:
            raise TransactionRejectedError("transaction must have a note")
        if not link:
            raise TransactionRejectedError("transaction must have a link")
        self._require_balance(sender, amount + fee)

    def _validate_mint(self, recipient: str, amount: int, note: str) -> None:
        if amount <= 0:
            raise TransactionRejectedError("mint must have an amount")
        if not recipient:
            raise TransactionRejectedError("mint must have a recipient")
        if not note:
            raise TransactionRejectedError("mint must have a note")

    def _validate_burn(self, sender: str, amount: int, note: str, link: str) -> None:
        if amount <= 0:
            raise TransactionRejectedError("burn must have an amount")
        if not sender:
            raise TransactionRejectedError("burn must have a sender")
        self._require_balance(sender, amount)
        if not note:
            raise TransactionRejectedError("burn must have a note")
        if not link:
            raise TransactionRejectedError("burn must have a link")

    def _require_balance(self, user: str, required: int) -> None:
        balance = self._projector.balance(user)
        if required > balance:
            raise TransactionRejectedError(
                f"insufficient balance: balance was {to_readable(balance)},"
                f" at least {to_readable(required)} is required"
            )


class TransactionRejectedError(Exception):
    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class StipendNotAvailableError(TransactionRejectedError):
    def __init__(self, user: str, available_at: int) -> None:
        self.user = user
        self.available_at = available_at
        super().__init__("Next stipend not available yet")
