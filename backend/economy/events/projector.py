"""Balance projector: folds ledger events into current balances.

The read side of the ledger. The projection has no persisted form; it is
rebuilt from the ledger file at startup and kept current as events are
appended.
"""

import logging
from collections.abc import Callable, Iterable

from economy.events.codec import Event, EventDecodeError, decode
from economy.models import BurnEvent, MintEvent, TransactionEvent
from economy.policy import STIPEND_NOTE

logger = logging.getLogger(__name__)


class BalanceProjector:
    """Per-user balances plus the time of each user's last stipend."""

    def __init__(self) -> None:
        self._balances: dict[str, int] = {}
        self._last_stipends: dict[str, int] = {}
        self._handlers: dict[str, Callable[..., None]] = {
            "Transaction": self._handle_transaction,
            "Mint": self._handle_mint,
            "Burn": self._handle_burn,
        }

    # -- Replay --

    def replay(self, events: Iterable[Event]) -> None:
        """Reset to empty and apply every event in ledger order.

        Raises CorruptLedgerError if an event would overdraw its sender
        against the balances accumulated so far. A failed replay leaves the projection empty, never half-loaded.
        """
        self._reset()
        replayed = 0
        try:
            for position, event in enumerate(events, start=1):
                debit = self._debit(event)
                if debit and debit[1] > self.balance(debit[0]):
                    raise CorruptLedgerError(
                        position,
                        f"{event.type} {event.id} debits {debit[1]} from {debit[0]!r}"
                        f" with balance {self.balance(debit[0])}",
                    )
                self.apply(event)
                replayed = position
        except CorruptLedgerError:
            self._reset()
            raise
        logger.debug("Replayed %d ledger events into %d balances", replayed, len(self._balances))

    def _reset(self) -> None:
        self._balances.clear()
        self._last_stipends.clear()

    def replay_lines(self, lines: Iterable[str]) -> None:
        """Decode and replay raw ledger records. Any bad record is corruption."""
        self.replay(self._decode_all(lines))

    @staticmethod
    def _decode_all(lines: Iterable[str]) -> Iterable[Event]:
        for position, line in enumerate(lines, start=1):
            try:
                yield decode(line)
            except EventDecodeError as e:
                raise CorruptLedgerError(position, str(e)) from e

    @staticmethod
    def _debit(event: Event) -> tuple[str, int] | None:
        if isinstance(event, TransactionEvent):
            return event.sender, event.amount + event.fee
        if isinstance(event, BurnEvent):
            return event.sender, event.amount
        return None

    # -- Live updates --

    def apply(self, event: Event) -> None:
        """Apply one already-validated event."""
        self._handlers[event.type](event)

    def _handle_transaction(self, event: TransactionEvent) -> None:
        self._balances[event.sender] = self.balance(event.sender) - event.amount - event.fee
        self._balances[event.recipient] = self.balance(event.recipient) + event.amount

    def _handle_mint(self, event: MintEvent) -> None:
        self._balances[event.recipient] = self.balance(event.recipient) + event.amount
        if event.note == STIPEND_NOTE:
            self.record_stipend(event.recipient, event.time)

    def _handle_burn(self, event: BurnEvent) -> None:
        self._balances[event.sender] = self.balance(event.sender) - event.amount

    def record_stipend(self, user: str, timestamp: int) -> None:
        self._last_stipends[user] = timestamp

    # -- Reads --

    def balance(self, user: str) -> int:
        """Current balance; 0 for a user the ledger has never seen."""
        return self._balances.get(user, 0)

    def last_stipend(self, user: str) -> int | None:
        return self._last_stipends.get(user)

    def supply(self) -> int:
        """Total currency in circulation."""
        return sum(self._balances.values())

    def user_count(self) -> int:
        """Every user who has ever held or moved currency."""
        return len(self._balances)

    def snapshot(self) -> dict[str, int]:
        return dict(self._balances)


class CorruptLedgerError(Exception):
    def __init__(self, position: int, reason: str) -> None:
        self.position = position
        self.reason = reason
        super().__init__(f"Corrupt ledger at record {position}: {reason}")
