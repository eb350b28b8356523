"""Shared test helpers."""

from pathlib import Path
from uuid import uuid4

from economy.events.codec import Event, encode
from economy.models import BurnEvent, MintEvent, TransactionEvent

START_MS = 1_700_000_000_000


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: int = START_MS) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


def make_mint(
    recipient: str = "alice",
    amount: int = 10_000_000,
    note: str = "seed",
    time: int = START_MS,
) -> MintEvent:
    return MintEvent(id=uuid4().hex, time=time, recipient=recipient, amount=amount, note=note)


def make_transaction(
    sender: str = "alice",
    recipient: str = "bob",
    amount: int = 4_000_000,
    fee: int = 400_000,
    note: str = "note",
    link: str = "link",
    time: int = START_MS,
) -> TransactionEvent:
    return TransactionEvent(
        id=uuid4().hex,
        time=time,
        sender=sender,
        recipient=recipient,
        amount=amount,
        fee=fee,
        note=note,
        link=link,
    )


def make_burn(
    sender: str = "alice",
    amount: int = 1_000_000,
    note: str = "burn",
    link: str = "link",
    time: int = START_MS,
) -> BurnEvent:
    return BurnEvent(id=uuid4().hex, time=time, sender=sender, amount=amount, note=note, link=link)


def write_ledger(path: Path, events: list[Event], extra_lines: list[str] | None = None) -> None:
    """Write a ledger file directly, bypassing the service."""
    path.parent.mkdir(parents=True, exist_ok=True)
    text = "".join(encode(e) for e in events)
    for line in extra_lines or []:
        text += line + "\n"
    path.write_text(text, encoding="utf-8")
