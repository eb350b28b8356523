"""Canonical currency units and ledger event types.

Defined once here, referenced everywhere else. Attribute names are
snake_case; the aliases are the keys written to the ledger file, which
keeps ledgers produced by earlier versions of the service readable.
"""

import time
from typing import Annotated, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt

# ---------------------------------------------------------------------------
# Currency
# ---------------------------------------------------------------------------

MICRO = 1
MILLI = 1_000 * MICRO
UNIT = 1_000_000 * MICRO  # standard unit
KILO = 1_000 * UNIT
MEGA = 1_000_000 * UNIT
GIGA = 1_000_000_000 * UNIT
TERA = 1_000_000_000_000 * UNIT


def to_readable(amount: int) -> str:
    """Render micro-units as e.g. '5.600000 unit'."""
    return f"{amount // UNIT}.{amount % UNIT:06d} unit"


def new_event_id() -> str:
    return uuid4().hex


def now_ms() -> int:
    return time.time_ns() // 1_000_000


# ---------------------------------------------------------------------------
# Events — one model per type tag
# ---------------------------------------------------------------------------


class _EventBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="Id")
    time: int = Field(alias="Time", ge=0)  # ms since epoch


class TransactionEvent(_EventBase):
    type: Literal["Transaction"] = Field(default="Transaction", alias="Type")
    sender: str = Field(alias="From")
    recipient: str = Field(alias="To")
    amount: int = Field(alias="Amount", ge=0)
    fee: int = Field(alias="Fee", ge=0)  # burned, not paid to anyone
    note: str = Field(alias="Note")
    link: str = Field(alias="Link")
    asset_refs: list[NonNegativeInt] | None = Field(default=None, alias="Returns")


class MintEvent(_EventBase):
    type: Literal["Mint"] = Field(default="Mint", alias="Type")
    recipient: str = Field(alias="To")
    amount: int = Field(alias="Amount", ge=0)
    note: str = Field(alias="Note")


class BurnEvent(_EventBase):
    type: Literal["Burn"] = Field(default="Burn", alias="Type")
    sender: str = Field(alias="From")
    amount: int = Field(alias="Amount", ge=0)
    note: str = Field(alias="Note")
    link: str = Field(alias="Link")
    asset_refs: list[NonNegativeInt] | None = Field(default=None, alias="Returns")


LedgerEvent = Annotated[
    TransactionEvent | MintEvent | BurnEvent,
    Field(discriminator="type"),
]

EVENT_TYPES: dict[str, type[TransactionEvent | MintEvent | BurnEvent]] = {
    "Transaction": TransactionEvent,
    "Mint": MintEvent,
    "Burn": BurnEvent,
}
