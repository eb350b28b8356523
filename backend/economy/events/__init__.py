"""Event sourcing: append-only ledger file and balance projection."""

from economy.events.projector import BalanceProjector
from economy.events.store import LedgerFile

__all__ = ["BalanceProjector", "LedgerFile"]
