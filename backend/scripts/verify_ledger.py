"""
One-shot check: replay a ledger file offline and report the economy it
describes, without starting the service.

Every record is decoded and every debit is checked against the balances
accumulated so far, exactly as the service does at startup. Exits 1 if
the ledger is missing or corrupt.

Usage:
    cd backend
    python scripts/verify_ledger.py [path/to/ledger]
"""

import sys
from pathlib import Path

from economy.events.projector import BalanceProjector, CorruptLedgerError
from economy.events.store import LedgerStorageError, read_records
from economy.models import to_readable
from economy.policy import TCU, ccu, current_fee, current_stipend


def get_ledger_path() -> Path:
    """First argument, else the service's local default."""
    if len(sys.argv) > 1:
        return Path(sys.argv[1])
    backend_dir = Path(__file__).resolve().parent.parent
    return backend_dir.parent / "data" / "economy" / "ledger"


def verify(ledger_path: Path) -> bool:
    projector = BalanceProjector()
    try:
        lines = read_records(ledger_path)
        projector.replay_lines(lines)
    except CorruptLedgerError as e:
        print(f"CORRUPT: {e}")
        return False
    except LedgerStorageError as e:
        print(f"UNREADABLE: {e}")
        return False

    supply = projector.supply()
    users = projector.user_count()
    print(f"Records        {len(lines)}")
    print(f"User count     {users}")
    print(f"Economy size   {to_readable(supply)}")
    print(f"CCU            {to_readable(int(ccu(supply, users)))}")
    print(f"TCU            {to_readable(TCU)}")
    print(f"Fee percentage {int(current_fee(supply, users) * 100)}")
    print(f"Stipend size   {to_readable(current_stipend(supply, users))}")
    return True


if __name__ == "__main__":
    ledger_path = get_ledger_path()
    if not ledger_path.exists():
        print(f"Ledger not found at {ledger_path}")
        sys.exit(1)
    print(f"Ledger: {ledger_path}")
    sys.exit(0 if verify(ledger_path) else 1)
