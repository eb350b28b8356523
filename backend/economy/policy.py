"""Economic policy: fee rate and stipend size from aggregate state.

The economy steers towards TCU currency per user. Below target, stipends
grow; above it, fees grow. Both are floored at their base values and are
pure functions of (supply, users), recomputed on every call.
"""

import math

from economy.models import UNIT

# Target Currency per User
TCU = 100 * UNIT
BASE_STIPEND = 10 * UNIT
BASE_FEE = 0.1
STIPEND_INTERVAL_MS = 12 * 60 * 60 * 1000
STIPEND_NOTE = "Stipend"


def ccu(supply: int, users: int) -> float:
    """Current Currency per User. 0 for an empty economy."""
    if users == 0:
        return 0.0
    return supply / users


def current_stipend(supply: int, users: int) -> int:
    """Stipend in micro-units, truncated to a whole micro-unit."""
    return math.floor(max((TCU - ccu(supply, users) + BASE_STIPEND) / 2, BASE_STIPEND))


def current_fee(supply: int, users: int) -> float:
    """Fee rate applied to transfer amounts."""
    return max((1 + (ccu(supply, users) * 0.9 - TCU) / TCU * 4) * BASE_FEE, BASE_FEE)


def fee_for(amount: int, rate: float) -> int:
    return math.floor(amount * rate)
