"""Recent-transaction queries straight off the ledger records.

No index is kept: every query decodes the ledger from the newest record
backwards until it has enough matches.
"""

from collections.abc import Callable, Sequence

from economy.events.codec import Event, decode

EventPredicate = Callable[[Event], bool]

DEFAULT_LIMIT = 100


def recent(
    lines: Sequence[str],
    limit: int = DEFAULT_LIMIT,
    predicate: EventPredicate | None = None,
) -> list[Event]:
    """Newest-first events matching predicate, at most limit of them."""
    events: list[Event] = []
    if limit <= 0:
        return events
    for line in reversed(lines):
        event = decode(line)
        if predicate is not None and not predicate(event):
            continue
        events.append(event)
        if len(events) >= limit:
            break
    return events


def involves(user: str) -> EventPredicate:
    """Predicate: the user is the event's sender or recipient."""

    def _match(event: Event) -> bool:
        return getattr(event, "sender", None) == user or getattr(event, "recipient", None) == user

    return _match
