"""Line codec for the ledger file.

Each record is the event's type tag, one space, and the JSON payload:

    Mint {"To":"alice","Amount":10000000,"Note":"seed","Time":...,"Id":"..."}
"""

from pydantic import ValidationError

from economy.models import EVENT_TYPES, BurnEvent, MintEvent, TransactionEvent

Event = TransactionEvent | MintEvent | BurnEvent


def encode(event: Event) -> str:
    """Encode an event as one newline-terminated ledger record."""
    payload = event.model_dump_json(by_alias=True, exclude={"type"})
    return f"{event.type} {payload}\n"


def decode(line: str) -> Event:
    """Decode one ledger record (with or without its trailing newline).

    Raises UnknownEventTypeError for an unrecognized tag and
    MalformedEventError for anything else that does not parse.
    """
    tag, sep, payload = line.rstrip("\n").partition(" ")
    if not sep:
        raise MalformedEventError(line, "missing type separator")
    event_cls = EVENT_TYPES.get(tag)
    if event_cls is None:
        raise UnknownEventTypeError(tag)
    try:
        return event_cls.model_validate_json(payload)
    except ValidationError as e:
        raise MalformedEventError(line, str(e)) from e


class EventDecodeError(Exception):
    pass


class UnknownEventTypeError(EventDecodeError):
    def __init__(self, tag: str) -> None:
        self.tag = tag
        super().__init__(f"Unknown event type: {tag!r}")


class MalformedEventError(EventDecodeError):
    def __init__(self, line: str, reason: str) -> None:
        self.line = line
        self.reason = reason
        super().__init__(f"Malformed event record: {reason}")
