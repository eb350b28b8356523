"""Append-only ledger file. The write side of the event log."""

import logging
import os
from pathlib import Path
from typing import BinaryIO

from economy.events.projector import CorruptLedgerError

logger = logging.getLogger(__name__)


class LedgerFile:
    """Append-only, line-per-event ledger file.

    Assumes a single writer: callers serialize append() themselves.
    """

    def __init__(self, path: Path, handle: BinaryIO, count: int) -> None:
        self.path = path
        self._fh = handle
        self._count = count

    @classmethod
    def open(cls, path: str | Path) -> "LedgerFile":
        """Open (creating the file and its directory if needed) for appending."""
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            handle = open(path, "ab")
        except OSError as e:
            raise LedgerStorageError(f"Failed to open ledger at {path}: {e}") from e
        try:
            count = len(read_records(path))
        except (LedgerStorageError, CorruptLedgerError):
            handle.close()
            raise
        return cls(path, handle, count)

    @property
    def count(self) -> int:
        """Number of records committed so far."""
        return self._count

    def append(self, line: str) -> int:
        """Write one record and fsync it. Returns its 1-based sequence number.

        On failure the file is cut back to its previous length, so a torn
        record never precedes a later append.
        """
        if not line.endswith("\n") or "\n" in line[:-1]:
            raise ValueError("a ledger record must be exactly one newline-terminated line")
        offset = self._fh.tell()
        try:
            self._fh.write(line.encode("utf-8"))
            self._fh.flush()
            os.fsync(self._fh.fileno())
        except OSError as e:
            self._rollback(offset)
            raise LedgerStorageError(f"Failed to append to ledger: {e}") from e
        self._count += 1
        return self._count

    def read_all(self) -> list[str]:
        """Every record in write order, without the trailing empty record."""
        return read_records(self.path)

    def close(self) -> None:
        self._fh.close()

    def _rollback(self, offset: int) -> None:
        try:
            self._fh.truncate(offset)
            self._fh.seek(offset)
        except OSError:
            logger.exception("Could not truncate ledger back to %d bytes", offset)


def read_records(path: Path) -> list[str]:
    """Read a ledger file into records, dropping the trailing empty record.

    Raises LedgerStorageError if the file cannot be read and
    CorruptLedgerError if it is not valid UTF-8.
    """
    try:
        data = path.read_bytes()
    except OSError as e:
        raise LedgerStorageError(f"Failed to read ledger: {e}") from e
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        position = data.count(b"\n", 0, e.start) + 1
        raise CorruptLedgerError(position, f"invalid UTF-8: {e.reason}") from e
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


class LedgerStorageError(Exception):
    pass
