"""
Exceptions raised by the inventory ledger.

All of them derive from LedgerError so callers (the console shell and the
CLI) can catch the whole family at one point and keep going.
"""
from __future__ import annotations

from typing import Any


class LedgerError(Exception):
    """Base class for ledger failures."""


class NotFoundError(LedgerError, LookupError):
    """No product matched an id, or a backup source does not exist."""

    def __init__(self, key: Any, message: str | None = None):
        self.key = key
        super().__init__(message or f"Product with ID {key} not found")


class AllocationError(LedgerError, MemoryError):
    """Storage for a new product record could not be obtained."""


class MalformedSnapshotError(LedgerError, ValueError):
    """A snapshot record could not be parsed (strict mode only)."""

    def __init__(self, position: int, detail: str):
        self.position = position
        self.detail = detail
        super().__init__(f"Malformed snapshot record #{position}: {detail}")
