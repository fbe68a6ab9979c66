"""Durable storage for the pending-vault overlay."""
from typing import Protocol

from ..models import PendingEntry


class PendingStore(Protocol):
    """Advisory persistence. The external ledger remains authoritative."""

    def load(self) -> list[PendingEntry]: ...

    def save(self, entries: list[PendingEntry]) -> None: ...
