"""Pending-vault overlay and its persistence."""
from .ledger import EXPECTED_STATUS, PendingStateLedger
from .storage import JsonPendingStore, storage_key

__all__ = ["EXPECTED_STATUS", "JsonPendingStore", "PendingStateLedger", "storage_key"]
