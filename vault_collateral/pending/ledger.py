"""Optimistic overlay of vaults submitted for a collateral change.

The indexed ledger lags real time. Right after a transaction that changes
collateral composition is submitted, its vaults are marked pending here so
they are not offered again. Each fresh snapshot is checked against the
status the operation should produce; once it matches, the mark is dropped
and the ledger's own status takes over.

Marks never expire on their own. ``stale_entries`` / ``expire_stale`` exist
for callers that opt into an age limit.
"""
from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable

from ..errors import StalePendingEntry
from ..interfaces.pending_store import PendingStore
from ..models import PendingEntry, PendingOperation, Vault, VaultStatus

logger = logging.getLogger(__name__)

EXPECTED_STATUS: dict[PendingOperation, VaultStatus] = {
    PendingOperation.ADD_COLLATERAL: VaultStatus.IN_USE,
    PendingOperation.WITHDRAW: VaultStatus.AVAILABLE,
    PendingOperation.REDEEM: VaultStatus.REDEEMED,
}


class PendingStateLedger:
    """Single-writer map of vault id → pending operation.

    All reads and writes hold one re-entrant lock, so a mark and a
    reconciliation for the same id can never interleave.
    """

    def __init__(
        self,
        store: PendingStore | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._clock = clock
        self._lock = threading.RLock()
        self._entries: dict[str, PendingEntry] = {}
        if store is not None:
            for entry in store.load():
                self._entries[entry.vault_id] = entry
            if self._entries:
                logger.info("Restored %d pending vault(s)", len(self._entries))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def mark_pending(
        self, vault_ids: Iterable[str], operation: PendingOperation
    ) -> list[PendingEntry]:
        """Record vaults just submitted for ``operation``.

        A vault that is already pending is re-marked with the newer
        submission.
        """
        with self._lock:
            now = self._clock()
            marked = [
                PendingEntry(vault_id=vid, operation=operation, submitted_at=now)
                for vid in dict.fromkeys(vault_ids)
            ]
            if not marked:
                return []
            for entry in marked:
                self._entries[entry.vault_id] = entry
            self._persist()
        logger.info(
            "Marked %d vault(s) pending %s: %s",
            len(marked),
            operation.value,
            ", ".join(e.vault_id for e in marked),
        )
        return marked

    def reconcile(
        self, snapshot: Iterable[Vault], taken_at: float | None = None
    ) -> list[str]:
        """Drop marks the snapshot confirms. Returns the cleared vault ids.

        When ``taken_at`` is given, marks submitted after that moment are left
        alone: the snapshot cannot reflect them yet.
        """
        statuses = {vault.id: vault.status for vault in snapshot}
        cleared: list[str] = []
        with self._lock:
            for vault_id, entry in list(self._entries.items()):
                if taken_at is not None and entry.submitted_at > taken_at:
                    continue
                status = statuses.get(vault_id)
                if status is not None and status == EXPECTED_STATUS[entry.operation]:
                    del self._entries[vault_id]
                    cleared.append(vault_id)
            if cleared:
                self._persist()
        if cleared:
            logger.info("Ledger confirmed %d pending vault(s): %s", len(cleared), ", ".join(cleared))
        return cleared

    def remove(self, vault_ids: Iterable[str]) -> None:
        """Forget marks, e.g. after the submitted transaction reverted."""
        with self._lock:
            removed = [vid for vid in vault_ids if self._entries.pop(vid, None)]
            if removed:
                self._persist()

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._persist()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_pending(self, vault_id: str) -> bool:
        with self._lock:
            return vault_id in self._entries

    def get(self, vault_id: str) -> PendingEntry | None:
        with self._lock:
            return self._entries.get(vault_id)

    def entries(self) -> list[PendingEntry]:
        with self._lock:
            return sorted(self._entries.values(), key=lambda e: (e.submitted_at, e.vault_id))

    def has_pending(self, operation: PendingOperation) -> bool:
        with self._lock:
            return any(e.operation == operation for e in self._entries.values())

    def is_available_for_collateral(self, vault: Vault) -> bool:
        return vault.status != VaultStatus.IN_USE and not self.is_pending(vault.id)

    def can_pledge(self, vault: Vault) -> bool:
        """Whether ``vault`` may be offered as new collateral.

        Besides the in-use/pending rule, only vaults the ledger reports as
        ``AVAILABLE`` qualify; pending deposits, redeemed and liquidated
        vaults cannot be pledged.
        """
        return vault.status == VaultStatus.AVAILABLE and self.is_available_for_collateral(vault)

    def available_vaults(self, vaults: Iterable[Vault]) -> list[Vault]:
        """Pledgeable vaults, in input order."""
        with self._lock:
            return [v for v in vaults if self.can_pledge(v)]

    # ------------------------------------------------------------------
    # Staleness
    # ------------------------------------------------------------------

    def stale_entries(self, max_age_seconds: float) -> list[PendingEntry]:
        now = self._clock()
        with self._lock:
            return [
                e for e in self.entries() if now - e.submitted_at >= max_age_seconds
            ]

    def expire_stale(self, max_age_seconds: float) -> list[PendingEntry]:
        """Remove marks older than ``max_age_seconds`` and return them."""
        with self._lock:
            stale = self.stale_entries(max_age_seconds)
            if not stale:
                return []
            for entry in stale:
                del self._entries[entry.vault_id]
            self._persist()
        now = self._clock()
        for entry in stale:
            logger.warning(
                "Expired pending %s for vault %s after %.0fs without ledger confirmation",
                entry.operation.value,
                entry.vault_id,
                now - entry.submitted_at,
            )
        return stale

    def raise_for_stale(self, max_age_seconds: float) -> None:
        stale = self.stale_entries(max_age_seconds)
        if stale:
            oldest = stale[0]
            raise StalePendingEntry(oldest.vault_id, self._clock() - oldest.submitted_at)

    def _persist(self) -> None:
        if self._store is not None:
            self._store.save(list(self._entries.values()))
