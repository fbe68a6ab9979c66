"""Data models — all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class VaultStatus(str, Enum):
    """Lifecycle status of a custody vault as reported by the ledger."""

    AVAILABLE = "available"
    IN_USE = "in_use"
    PENDING_DEPOSIT = "pending_deposit"
    PENDING_WITHDRAW = "pending_withdraw"
    REDEEMED = "redeemed"
    LIQUIDATED = "liquidated"


class PendingOperation(str, Enum):
    """Collateral-changing operation a vault was submitted for."""

    ADD_COLLATERAL = "add"
    WITHDRAW = "withdraw"
    REDEEM = "redeem"


@dataclass(frozen=True)
class Vault:
    """Single indivisible BTC deposit. ``amount`` is in satoshis."""

    id: str
    amount: int
    status: VaultStatus
    owner: str = ""


@dataclass(frozen=True)
class CollateralEntry:
    """One vault pledged to a position. Active while ``removed_at`` is None."""

    vault_id: str
    amount: int
    added_at: int
    removed_at: int | None = None

    @property
    def is_active(self) -> bool:
        return self.removed_at is None


@dataclass(frozen=True)
class Position:
    """A depositor's collateral record with the lending protocol."""

    depositor: str
    proxy_address: str
    total_collateral: int
    entries: tuple[CollateralEntry, ...] = ()

    def active_collateral(self) -> int:
        return sum(e.amount for e in self.entries if e.is_active)

    def is_reconciled(self) -> bool:
        """True once the active entries add up to ``total_collateral``.

        The two can diverge while a collateral change is still being indexed.
        """
        return self.active_collateral() == self.total_collateral


@dataclass(frozen=True)
class ReserveConfig:
    reserve_id: int
    liquidation_threshold_bps: int
    token_decimals: int
    borrowable: bool = True


@dataclass(frozen=True)
class DebtPosition:
    """Debt in a reserve. ``total_debt`` is in token units, interest included."""

    drawn_shares: int
    premium_shares: int
    total_debt: int

    @property
    def has_debt(self) -> bool:
        return self.drawn_shares > 0 or self.premium_shares > 0


@dataclass(frozen=True)
class AccountData:
    """Oracle-derived account figures, still in protocol fixed-point.

    ``collateral_value`` and ``debt_value`` use the oracle base-currency
    scale, ``health_factor_wad`` uses WAD.
    """

    collateral_value: int
    debt_value: int
    health_factor_wad: int
    liquidation_threshold_bps: int


@dataclass(frozen=True)
class PendingEntry:
    vault_id: str
    operation: PendingOperation
    submitted_at: float
