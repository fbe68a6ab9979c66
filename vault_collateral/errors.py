"""Exception hierarchy for the collateral engine."""
from __future__ import annotations


class VaultCollateralError(Exception):
    """Base class for all engine errors."""


class NoExactMatch(VaultCollateralError):
    """Requested amount is not a reachable sum of available vaults."""

    def __init__(self, target: int) -> None:
        super().__init__(
            f"No combination of available vaults sums to exactly {target} sats; "
            "choose a different amount"
        )
        self.target = target


class VaultLimitExceeded(VaultCollateralError):
    """Too many vaults for exact subset-sum enumeration."""

    def __init__(self, count: int, limit: int) -> None:
        super().__init__(
            f"{count} vaults exceeds the exact-matching limit of {limit}"
        )
        self.count = count
        self.limit = limit


class NoDebtToRepay(VaultCollateralError):
    """Full repayment requested while on-chain debt is zero."""

    def __init__(self) -> None:
        super().__init__("No debt to repay")


class InsufficientBalance(VaultCollateralError):
    """Wallet balance does not cover the resolved amount."""

    def __init__(self, required: int, available: int) -> None:
        self.required = required
        self.available = available
        self.shortfall = required - available
        super().__init__(
            f"Insufficient balance: need {required}, have {available} "
            f"(short by {self.shortfall})"
        )


class StalePendingEntry(VaultCollateralError):
    """A pending vault never reconciled against the ledger."""

    def __init__(self, vault_id: str, age_seconds: float) -> None:
        super().__init__(
            f"Vault {vault_id} has been pending for {age_seconds:.0f}s "
            "without ledger confirmation"
        )
        self.vault_id = vault_id
        self.age_seconds = age_seconds


class CollaboratorError(VaultCollateralError):
    """An external data source failed or returned malformed data."""
