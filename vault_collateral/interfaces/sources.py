"""Ledger-facing protocols — vault snapshots, live debt, token state."""
from typing import Protocol

from ..models import AccountData, Vault


class SnapshotSource(Protocol):
    """Eventually-consistent view of vaults and account figures."""

    async def fetch_vaults(self, depositor: str) -> list[Vault]: ...

    async def fetch_account_data(self, proxy_address: str) -> AccountData: ...


class DebtSource(Protocol):
    """Authoritative, live debt. Must never be served from a cache."""

    async def get_user_total_debt(self, reserve_id: int, proxy_address: str) -> int: ...


class TokenSource(Protocol):
    """Debt-token allowance and balance for the repaying wallet."""

    async def get_allowance(self, owner: str, spender: str) -> int: ...

    async def get_balance(self, owner: str) -> int: ...
