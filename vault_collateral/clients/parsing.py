"""Pure parsing of indexer and RPC payloads — no I/O."""
from __future__ import annotations

from typing import Any

from ..errors import CollaboratorError
from ..models import AccountData, Vault, VaultStatus

_STATUS_ALIASES: dict[str, VaultStatus] = {
    "available": VaultStatus.AVAILABLE,
    "active": VaultStatus.AVAILABLE,
    "inuse": VaultStatus.IN_USE,
    "pendingdeposit": VaultStatus.PENDING_DEPOSIT,
    "pending": VaultStatus.PENDING_DEPOSIT,
    "pendingwithdraw": VaultStatus.PENDING_WITHDRAW,
    "redeemed": VaultStatus.REDEEMED,
    "liquidated": VaultStatus.LIQUIDATED,
}


def parse_status(raw: str) -> VaultStatus:
    """Normalise indexer status spellings.

    Examples:
        "IN_USE" → VaultStatus.IN_USE
        "PendingWithdraw" → VaultStatus.PENDING_WITHDRAW
    """
    key = raw.replace("_", "").replace(" ", "").lower()
    try:
        return _STATUS_ALIASES[key]
    except KeyError:
        raise CollaboratorError(f"Unknown vault status: {raw!r}") from None


def parse_vault(item: dict[str, Any]) -> Vault:
    """Build a Vault from an indexer item.

    Some indexers report an available vault that is pledged through a
    separate ``isInUse`` flag; that vault is in use.
    """
    try:
        vault_id = str(item["id"])
        amount = int(item["amount"])
        status = parse_status(str(item["status"]))
    except (KeyError, TypeError, ValueError) as e:
        raise CollaboratorError(f"Malformed vault entry {item!r}: {e}") from e

    if status == VaultStatus.AVAILABLE and item.get("isInUse"):
        status = VaultStatus.IN_USE
    return Vault(
        id=vault_id,
        amount=amount,
        status=status,
        owner=str(item.get("depositor", "")),
    )


def parse_vaults(data: dict[str, Any]) -> list[Vault]:
    items = (data.get("vaults") or {}).get("items", [])
    return [parse_vault(item) for item in items]


def parse_account_data(data: dict[str, Any]) -> AccountData:
    """Parse ``userAccount`` into AccountData. A missing account is empty."""
    account = data.get("userAccount")
    if not account:
        return AccountData(
            collateral_value=0,
            debt_value=0,
            health_factor_wad=0,
            liquidation_threshold_bps=0,
        )
    try:
        return AccountData(
            collateral_value=int(account["totalCollateralValue"]),
            debt_value=int(account["totalDebtValue"]),
            health_factor_wad=int(account["healthFactor"]),
            liquidation_threshold_bps=int(account["liquidationThresholdBps"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise CollaboratorError(f"Malformed account data {account!r}: {e}") from e


# ---------------------------------------------------------------------------
# ABI words
# ---------------------------------------------------------------------------


def encode_address(address: str) -> str:
    """Left-pad a 20-byte address to a 32-byte ABI word (hex, no prefix)."""
    hex_part = address.lower().removeprefix("0x")
    if len(hex_part) != 40:
        raise ValueError(f"Invalid address: {address}")
    return hex_part.rjust(64, "0")


def encode_uint(value: int) -> str:
    if value < 0:
        raise ValueError("uint cannot be negative")
    return format(value, "x").rjust(64, "0")


def decode_uint(result: str) -> int:
    """Decode the first 32-byte word of an ``eth_call`` result."""
    hex_part = result.removeprefix("0x")
    if not hex_part:
        raise CollaboratorError("Empty eth_call result")
    return int(hex_part[:64], 16)
