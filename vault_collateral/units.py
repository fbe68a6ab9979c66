"""BTC amount conversions — exact, via Decimal."""
from __future__ import annotations

from decimal import Decimal, InvalidOperation

SATS_PER_BTC = 100_000_000


def btc_to_sats(amount: Decimal | str | int) -> int:
    """Convert a BTC amount to satoshis.

    Raises ValueError for non-numeric input or sub-satoshi precision.
    """
    try:
        value = Decimal(str(amount))
    except InvalidOperation as e:
        raise ValueError(f"Invalid BTC amount: {amount!r}") from e
    if not value.is_finite():
        raise ValueError(f"Invalid BTC amount: {amount!r}")

    sats = value * SATS_PER_BTC
    if sats != sats.to_integral_value():
        raise ValueError(f"BTC amount {amount} has sub-satoshi precision")
    return int(sats)


def sats_to_btc(sats: int) -> Decimal:
    return Decimal(sats) / SATS_PER_BTC


def format_btc(sats: int) -> str:
    """Render satoshis as a BTC string without trailing zeros, e.g. '0.7'."""
    text = f"{sats_to_btc(sats):.8f}".rstrip("0").rstrip(".")
    return text or "0"
