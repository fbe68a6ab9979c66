"""Collateral matching and position risk engine for BTC custody vaults."""

__version__ = "0.1.0"
