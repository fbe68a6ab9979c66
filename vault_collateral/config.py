"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .models import ReserveConfig

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AccountConfig:
    app_id: str = "aave"
    address: str = ""
    proxy_address: str = ""


@dataclass(frozen=True)
class IndexerConfig:
    endpoints: tuple[str, ...] = ()
    timeout: int = 30


@dataclass(frozen=True)
class ChainConfig:
    rpc_endpoints: tuple[str, ...] = ()
    rpc_timeout: int = 30
    contracts: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class EngineConfig:
    max_vault_count: int = 20
    allow_greedy_fallback: bool = False


@dataclass(frozen=True)
class RiskConfig:
    # Aave oracle base currency: 1e26 == $1
    base_currency_decimals: int = 26
    wad_decimals: int = 18
    health_factor_warning: float = 1.5


@dataclass(frozen=True)
class RepayConfig:
    # debt / 10_000 == 0.01% buffer on full-repay approvals
    buffer_divisor: int = 10_000


@dataclass(frozen=True)
class PendingConfig:
    storage_dir: str = "~/.vault-collateral/pending"
    max_age_minutes: int = 0  # 0 disables expiry


@dataclass(frozen=True)
class PythConfig:
    hermes_url: str = "https://hermes.pyth.network/v2/updates/price/latest"
    feeds: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PriceOracleConfig:
    provider: str = "pyth"
    pyth: PythConfig = field(default_factory=PythConfig)


@dataclass(frozen=True)
class AppConfig:
    account: AccountConfig = field(default_factory=AccountConfig)
    indexer: IndexerConfig = field(default_factory=IndexerConfig)
    chain: ChainConfig = field(default_factory=ChainConfig)
    reserve: ReserveConfig = field(
        default_factory=lambda: ReserveConfig(
            reserve_id=0, liquidation_threshold_bps=8000, token_decimals=6
        )
    )
    engine: EngineConfig = field(default_factory=EngineConfig)
    risk: RiskConfig = field(default_factory=RiskConfig)
    repay: RepayConfig = field(default_factory=RepayConfig)
    pending: PendingConfig = field(default_factory=PendingConfig)
    price_oracle: PriceOracleConfig = field(default_factory=PriceOracleConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_account(raw: dict[str, Any]) -> AccountConfig:
    return AccountConfig(
        app_id=str(raw.get("app_id", "aave")),
        address=str(raw.get("address", "")),
        proxy_address=str(raw.get("proxy_address", "")),
    )


def _build_indexer(raw: dict[str, Any]) -> IndexerConfig:
    return IndexerConfig(
        endpoints=tuple(e for e in raw.get("endpoints", []) if e),
        timeout=int(raw.get("timeout", 30)),
    )


def _build_chain(raw: dict[str, Any]) -> ChainConfig:
    return ChainConfig(
        rpc_endpoints=tuple(e for e in raw.get("rpc_endpoints", []) if e),
        rpc_timeout=int(raw.get("rpc_timeout", 30)),
        contracts={k: str(v) for k, v in raw.get("contracts", {}).items()},
    )


def _build_reserve(raw: dict[str, Any]) -> ReserveConfig:
    return ReserveConfig(
        reserve_id=int(raw.get("reserve_id", 0)),
        liquidation_threshold_bps=int(raw.get("liquidation_threshold_bps", 8000)),
        token_decimals=int(raw.get("token_decimals", 6)),
        borrowable=bool(raw.get("borrowable", True)),
    )


def _build_engine(raw: dict[str, Any]) -> EngineConfig:
    return EngineConfig(
        max_vault_count=int(raw.get("max_vault_count", 20)),
        allow_greedy_fallback=bool(raw.get("allow_greedy_fallback", False)),
    )


def _build_risk(raw: dict[str, Any]) -> RiskConfig:
    return RiskConfig(
        base_currency_decimals=int(raw.get("base_currency_decimals", 26)),
        wad_decimals=int(raw.get("wad_decimals", 18)),
        health_factor_warning=float(raw.get("health_factor_warning", 1.5)),
    )


def _build_repay(raw: dict[str, Any]) -> RepayConfig:
    return RepayConfig(buffer_divisor=int(raw.get("buffer_divisor", 10_000)))


def _build_pending(raw: dict[str, Any]) -> PendingConfig:
    return PendingConfig(
        storage_dir=str(raw.get("storage_dir", PendingConfig.storage_dir)),
        max_age_minutes=int(raw.get("max_age_minutes", 0)),
    )


def _build_price_oracle(raw: dict[str, Any]) -> PriceOracleConfig:
    pyth_raw = raw.get("pyth", {})
    return PriceOracleConfig(
        provider=raw.get("provider", "pyth"),
        pyth=PythConfig(
            hermes_url=pyth_raw.get("hermes_url", PythConfig.hermes_url),
            feeds=dict(pyth_raw.get("feeds", {})),
        ),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        account=_build_account(raw.get("account", {})),
        indexer=_build_indexer(raw.get("indexer", {})),
        chain=_build_chain(raw.get("chain", {})),
        reserve=_build_reserve(raw.get("reserve", {})),
        engine=_build_engine(raw.get("engine", {})),
        risk=_build_risk(raw.get("risk", {})),
        repay=_build_repay(raw.get("repay", {})),
        pending=_build_pending(raw.get("pending", {})),
        price_oracle=_build_price_oracle(raw.get("price_oracle", {})),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.account.address:
        raise ValueError("Account address must be configured")
    if not cfg.account.app_id:
        raise ValueError("Account app_id must be configured")
    if not cfg.indexer.endpoints:
        raise ValueError("At least one indexer endpoint must be configured")

    bps = cfg.reserve.liquidation_threshold_bps
    if not 0 <= bps <= 10_000:
        raise ValueError(
            f"liquidation_threshold_bps must be within [0, 10000], got {bps}"
        )
    if cfg.repay.buffer_divisor <= 0:
        raise ValueError("repay.buffer_divisor must be positive")
    if cfg.engine.max_vault_count < 1:
        raise ValueError("engine.max_vault_count must be at least 1")
    if cfg.pending.max_age_minutes < 0:
        raise ValueError("pending.max_age_minutes cannot be negative")
