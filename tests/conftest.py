"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from vault_collateral.config import (
    AccountConfig,
    AppConfig,
    ChainConfig,
    EngineConfig,
    IndexerConfig,
    PendingConfig,
    PriceOracleConfig,
    PythConfig,
)
from vault_collateral.models import ReserveConfig, Vault, VaultStatus

DEPOSITOR = "0x" + "ab" * 20
PROXY = "0x" + "cd" * 20
CONTROLLER = "0x" + "ef" * 20
DEBT_TOKEN = "0x" + "12" * 20
SPOKE = "0x" + "34" * 20


class FakeClock:
    """Manually advanced clock for time-dependent tests."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class MemoryPendingStore:
    """PendingStore kept in memory; records every save."""

    def __init__(self, entries: list | None = None) -> None:
        self.entries = list(entries or [])
        self.saves: list[list] = []

    def load(self) -> list:
        return list(self.entries)

    def save(self, entries: list) -> None:
        self.entries = list(entries)
        self.saves.append(list(entries))


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_reserve() -> ReserveConfig:
    return ReserveConfig(reserve_id=2, liquidation_threshold_bps=8000, token_decimals=6)


@pytest.fixture()
def sample_chain_config() -> ChainConfig:
    return ChainConfig(
        rpc_endpoints=("https://rpc1.example.com", "https://rpc2.example.com"),
        rpc_timeout=10,
        contracts={
            "spoke": SPOKE,
            "controller": CONTROLLER,
            "debt_token": DEBT_TOKEN,
            "total_debt_selector": "0xaabbccdd",
        },
    )


@pytest.fixture()
def sample_pyth_config() -> PythConfig:
    return PythConfig(
        hermes_url="https://hermes.example.com/v2/updates/price/latest",
        feeds={"BTC": "bbb222"},
    )


@pytest.fixture()
def sample_app_config(
    tmp_path: Path,
    sample_reserve: ReserveConfig,
    sample_chain_config: ChainConfig,
    sample_pyth_config: PythConfig,
) -> AppConfig:
    return AppConfig(
        account=AccountConfig(app_id="aave", address=DEPOSITOR, proxy_address=PROXY),
        indexer=IndexerConfig(endpoints=("https://indexer.example.com/graphql",), timeout=10),
        chain=sample_chain_config,
        reserve=sample_reserve,
        engine=EngineConfig(max_vault_count=20),
        pending=PendingConfig(storage_dir=str(tmp_path / "pending")),
        price_oracle=PriceOracleConfig(provider="pyth", pyth=sample_pyth_config),
    )


# ---------------------------------------------------------------------------
# Model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def memory_store() -> MemoryPendingStore:
    return MemoryPendingStore()


@pytest.fixture()
def sample_vaults() -> list[Vault]:
    """0.3, 0.5 and 0.2 BTC, all available."""
    return [
        Vault(id="vault-a", amount=30_000_000, status=VaultStatus.AVAILABLE, owner=DEPOSITOR),
        Vault(id="vault-b", amount=50_000_000, status=VaultStatus.AVAILABLE, owner=DEPOSITOR),
        Vault(id="vault-c", amount=20_000_000, status=VaultStatus.AVAILABLE, owner=DEPOSITOR),
    ]


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    account:
      app_id: aave
      address: "0xDEPOSITOR"
      proxy_address: "0xPROXY"
    indexer:
      endpoints: ["https://indexer.example.com/graphql"]
      timeout: 10
    chain:
      rpc_endpoints: ["https://rpc.example.com"]
      rpc_timeout: 15
      contracts:
        spoke: "0xspoke"
        controller: "0xcontroller"
        debt_token: "0xtoken"
        total_debt_selector: "0xaabbccdd"
    reserve:
      reserve_id: 2
      liquidation_threshold_bps: 7500
      token_decimals: 6
    engine:
      max_vault_count: 12
      allow_greedy_fallback: true
    risk:
      health_factor_warning: 1.3
    repay:
      buffer_divisor: 5000
    pending:
      storage_dir: "/tmp/pending-test"
      max_age_minutes: 60
    price_oracle:
      provider: pyth
      pyth:
        hermes_url: "https://hermes.example.com"
        feeds: {BTC: "bbb"}
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file


# ---------------------------------------------------------------------------
# Sample indexer data
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_vault_items() -> list[dict]:
    return [
        {"id": "vault-a", "amount": "30000000", "status": "AVAILABLE", "isInUse": False,
         "depositor": DEPOSITOR},
        {"id": "vault-b", "amount": "50000000", "status": "IN_USE", "depositor": DEPOSITOR},
        {"id": "vault-c", "amount": "20000000", "status": "Available", "isInUse": True,
         "depositor": DEPOSITOR},
    ]


@pytest.fixture()
def sample_account_item() -> dict:
    # $10,000 collateral, $6,000 debt in 1e26 base units
    return {
        "totalCollateralValue": str(10_000 * 10**26),
        "totalDebtValue": str(6_000 * 10**26),
        "healthFactor": str(1_333_333_333_333_333_333),
        "liquidationThresholdBps": "8000",
    }
