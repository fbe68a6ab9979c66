"""Collateral orchestration — snapshot → pending overlay → matching → risk."""
from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from ..config import AppConfig, EngineConfig
from ..errors import CollaboratorError, VaultLimitExceeded
from ..interfaces.price_oracle import PriceOracle
from ..interfaces.sources import SnapshotSource
from ..matching import (
    MatchResult,
    find_exact_match,
    largest_first_steps,
    select_largest_first,
    subset_sums,
)
from ..models import PendingEntry, PendingOperation, ReserveConfig, Vault
from ..pending import PendingStateLedger
from ..repay import RepaymentAmountResolver, RepayPlan
from ..risk import RiskEngine, RiskMetrics
from ..units import sats_to_btc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CollateralOptions:
    """Amounts (sats) the user may request. ``exact`` is False when the
    largest-first fallback produced them."""

    amounts: tuple[int, ...]
    exact: bool = True


@dataclass(frozen=True)
class VaultSelection:
    vault_ids: tuple[str, ...]
    total: int
    exact: bool = True


@dataclass(frozen=True)
class RiskView:
    current: RiskMetrics
    projected: RiskMetrics


class CollateralService:
    """Ties the engine components together for one account.

    Every collaborator is passed in; nothing is looked up globally.
    """

    def __init__(
        self,
        snapshot_source: SnapshotSource,
        ledger: PendingStateLedger,
        risk_engine: RiskEngine,
        reserve: ReserveConfig,
        depositor: str,
        proxy_address: str,
        engine_config: EngineConfig | None = None,
        price_oracle: PriceOracle | None = None,
        resolver: RepaymentAmountResolver | None = None,
        pending_max_age_seconds: float = 0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._snapshot_source = snapshot_source
        self._ledger = ledger
        self._risk = risk_engine
        self._reserve = reserve
        self._depositor = depositor
        self._proxy_address = proxy_address
        self._engine = engine_config or EngineConfig()
        self._oracle = price_oracle
        self._resolver = resolver
        self._pending_max_age = pending_max_age_seconds
        self._clock = clock

    @classmethod
    def from_config(cls, config: AppConfig) -> CollateralService:
        """Wire the production adapters described by ``config``."""
        from ..clients import EthRpcClient, IndexerClient
        from ..oracles import PythOracle
        from ..pending import JsonPendingStore

        store = JsonPendingStore(
            config.pending.storage_dir, config.account.app_id, config.account.address
        )
        # Without a separate position proxy the depositor holds the position.
        proxy_address = config.account.proxy_address or config.account.address
        rpc = EthRpcClient(config.chain) if config.chain.rpc_endpoints else None
        resolver = None
        if rpc is not None:
            resolver = RepaymentAmountResolver(
                debt_source=rpc,
                token_source=rpc,
                reserve_id=config.reserve.reserve_id,
                proxy_address=proxy_address,
                spender=config.chain.contracts.get("controller", ""),
                config=config.repay,
            )
        return cls(
            snapshot_source=IndexerClient(config.indexer),
            ledger=PendingStateLedger(store),
            risk_engine=RiskEngine(config.risk),
            reserve=config.reserve,
            depositor=config.account.address,
            proxy_address=proxy_address,
            engine_config=config.engine,
            price_oracle=PythOracle(config.price_oracle.pyth),
            resolver=resolver,
            pending_max_age_seconds=config.pending.max_age_minutes * 60,
        )

    @property
    def ledger(self) -> PendingStateLedger:
        return self._ledger

    @property
    def proxy_address(self) -> str:
        return self._proxy_address

    # ------------------------------------------------------------------
    # Snapshot & pending overlay
    # ------------------------------------------------------------------

    async def refresh(self) -> list[Vault]:
        """Fetch a fresh vault snapshot and reconcile pending marks with it."""
        taken_at = self._clock()
        vaults = await self._snapshot_source.fetch_vaults(self._depositor)
        self._ledger.reconcile(vaults, taken_at=taken_at)

        if self._pending_max_age > 0:
            self._ledger.expire_stale(self._pending_max_age)
        return vaults

    def mark_submitted(
        self, vault_ids: Sequence[str], operation: PendingOperation
    ) -> list[PendingEntry]:
        """Call right after the transaction layer accepted a submission."""
        return self._ledger.mark_pending(vault_ids, operation)

    def available_vaults(self, vaults: Sequence[Vault]) -> list[Vault]:
        return self._ledger.available_vaults(vaults)

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def _fallback_allowed(self, error: VaultLimitExceeded) -> bool:
        if not self._engine.allow_greedy_fallback:
            return False
        logger.warning("%s; falling back to largest-first selection (not exact)", error)
        return True

    def collateral_options(self, vaults: Sequence[Vault]) -> CollateralOptions:
        amounts = [v.amount for v in self.available_vaults(vaults)]
        try:
            return CollateralOptions(
                amounts=tuple(subset_sums(amounts, self._engine.max_vault_count))
            )
        except VaultLimitExceeded as e:
            if not self._fallback_allowed(e):
                raise
            return CollateralOptions(amounts=tuple(largest_first_steps(amounts)), exact=False)

    def select_vaults(self, vaults: Sequence[Vault], amount: int) -> VaultSelection:
        """Resolve the vault ids pledged for ``amount`` sats.

        Raises NoExactMatch when the amount is not reachable.
        """
        available = self.available_vaults(vaults)
        amounts = [v.amount for v in available]
        result: MatchResult
        try:
            result = find_exact_match(amounts, amount, self._engine.max_vault_count)
        except VaultLimitExceeded as e:
            if not self._fallback_allowed(e):
                raise
            result = select_largest_first(amounts, amount)

        selection = VaultSelection(
            vault_ids=tuple(available[i].id for i in result.indices),
            total=result.total,
            exact=result.exact,
        )
        logger.debug("Selected %s for %d sats", selection.vault_ids, amount)
        return selection

    # ------------------------------------------------------------------
    # Risk
    # ------------------------------------------------------------------

    async def _btc_price(self) -> float:
        if self._oracle is None:
            raise CollaboratorError("No price oracle configured")
        price = (await self._oracle.fetch_prices(["BTC"])).get("BTC", 0.0)
        if price <= 0:
            raise CollaboratorError("BTC price unavailable")
        return price

    async def _current(self) -> tuple[RiskMetrics, int]:
        account = await self._snapshot_source.fetch_account_data(self._proxy_address)
        default_bps = self._reserve.liquidation_threshold_bps
        metrics = self._risk.from_account_data(account, default_bps=default_bps)
        return metrics, self._risk.threshold_bps(account, default_bps)

    async def current_risk(self) -> RiskMetrics:
        metrics, _ = await self._current()
        return metrics

    async def risk_view(
        self,
        collateral_delta_sats: int = 0,
        debt_delta_usd: float = 0.0,
    ) -> RiskView:
        """Current metrics plus a what-if projection.

        Positive ``collateral_delta_sats`` adds collateral, negative withdraws;
        ``debt_delta_usd`` is a borrow when positive and a repay when negative.
        """
        current, bps = await self._current()

        collateral_delta_usd = 0.0
        if collateral_delta_sats:
            price = await self._btc_price()
            collateral_delta_usd = float(sats_to_btc(collateral_delta_sats)) * price

        projected = self._risk.project(
            current,
            bps,
            collateral_delta_usd=collateral_delta_usd,
            debt_delta_usd=debt_delta_usd,
        )
        return RiskView(current=current, projected=projected)

    # ------------------------------------------------------------------
    # Repayment
    # ------------------------------------------------------------------

    async def resolve_repay(self, owner: str, amount: int | None = None) -> RepayPlan:
        """Partial repay of ``amount`` token units, or full repay when None."""
        if self._resolver is None:
            raise CollaboratorError("Repayment needs chain RPC endpoints")
        if amount is None:
            return await self._resolver.resolve_full(owner)
        return await self._resolver.resolve_partial(owner, amount)
