"""Position risk metrics — pure functions, no state shared between calls."""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from ..config import RiskConfig
from ..models import AccountData

BPS_DENOMINATOR = 10_000

# Health factor reported when there is no debt. Never NaN.
NO_DEBT = math.inf

# Positions below this health factor can be liquidated.
LIQUIDATION_HEALTH_FACTOR = 1.0


class HealthStatus(str, Enum):
    NO_DEBT = "no_debt"
    SAFE = "safe"
    WARNING = "warning"
    DANGER = "danger"


@dataclass(frozen=True)
class RiskMetrics:
    collateral_usd: float
    debt_usd: float
    health_factor: float
    borrow_ratio: float
    is_healthy: bool
    status: HealthStatus


def health_factor(
    collateral_usd: float, debt_usd: float, liquidation_threshold_bps: int
) -> float:
    """Risk-weighted collateral over debt.

    health_factor = collateral * (threshold_bps / 10000) / debt

    Negative inputs are clamped to zero. Returns ``NO_DEBT`` when debt is zero.
    """
    collateral_usd = max(collateral_usd, 0.0)
    debt_usd = max(debt_usd, 0.0)
    threshold = max(liquidation_threshold_bps, 0)
    if debt_usd <= 0:
        return NO_DEBT
    return collateral_usd * threshold / BPS_DENOMINATOR / debt_usd


def borrow_ratio(debt_usd: float, collateral_usd: float) -> float:
    """Debt as a percentage of collateral, rounded to one decimal."""
    if collateral_usd <= 0:
        return 0.0
    return round(max(debt_usd, 0.0) / collateral_usd * 100, 1)


def format_ratio(ratio: float) -> str:
    return f"{ratio:.1f}%"


def format_health_factor(hf: float) -> str:
    if hf == NO_DEBT:
        return "-"
    return f"{hf:.2f}"


def is_healthy(hf: float) -> bool:
    if hf == NO_DEBT:
        return True
    if math.isnan(hf):
        return False
    return hf >= LIQUIDATION_HEALTH_FACTOR


def classify(hf: float, warning_threshold: float = 1.5) -> HealthStatus:
    if hf == NO_DEBT:
        return HealthStatus.NO_DEBT
    if not is_healthy(hf):
        return HealthStatus.DANGER
    if hf < warning_threshold:
        return HealthStatus.WARNING
    return HealthStatus.SAFE


class RiskEngine:
    """Converts protocol fixed-point values into risk metrics.

    Holds only immutable scale configuration, so the same instance can
    produce a current view and any number of projected views.
    """

    def __init__(self, config: RiskConfig | None = None) -> None:
        self._config = config or RiskConfig()
        self._base_scale = 10**self._config.base_currency_decimals
        self._wad_scale = 10**self._config.wad_decimals

    def to_base_units(self, oracle_value: int) -> float:
        """Oracle base-currency fixed point → USD."""
        return oracle_value / self._base_scale

    def to_ratio_units(self, wad_value: int) -> float:
        """WAD fixed point → plain ratio (1e18 → 1.0)."""
        return wad_value / self._wad_scale

    def health_factor(
        self, collateral_usd: float, debt_usd: float, liquidation_threshold_bps: int
    ) -> float:
        return health_factor(collateral_usd, debt_usd, liquidation_threshold_bps)

    def borrow_ratio(self, debt_usd: float, collateral_usd: float) -> float:
        return borrow_ratio(debt_usd, collateral_usd)

    def is_healthy(self, hf: float) -> bool:
        return is_healthy(hf)

    def classify(self, hf: float) -> HealthStatus:
        return classify(hf, self._config.health_factor_warning)

    def assess(
        self, collateral_usd: float, debt_usd: float, liquidation_threshold_bps: int
    ) -> RiskMetrics:
        collateral_usd = max(collateral_usd, 0.0)
        debt_usd = max(debt_usd, 0.0)
        hf = health_factor(collateral_usd, debt_usd, liquidation_threshold_bps)
        return RiskMetrics(
            collateral_usd=collateral_usd,
            debt_usd=debt_usd,
            health_factor=hf,
            borrow_ratio=borrow_ratio(debt_usd, collateral_usd),
            is_healthy=is_healthy(hf),
            status=self.classify(hf),
        )

    def project(
        self,
        current: RiskMetrics,
        liquidation_threshold_bps: int,
        collateral_delta_usd: float = 0.0,
        debt_delta_usd: float = 0.0,
    ) -> RiskMetrics:
        """What-if view after adding (or, with negative deltas, removing)
        collateral and debt. ``current`` is not modified."""
        return self.assess(
            current.collateral_usd + collateral_delta_usd,
            current.debt_usd + debt_delta_usd,
            liquidation_threshold_bps,
        )

    def from_account_data(
        self, account: AccountData, default_bps: int | None = None
    ) -> RiskMetrics:
        """Metrics from an oracle snapshot.

        ``default_bps`` stands in when the account reports no liquidation
        threshold, which happens before its first collateral is indexed.

        The health factor is recomputed from the converted values so that it
        agrees with ``project``; ``health_factor_wad`` is the on-chain figure
        and is available through ``to_ratio_units`` when needed.
        """
        return self.assess(
            self.to_base_units(account.collateral_value),
            self.to_base_units(account.debt_value),
            self.threshold_bps(account, default_bps),
        )

    def threshold_bps(self, account: AccountData, default_bps: int | None = None) -> int:
        if account.liquidation_threshold_bps or default_bps is None:
            return account.liquidation_threshold_bps
        return default_bps
