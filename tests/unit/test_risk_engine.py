"""Unit tests for position risk metrics."""
from __future__ import annotations

import math

import pytest
from hypothesis import given
from hypothesis import strategies as st

from vault_collateral.config import RiskConfig
from vault_collateral.models import AccountData
from vault_collateral.risk import (
    NO_DEBT,
    HealthStatus,
    RiskEngine,
    borrow_ratio,
    classify,
    format_health_factor,
    format_ratio,
    health_factor,
    is_healthy,
)

usd = st.floats(min_value=0.0, max_value=1e12, allow_nan=False, allow_infinity=False)


class TestHealthFactor:
    def test_exactly_at_liquidation(self) -> None:
        hf = health_factor(100.0, 80.0, 8000)
        assert hf == 1.0
        assert is_healthy(hf)

    def test_ten_thousand_six_thousand(self) -> None:
        assert health_factor(10_000.0, 6_000.0, 8000) == pytest.approx(1.3333, abs=1e-4)

    def test_ten_thousand_eight_thousand(self) -> None:
        assert health_factor(10_000.0, 8_000.0, 8000) == pytest.approx(1.0)

    def test_no_debt(self) -> None:
        assert health_factor(10_000.0, 0.0, 8000) == NO_DEBT

    def test_no_debt_no_collateral(self) -> None:
        hf = health_factor(0.0, 0.0, 8000)
        assert hf == NO_DEBT
        assert not math.isnan(hf)

    def test_negative_inputs_clamped(self) -> None:
        assert health_factor(100.0, -5.0, 8000) == NO_DEBT
        assert health_factor(-100.0, 50.0, 8000) == 0.0

    @given(usd, usd, st.integers(min_value=0, max_value=10_000))
    def test_never_nan(self, collateral: float, debt: float, bps: int) -> None:
        assert not math.isnan(health_factor(collateral, debt, bps))


class TestBorrowRatio:
    def test_sixty_percent(self) -> None:
        assert borrow_ratio(6_000.0, 10_000.0) == 60.0
        assert format_ratio(borrow_ratio(6_000.0, 10_000.0)) == "60.0%"

    def test_rounds_to_one_decimal(self) -> None:
        assert borrow_ratio(1.0, 3.0) == 33.3

    def test_zero_collateral(self) -> None:
        assert borrow_ratio(500.0, 0.0) == 0.0


class TestIsHealthy:
    def test_just_below_one(self) -> None:
        assert is_healthy(0.999) is False

    def test_one(self) -> None:
        assert is_healthy(1.0) is True

    def test_no_debt(self) -> None:
        assert is_healthy(NO_DEBT) is True

    def test_nan(self) -> None:
        assert is_healthy(float("nan")) is False


class TestClassify:
    @pytest.mark.parametrize(
        "hf,expected",
        [
            (NO_DEBT, HealthStatus.NO_DEBT),
            (2.0, HealthStatus.SAFE),
            (1.5, HealthStatus.SAFE),
            (1.2, HealthStatus.WARNING),
            (1.0, HealthStatus.WARNING),
            (0.95, HealthStatus.DANGER),
        ],
    )
    def test_buckets(self, hf: float, expected: HealthStatus) -> None:
        assert classify(hf) == expected

    def test_format_health_factor(self) -> None:
        assert format_health_factor(NO_DEBT) == "-"
        assert format_health_factor(1.33333) == "1.33"


class TestRiskEngine:
    def test_assess(self) -> None:
        metrics = RiskEngine().assess(10_000.0, 6_000.0, 8000)
        assert metrics.health_factor == pytest.approx(1.3333, abs=1e-4)
        assert metrics.borrow_ratio == 60.0
        assert metrics.is_healthy is True
        assert metrics.status == HealthStatus.WARNING

    def test_warning_threshold_from_config(self) -> None:
        engine = RiskEngine(RiskConfig(health_factor_warning=1.2))
        assert engine.assess(10_000.0, 6_000.0, 8000).status == HealthStatus.SAFE

    def test_unit_conversion(self) -> None:
        engine = RiskEngine()
        assert engine.to_base_units(25 * 10**26) == 25.0
        assert engine.to_ratio_units(15 * 10**17) == 1.5

    def test_project_withdraw_into_danger(self) -> None:
        engine = RiskEngine()
        current = engine.assess(10_000.0, 6_000.0, 8000)
        projected = engine.project(current, 8000, collateral_delta_usd=-3_000.0)
        assert projected.collateral_usd == 7_000.0
        assert projected.health_factor == pytest.approx(7_000 * 0.8 / 6_000)
        assert projected.is_healthy is False
        assert current.collateral_usd == 10_000.0

    def test_project_full_repay(self) -> None:
        engine = RiskEngine()
        current = engine.assess(10_000.0, 6_000.0, 8000)
        projected = engine.project(current, 8000, debt_delta_usd=-6_000.0)
        assert projected.health_factor == NO_DEBT
        assert projected.status == HealthStatus.NO_DEBT

    def test_project_overshooting_repay_clamps(self) -> None:
        engine = RiskEngine()
        current = engine.assess(1_000.0, 100.0, 8000)
        projected = engine.project(current, 8000, debt_delta_usd=-500.0)
        assert projected.debt_usd == 0.0

    def test_from_account_data(self) -> None:
        account = AccountData(
            collateral_value=10_000 * 10**26,
            debt_value=8_000 * 10**26,
            health_factor_wad=10**18,
            liquidation_threshold_bps=8000,
        )
        metrics = RiskEngine().from_account_data(account)
        assert metrics.collateral_usd == pytest.approx(10_000.0)
        assert metrics.debt_usd == pytest.approx(8_000.0)
        assert metrics.health_factor == pytest.approx(1.0)
        assert metrics.borrow_ratio == 80.0

    def test_from_account_data_default_threshold(self) -> None:
        account = AccountData(
            collateral_value=100 * 10**26,
            debt_value=80 * 10**26,
            health_factor_wad=0,
            liquidation_threshold_bps=0,
        )
        engine = RiskEngine()
        assert engine.from_account_data(account, default_bps=8000).health_factor == pytest.approx(1.0)
        assert engine.from_account_data(account).health_factor == 0.0
        assert engine.threshold_bps(account, 8000) == 8000

    def test_reported_threshold_wins_over_default(self) -> None:
        account = AccountData(
            collateral_value=100 * 10**26,
            debt_value=80 * 10**26,
            health_factor_wad=0,
            liquidation_threshold_bps=7000,
        )
        assert RiskEngine().threshold_bps(account, 8000) == 7000
