"""Repayment resolver — reads live debt and token state, then resolves amounts."""
from __future__ import annotations

import logging

from ..config import RepayConfig
from ..interfaces.sources import DebtSource, TokenSource
from . import amounts
from .amounts import RepayPlan

logger = logging.getLogger(__name__)


class RepaymentAmountResolver:
    """Resolve approve/repay amounts for one reserve and one borrower."""

    def __init__(
        self,
        debt_source: DebtSource,
        token_source: TokenSource,
        reserve_id: int,
        proxy_address: str,
        spender: str,
        config: RepayConfig | None = None,
    ) -> None:
        self._debt_source = debt_source
        self._token_source = token_source
        self._reserve_id = reserve_id
        self._proxy_address = proxy_address
        self._spender = spender
        self._config = config or RepayConfig()

    @property
    def proxy_address(self) -> str:
        return self._proxy_address

    async def _allowance_and_balance(self, owner: str) -> tuple[int, int]:
        allowance = await self._token_source.get_allowance(owner, self._spender)
        balance = await self._token_source.get_balance(owner)
        return allowance, balance

    async def resolve_partial(self, owner: str, amount: int) -> RepayPlan:
        allowance, balance = await self._allowance_and_balance(owner)
        plan = amounts.resolve_partial(amount, allowance, balance)
        logger.info(
            "Partial repay of %d: %s",
            amount,
            f"approve {plan.approval_amount}" if plan.needs_approval else "allowance sufficient",
        )
        return plan

    async def resolve_full(self, owner: str) -> RepayPlan:
        # Interest accrues every block; always ask the ledger, never a cache.
        current_debt = await self._debt_source.get_user_total_debt(
            self._reserve_id, self._proxy_address
        )
        allowance, balance = await self._allowance_and_balance(owner)
        plan = amounts.resolve_full(
            current_debt,
            allowance,
            balance,
            buffer_divisor=self._config.buffer_divisor,
        )
        logger.info(
            "Full repay: live debt %d, %s",
            current_debt,
            f"approve {plan.approval_amount}" if plan.needs_approval else "allowance sufficient",
        )
        return plan
