"""Pure repayment amount resolution — no I/O, integer token units only."""
from __future__ import annotations

from dataclasses import dataclass

from ..errors import InsufficientBalance, NoDebtToRepay

# Reserved "repay everything" value. The settlement contract caps the pull at
# whatever is owed when the transaction executes.
REPAY_MAX = 2**256 - 1

# debt / 10_000 → 0.01% headroom for interest accrued before settlement.
DEFAULT_BUFFER_DIVISOR = 10_000


@dataclass(frozen=True)
class RepayPlan:
    """Parameters for the transaction layer.

    ``approval_amount`` is None when the existing allowance already covers
    the repayment.
    """

    approval_amount: int | None
    repay_amount: int
    is_full: bool = False

    @property
    def needs_approval(self) -> bool:
        return self.approval_amount is not None


def full_repay_approval(
    current_debt: int, buffer_divisor: int = DEFAULT_BUFFER_DIVISOR
) -> int:
    """Debt plus a relative buffer: ``debt + debt // buffer_divisor``.

    >>> full_repay_approval(1_000_000)
    1000100
    """
    if buffer_divisor <= 0:
        raise ValueError("buffer_divisor must be positive")
    return current_debt + current_debt // buffer_divisor


def resolve_partial(amount: int, allowance: int, balance: int) -> RepayPlan:
    """Repay exactly ``amount``; approve exactly ``amount`` if needed."""
    if amount <= 0:
        raise ValueError("Repay amount must be greater than 0")
    if balance < amount:
        raise InsufficientBalance(required=amount, available=balance)

    approval = None if allowance >= amount else amount
    return RepayPlan(approval_amount=approval, repay_amount=amount)


def resolve_full(
    current_debt: int,
    allowance: int,
    balance: int,
    buffer_divisor: int = DEFAULT_BUFFER_DIVISOR,
    max_sentinel: int = REPAY_MAX,
) -> RepayPlan:
    """Repay everything owed.

    ``current_debt`` must be freshly read from the ledger. The buffer only
    widens the approval; the repay call carries ``max_sentinel`` so nothing
    beyond the real debt is ever collected.
    """
    if current_debt <= 0:
        raise NoDebtToRepay()
    if balance < current_debt:
        raise InsufficientBalance(required=current_debt, available=balance)

    approval_amount = full_repay_approval(current_debt, buffer_divisor)
    approval = None if allowance >= approval_amount else approval_amount
    return RepayPlan(approval_amount=approval, repay_amount=max_sentinel, is_full=True)
