"""Debt repayment amount resolution."""
from .amounts import (
    DEFAULT_BUFFER_DIVISOR,
    REPAY_MAX,
    RepayPlan,
    full_repay_approval,
    resolve_full,
    resolve_partial,
)
from .resolver import RepaymentAmountResolver

__all__ = [
    "DEFAULT_BUFFER_DIVISOR",
    "REPAY_MAX",
    "RepayPlan",
    "RepaymentAmountResolver",
    "full_repay_approval",
    "resolve_full",
    "resolve_partial",
]
