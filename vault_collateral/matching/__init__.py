"""Vault matching: exact subset-sum and the largest-first fallback."""
from .subset_sum import (
    DEFAULT_MAX_VAULTS,
    MatchResult,
    find_exact_match,
    largest_first_steps,
    select_largest_first,
    subset_sums,
)

__all__ = [
    "DEFAULT_MAX_VAULTS",
    "MatchResult",
    "find_exact_match",
    "largest_first_steps",
    "select_largest_first",
    "subset_sums",
]
