"""Pure vault matching functions — no I/O.

Two policies live here and must not be confused:

* **Exact** (`subset_sums`, `find_exact_match`): only amounts that some subset
  of vaults sums to exactly are offered or accepted. Vaults are indivisible,
  so a request is never over- or under-pledged. Enumeration is exponential in
  the worst case (up to 2^N distinct sums) and refuses to run for more than
  ``max_vaults`` inputs.
* **Largest-first** (`largest_first_steps`, `select_largest_first`): the
  approximate fallback for large vault counts. It picks the biggest vaults
  until the target is covered and can overshoot, so its results carry
  ``exact=False``.

All amounts are integers in satoshis.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ..errors import NoExactMatch, VaultLimitExceeded

# 2^20 subsets is the worst case we are willing to enumerate synchronously.
DEFAULT_MAX_VAULTS = 20


@dataclass(frozen=True)
class MatchResult:
    """Indices into the input amount list, ascending, and what they sum to."""

    indices: tuple[int, ...]
    total: int
    exact: bool = True


def _check_inputs(amounts: Sequence[int], max_vaults: int) -> None:
    if len(amounts) > max_vaults:
        raise VaultLimitExceeded(len(amounts), max_vaults)
    for amount in amounts:
        if amount <= 0:
            raise ValueError(f"Vault amounts must be positive, got {amount}")


def subset_sums(
    amounts: Sequence[int], max_vaults: int = DEFAULT_MAX_VAULTS
) -> list[int]:
    """Every strictly positive sum reachable by some subset, sorted ascending.

    Empty input gives an empty list; a zero request is always valid and is
    not part of this index.

    Example:
        [30, 50, 20] → [20, 30, 50, 70, 80, 100]
    """
    _check_inputs(amounts, max_vaults)

    sums = {0}
    for amount in amounts:
        sums |= {s + amount for s in sums}
    sums.discard(0)
    return sorted(sums)


def find_exact_match(
    amounts: Sequence[int], target: int, max_vaults: int = DEFAULT_MAX_VAULTS
) -> MatchResult:
    """Find vault indices whose amounts sum exactly to ``target``.

    Tie-break: vaults are taken in input order and each one extends the
    already-reachable sums in ascending order; whichever combination reaches
    a sum first keeps it. The same input therefore always yields the same
    selection.

    Raises:
        NoExactMatch: target exceeds the total or is not a reachable sum.
        VaultLimitExceeded: more than ``max_vaults`` amounts.
    """
    if target <= 0:
        return MatchResult(indices=(), total=0)

    _check_inputs(amounts, max_vaults)
    if target > sum(amounts):
        raise NoExactMatch(target)

    # sum -> (previous sum, index of the vault that extended it)
    back: dict[int, tuple[int, int]] = {}
    reachable = [0]
    for index, amount in enumerate(amounts):
        extended: list[int] = []
        for s in reachable:
            new_sum = s + amount
            if new_sum > target or new_sum in back:
                continue
            back[new_sum] = (s, index)
            extended.append(new_sum)
        if target in back:
            break
        reachable = sorted(reachable + extended)

    if target not in back:
        raise NoExactMatch(target)

    indices: list[int] = []
    current = target
    while current:
        previous, index = back[current]
        indices.append(index)
        current = previous
    return MatchResult(indices=tuple(sorted(indices)), total=target)


def _largest_first_order(amounts: Sequence[int]) -> list[int]:
    # sorted() is stable, so equal amounts keep their input order
    return sorted(range(len(amounts)), key=lambda i: amounts[i], reverse=True)


def largest_first_steps(amounts: Sequence[int]) -> list[int]:
    """Totals the largest-first policy can land on exactly (its prefix sums)."""
    steps: list[int] = []
    running = 0
    for index in _largest_first_order(amounts):
        running += amounts[index]
        steps.append(running)
    return steps


def select_largest_first(amounts: Sequence[int], target: int) -> MatchResult:
    """Approximate selection: biggest vaults first until ``target`` is covered.

    NOT exact — the returned ``total`` may exceed ``target`` but never falls
    short of it.

    Raises:
        NoExactMatch: every vault together is still below ``target``.
    """
    if target <= 0:
        return MatchResult(indices=(), total=0, exact=False)
    if target > sum(amounts):
        raise NoExactMatch(target)

    chosen: list[int] = []
    total = 0
    for index in _largest_first_order(amounts):
        if total >= target:
            break
        chosen.append(index)
        total += amounts[index]
    return MatchResult(indices=tuple(sorted(chosen)), total=total, exact=False)
