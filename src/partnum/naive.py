# -----------------------------------------------------------------------------
#  naive.py
#  Uncached P(n): the slow baseline the memoized evaluator is measured against.
# -----------------------------------------------------------------------------

from __future__ import annotations

from partnum.evaluator import pentagonal
from partnum.utility import as_query


def _naive(n: int, counter: list[int]) -> int:
    counter[0] += 1
    if n == 0:
        return 1
    total = 0
    for k in range(1, n + 1):
        first = n - pentagonal(k, -1)
        second = n - pentagonal(k, +1)
        term = 0
        if first >= 0:
            term += _naive(first, counter)
        if second >= 0:
            term += _naive(second, counter)
        if k & 1:
            total += term
        else:
            total -= term
    return total


def count_naive_calls(n: int) -> tuple[int, int]:
    """
    Return (P(n), number of recursive invocations) without any caching.

    The call count grows exponentially; keep n small.
    """
    n = as_query(n)
    counter = [0]
    value = _naive(n, counter)
    return value, counter[0]


def partition_naive(n: int) -> int:
    """P(n) by plain recursion, k = 1..n, no cache."""
    return count_naive_calls(n)[0]
