# -----------------------------------------------------------------------------
#  evaluator.py
#  Memoized partition function P(n) via Euler's pentagonal number theorem.
# -----------------------------------------------------------------------------
"""
P(n) counts the ways to write n as a sum of positive integers, order ignored.
Euler's pentagonal number theorem gives the recurrence

    P(n) = sum_{k>=1} (-1)**(k+1) * [P(n - k(3k-1)/2) + P(n - k(3k+1)/2)]

with P(0) = 1 and P(m) = 0 for m < 0. The evaluator below caches every value
it computes, so each distinct n is worked out once per evaluator.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from partnum.utility import as_query

# Cold queries further than this above the largest cached key are warmed up
# bottom-up in steps of this size, bounding the recursion depth.
WARM_STEP = 256


def pentagonal(k: int, s: int) -> int:
    """Generalized pentagonal number k(3k + s)/2 for s in {-1, +1}."""
    # k(3k ± 1) is always even, so floor division is exact
    return k * (3 * k + s) // 2


@dataclass(frozen=True)
class EvaluatorStats:
    calls: int      # cache-consulting calls, top-level and recursive
    hits: int       # calls answered from the cache
    computed: int   # distinct values computed (P(0) is seeded, not computed)


class PartitionEvaluator:
    """
    Memoized P(n).

    Usage:
        p = PartitionEvaluator()
        p(10)          # 42
        p.evaluate(49) # 173525, reuses P(0)..P(10)
        10 in p        # True

    One evaluator owns one cache; separate evaluators share nothing. Cached
    keys are read without locking; first-time computation is serialized by a
    re-entrant lock, so concurrent callers never write a key twice.
    """

    def __init__(self) -> None:
        self._cache: dict[int, int] = {0: 1}
        self._top = 0
        self._lock = threading.RLock()
        self._calls = 0
        self._hits = 0

    # --- public API ------------------------------------------------------

    def evaluate(self, n: int) -> int:
        """
        Return P(n) for an integer n >= 0.

        Raises UserInputError for negative or non-integer n; a rejected
        query leaves the cache untouched.
        """
        n = as_query(n)
        value = self._cache.get(n)
        if value is not None:
            with self._lock:
                self._calls += 1
                self._hits += 1
            return value

        with self._lock:
            # Fill the gap below n in bounded steps
            for m in range(self._top + WARM_STEP, n, WARM_STEP):
                self._lookup(m)
            return self._lookup(n)

    __call__ = evaluate

    @property
    def cache(self) -> Mapping[int, int]:
        """Read-only view of the cache."""
        return MappingProxyType(self._cache)

    @property
    def max_cached(self) -> int:
        return self._top

    @property
    def stats(self) -> EvaluatorStats:
        with self._lock:
            return EvaluatorStats(
                calls=self._calls,
                hits=self._hits,
                computed=len(self._cache) - 1,
            )

    def __contains__(self, n: object) -> bool:
        return n in self._cache

    def __len__(self) -> int:
        return len(self._cache)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(cached={len(self._cache)}, max_cached={self._top})"

    # --- recurrence ------------------------------------------------------

    def _lookup(self, n: int) -> int:
        """Cache-consulting step of the recurrence. Caller holds the lock; n >= 0."""
        self._calls += 1
        value = self._cache.get(n)
        if value is not None:
            self._hits += 1
            return value

        total = 0
        k = 1
        while True:
            first = n - pentagonal(k, -1)
            if first < 0:
                # pentagonal(k, -1) < pentagonal(k, +1), both growing in k
                break
            second = n - pentagonal(k, +1)
            term = self._lookup(first)
            if second >= 0:
                term += self._lookup(second)
            if k & 1:
                total += term
            else:
                total -= term
            k += 1

        self._cache[n] = total
        if n > self._top:
            self._top = n
        return total
