# -----------------------------------------------------------------------------
#  compare.py
#  Naive vs cold-cache vs warm-cache runs of the same query.
# -----------------------------------------------------------------------------

from __future__ import annotations

from time import perf_counter
from typing import NamedTuple

from partnum.evaluator import PartitionEvaluator
from partnum.naive import count_naive_calls
from partnum.utility import as_query


class ComparisonRow(NamedTuple):
    label: str
    value: int
    calls: int
    seconds: float


def compare_variants(n: int, *, naive_limit: int = 25) -> list[ComparisonRow]:
    """
    Evaluate P(n) three ways and report calls and time for each:

      naive  - plain recursion, no cache (skipped when n > naive_limit)
      cold   - fresh PartitionEvaluator
      warm   - the same evaluator queried again
    """
    n = as_query(n)
    rows: list[ComparisonRow] = []

    if n <= naive_limit:
        t0 = perf_counter()
        value, calls = count_naive_calls(n)
        rows.append(ComparisonRow("naive", value, calls, perf_counter() - t0))

    ev = PartitionEvaluator()
    t0 = perf_counter()
    value = ev.evaluate(n)
    elapsed = perf_counter() - t0
    rows.append(ComparisonRow("cold cache", value, ev.stats.calls, elapsed))

    before = ev.stats.calls
    t0 = perf_counter()
    value = ev.evaluate(n)
    elapsed = perf_counter() - t0
    rows.append(ComparisonRow("warm cache", value, ev.stats.calls - before, elapsed))

    return rows
