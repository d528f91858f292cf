# -----------------------------------------------------------------------------
#  verify.py
#  Conformance checks: golden OEIS values and an independent sympy oracle.
# -----------------------------------------------------------------------------

from __future__ import annotations

from collections.abc import Callable
from typing import NamedTuple

from partnum.evaluator import PartitionEvaluator
from partnum.utility import UserInputError

# OEIS A000041, n = 0..49 (https://oeis.org/A000041)
REFERENCE_VALUES: tuple[int, ...] = (
    1, 1, 2, 3, 5, 7, 11, 15, 22, 30,
    42, 56, 77, 101, 135, 176, 231, 297, 385, 490,
    627, 792, 1002, 1255, 1575, 1958, 2436, 3010, 3718, 4565,
    5604, 6842, 8349, 10143, 12310, 14883, 17977, 21637, 26015, 31185,
    37338, 44583, 53174, 63261, 75175, 89134, 105558, 124754, 147273, 173525,
)


class Mismatch(NamedTuple):
    n: int
    expected: int
    got: int


def check_conformance(evaluator: PartitionEvaluator | None = None) -> list[Mismatch]:
    """
    Query n = 0..49 in order and compare with REFERENCE_VALUES.
    Returns the mismatches; an empty list means the evaluator conforms.
    """
    ev = evaluator if evaluator is not None else PartitionEvaluator()
    out: list[Mismatch] = []
    for n, expected in enumerate(REFERENCE_VALUES):
        got = ev.evaluate(n)
        if got != expected:
            out.append(Mismatch(n, expected, got))
    return out


def _sympy_partition(n: int) -> int:
    from sympy.functions.combinatorial.numbers import partition  # noqa: PLC0415  (heavy import; only on demand)
    return int(partition(n))


def cross_check(
    evaluator: PartitionEvaluator | None = None,
    upto: int = 200,
    oracle: Callable[[int], int] | None = None,
) -> list[Mismatch]:
    """
    Compare P(0)..P(upto) with an independent implementation.
    The default oracle is sympy's partition function.
    """
    if upto < 0:
        raise UserInputError(f"cross-check bound must be non-negative, got {upto}.")
    ev = evaluator if evaluator is not None else PartitionEvaluator()
    ref = oracle or _sympy_partition
    out: list[Mismatch] = []
    for n in range(upto + 1):
        got = ev.evaluate(n)
        expected = ref(n)
        if got != expected:
            out.append(Mismatch(n, expected, got))
    return out
