from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

# Version
try:
    __version__ = _pkg_version("partnum")
except PackageNotFoundError:
    __version__ = "0+unknown"

# Public API re-exports
from .evaluator import EvaluatorStats, PartitionEvaluator, pentagonal
from .naive import count_naive_calls, partition_naive
from .utility import UserInputError
from .verify import REFERENCE_VALUES, Mismatch, check_conformance, cross_check

__all__ = [
    "REFERENCE_VALUES",
    "EvaluatorStats",
    "Mismatch",
    "PartitionEvaluator",
    "UserInputError",
    "__version__",
    "check_conformance",
    "count_naive_calls",
    "cross_check",
    "partition_naive",
    "pentagonal",
]
