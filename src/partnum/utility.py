# -----------------------------------------------------------------------------
#  Utility functions
# -----------------------------------------------------------------------------

from __future__ import annotations

import operator
import os
import sys


class UserInputError(Exception):
    pass


def as_query(n: object) -> int:
    """
    Validate a top-level partition query and return it as a plain int.

    Accepts int and int-like objects (anything implementing __index__).
    Rejects bool, float, str and negative values with UserInputError.
    """
    if isinstance(n, bool):
        raise UserInputError(f"n must be an integer, not {typename(n)}.")
    try:
        value = operator.index(n)
    except TypeError:
        raise UserInputError(f"n must be an integer, not {typename(n)}.") from None
    if value < 0:
        raise UserInputError(f"n must be non-negative, got {value}.")
    return int(value)


def dec_digits(n: int) -> int:
    """Exact decimal digit count without str(); handles n >= 0."""
    n = abs(n)
    if n == 0:
        return 1
    # floor(log10(n)) ~= floor(bitlen*log10(2))
    bl = n.bit_length()
    est = int((bl * 30103) // 100000)
    # bring into correct decade with at most a couple of steps
    p10 = 10 ** est
    if n < p10:
        while n < p10:
            est -= 1
            p10 //= 10
    else:
        p10 *= 10
        while n >= p10:
            est += 1
            p10 *= 10
    return est + 1


def clear_screen(keep_scrollback: bool = False) -> None:
    """
    Clear the terminal screen.
    - On Windows: uses 'cls'
    - On POSIX: ANSI sequences; optionally clear scrollback
    """
    if not sys.stdout.isatty():
        return
    if os.name == "nt":
        os.system("cls")
        return
    seq = "\033[H\033[2J" if keep_scrollback else "\033[3J\033[H\033[2J"
    sys.stdout.write(seq)
    sys.stdout.flush()


def typename(v: object) -> str:
    return type(v).__name__


def flatten_dotted(d: dict, prefix: str = "") -> dict[str, object]:
    out: dict[str, object] = {}
    for k, v in (d or {}).items():
        key = f"{prefix}.{k}" if prefix else str(k)
        if isinstance(v, dict):
            out.update(flatten_dotted(v, key))
        else:
            out[key] = v
    return out


def merge_nested(base: dict, override: dict) -> dict:
    """Return a copy of base with override merged in, table by table."""
    out = {k: merge_nested(v, {}) if isinstance(v, dict) else v for k, v in base.items()}
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = merge_nested(out[k], v)
        else:
            out[k] = v
    return out


def parse_range(text: str) -> tuple[int, int]:
    """
    Parse 'A:B' (inclusive) into (A, B). A single value 'B' means 0:B.
    """
    s = (text or "").strip()
    if not s:
        raise UserInputError("empty range; use A:B, e.g. 0:20.")
    head, sep, tail = s.partition(":")
    try:
        lo = int(head.strip().replace("_", "")) if sep else 0
        hi = int((tail if sep else head).strip().replace("_", ""))
    except ValueError:
        raise UserInputError(f"invalid range '{text}'; use A:B, e.g. 0:20.") from None
    if lo < 0 or hi < 0:
        raise UserInputError(f"range bounds must be non-negative, got '{text}'.")
    if lo > hi:
        raise UserInputError(f"range start {lo} is greater than end {hi}.")
    return lo, hi
