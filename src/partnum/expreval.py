"""
Turn user text into a partition query.

Accepted forms:
    42   1_000   1 000   1.000.000   0x3E8   (literals, grouped digits)
    10**3   2e3   5!   (4+1)*100   2**10 - 24   (safe integer expressions)

Floats, names, calls and attribute access are rejected. Expressions that do
not parse return None from parse_int_or_expr(); expressions that parse but
break a rule (negative exponent, digit limit) raise UserInputError.
"""

import ast
import math
import operator as op
import re

from partnum.runtime import CFG
from partnum.utility import UserInputError, dec_digits

# ---- simple number parsing helpers ----
_THIN_SPACES = ("\u2009", "\u202F", "\u00A0")  # thin, narrow no-break, no-break
_SEP_CLASS = r"[ ,._\u00A0\u2009\u202F]"      # spaces/commas/dots/underscores & NBSP variants
_GROUPED_RE = re.compile(rf"^[+-]?\d{{1,3}}(?:{_SEP_CLASS}\d{{3}})+$")

# ---- allowed operators (safe subset) ----
_ALLOWED_BINOPS = {
    ast.Add:      op.add,
    ast.Sub:      op.sub,
    ast.Mult:     op.mul,
    ast.FloorDiv: op.floordiv,
    ast.Mod:      op.mod,
    ast.LShift:   op.lshift,
    ast.RShift:   op.rshift,
}
_ALLOWED_UNARYOPS = {
    ast.UAdd: op.pos,
    ast.USub: op.neg,
}

_MAX_NODES = 256  # sanity guard
_FAKE_FACT = "__fact__"

_SCI_NOTATION_TOKEN = re.compile(
    r"""
    (?<![\w.])          # not immediately after a word char or dot
    (\d+)               # mantissa (digits)
    [eE]
    ([+\-]?\d+)         # exponent (optional sign + digits)
    (?![\w.])           # not immediately before a word char or dot
    """,
    re.VERBOSE,
)


class _IntExprError(Exception):
    pass


def _max_digits() -> int:
    return int(CFG("BEHAVIOUR.MAX_DIGITS", 10_000))


def _digit_limit_error(limit: int) -> UserInputError:
    return UserInputError(
        f"number has more than {limit} decimal digits. "
        "Increase BEHAVIOUR.MAX_DIGITS in the profile or pass a smaller value."
    )


def _would_exceed_digit_limit_for_pow(base: int, exp: int, limit: int) -> bool:
    """
    Cheap lower bound on the decimal digits of base**exp, using
    base**exp >= 2**exp for |base| >= 2 and log10(2) ~ 30103/100000.
    """
    if exp <= 0 or abs(base) <= 1:
        return False
    digits_lb = 1 + (exp * 30103) // 100000
    return digits_lb > limit


def _would_exceed_digit_limit_for_binop(op_type: type, left: int, right: int, limit: int) -> bool:
    """
    Lower bounds for products and left shifts, checked before the result is built:
    a*b has at least d(a)+d(b)-1 digits, a<<s has at least d(a)+floor(s*log10(2)).
    """
    if left == 0 or right == 0:
        return False
    if op_type is ast.Mult:
        return dec_digits(left) + dec_digits(right) - 1 > limit
    if op_type is ast.LShift:
        return dec_digits(left) + (right * 30103) // 100000 > limit
    return False


def _rewrite_scientific_notation(expr: str) -> str:
    """
    Rewrite '1e3' -> '10**3' and '2E5' -> '(2)*10**5'.
    Negative exponents are not integers and are rejected.
    """

    def repl(m: re.Match) -> str:
        mant, exp_str = m.group(1), m.group(2)
        exp = int(exp_str)
        if exp < 0:
            raise _IntExprError("scientific notation with negative exponent is not an integer")
        if int(mant) == 0:
            return "0"
        if mant == "1":
            return f"10**({exp})"
        return f"({mant})*10**({exp})"

    return _SCI_NOTATION_TOKEN.sub(repl, expr)


def _rewrite_factorial(expr: str) -> str:
    """
    Rewrite postfix factorial 'x!' into '__fact__(x)'.

    Handles 5!, (3+2)!  Rejects !5, 3!! and (3!)!
    """
    out: list[str] = []
    pos = 0  # start of the next chunk to copy
    for i, ch in enumerate(expr):
        if ch != "!":
            continue
        j = i - 1
        while j >= 0 and expr[j].isspace():
            j -= 1
        if j < 0:
            raise _IntExprError("factorial '!' requires a left operand")

        if expr[j] == ")":
            level = 0
            k = j
            while k >= 0:
                if expr[k] == ")":
                    level += 1
                elif expr[k] == "(":
                    level -= 1
                    if level == 0:
                        break
                k -= 1
            if k < 0:
                raise _IntExprError("unbalanced parentheses before '!'")
            start = k
        else:
            if not (expr[j].isalnum() or expr[j] == "_"):
                raise _IntExprError("factorial '!' has invalid left operand")
            k = j
            while k >= 0 and (expr[k].isalnum() or expr[k] == "_"):
                k -= 1
            start = k + 1

        if start < pos:
            raise _IntExprError("nested factorial '!' is not supported")

        out.append(expr[pos:start])
        out.append(f"{_FAKE_FACT}({expr[start:j + 1]})")
        pos = i + 1

    out.append(expr[pos:])
    return "".join(out)


def _eval_int_expr(expr: str) -> int:
    """
    Evaluate a *safe* integer expression.

    Allowed: integers (incl. underscores), parentheses, + - * // % ** << >>,
             unary +/-, and the synthetic __fact__(...) wrapper for factorial.
    BEHAVIOUR.MAX_DIGITS is enforced on literals, before powers, products and
    left shifts are built, and on the result.
    """
    limit = _max_digits()
    expr = _rewrite_factorial(_rewrite_scientific_notation(expr))

    try:
        tree = ast.parse(expr.strip(), mode="eval")
    except SyntaxError as e:
        raise _IntExprError("invalid integer expression") from e

    if sum(1 for _ in ast.walk(tree)) > _MAX_NODES:
        raise _IntExprError("expression too large")

    def _eval(node) -> int:
        if isinstance(node, ast.Constant):
            val = node.value
            if isinstance(val, bool) or not isinstance(val, int):
                raise _IntExprError("only integer literals are allowed")
            if dec_digits(val) > limit:
                raise _digit_limit_error(limit)
            return val

        if isinstance(node, ast.UnaryOp) and type(node.op) in _ALLOWED_UNARYOPS:
            return _ALLOWED_UNARYOPS[type(node.op)](_eval(node.operand))

        if isinstance(node, ast.BinOp):
            op_type = type(node.op)
            if op_type is ast.Pow:
                base = _eval(node.left)
                exp = _eval(node.right)
                if exp < 0:
                    raise UserInputError("negative exponents are not allowed in integer expressions.")
                if _would_exceed_digit_limit_for_pow(base, exp, limit):
                    raise _digit_limit_error(limit)
                return base ** exp
            if op_type in _ALLOWED_BINOPS:
                left = _eval(node.left)
                right = _eval(node.right)
                if op_type in (ast.LShift, ast.RShift) and right < 0:
                    raise UserInputError("negative shift counts are not allowed in integer expressions.")
                if _would_exceed_digit_limit_for_binop(op_type, left, right, limit):
                    raise _digit_limit_error(limit)
                try:
                    return _ALLOWED_BINOPS[op_type](left, right)
                except ZeroDivisionError:
                    raise UserInputError("division by zero in expression.") from None

        if isinstance(node, ast.Call):
            if isinstance(node.func, ast.Name) and node.func.id == _FAKE_FACT and len(node.args) == 1 and not node.keywords:
                val = _eval(node.args[0])
                if val < 0:
                    raise UserInputError("factorial requires a non-negative integer.")
                # n! has more than n digits for n >= 25
                if val > max(limit, 25):
                    raise _digit_limit_error(limit)
                return math.factorial(val)
            raise _IntExprError("function calls are not allowed")

        raise _IntExprError(f"unsupported syntax: {type(node).__name__}")

    value = _eval(tree.body)
    if dec_digits(value) > limit:
        raise _digit_limit_error(limit)
    return value


def _parse_int_literal(text: str | None) -> int | None:
    """Accepts: 42  -7  1_000_000  0xFF  0b1010  123.456.789  123 456 789
       Rejects: 3.14  1,23  12.34.56  0xG1"""
    if text is None:
        return None
    s = text.strip()
    if not s:
        return None

    for ch in _THIN_SPACES:
        s = s.replace(ch, " ")

    if s.lower().lstrip("+-").startswith(("0x", "0b", "0o")):
        try:
            return int(s.replace("_", ""), 0)
        except ValueError:
            return None

    if re.fullmatch(r"[+-]?\d[\d_]*", s):
        try:
            return int(s.replace("_", ""))
        except ValueError:
            return None

    if _GROUPED_RE.match(s):
        return int(re.sub(_SEP_CLASS, "", s))

    return None


# ---- public entry point ----
def parse_int_or_expr(s: str) -> int | None:
    """Return the integer s denotes, or None when s is not a number at all."""
    n = _parse_int_literal(s)
    if n is not None:
        limit = _max_digits()
        if dec_digits(n) > limit:
            raise _digit_limit_error(limit)
        return n
    if not s or not s.strip():
        return None
    try:
        return _eval_int_expr(s)
    except _IntExprError:
        return None
