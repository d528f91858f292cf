# src/partnum/cli.py

"""
Partition numbers - P(n) via Euler's pentagonal number recurrence

Description:
    Computes the partition function P(n), the number of ways to write n as a
    sum of positive integers, with a memoized evaluator. One evaluator is
    shared for the whole session, so later queries reuse earlier work.

usage: see partnum -h
"""

from __future__ import annotations

import argparse
import sys
import textwrap
import traceback
from time import perf_counter

from colorama import Fore, Style
from colorama import just_fix_windows_console

from partnum import __version__ as _ver
from partnum import config as CONFIG
from partnum.compare import compare_variants
from partnum.display import (
    print_check_report,
    print_comparison,
    print_profiles_with_descriptions,
    print_stats,
    print_table,
    print_value,
    show_intro_help,
)
from partnum.evaluator import PartitionEvaluator
from partnum.expreval import parse_int_or_expr
from partnum.fmt import format_duration
from partnum.output_manager import OutputManager, validate_output_setting
from partnum.runtime import APPLY, CFG
from partnum.runtime import current as _rt_current
from partnum.utility import (
    UserInputError,
    as_query,
    clear_screen,
    flatten_dotted,
    parse_range,
    typename,
)
from partnum.verify import REFERENCE_VALUES, check_conformance, cross_check
from partnum.workspace import seed_workspace, workspace_dir

COMMANDS = ("init", "where", "active", "profiles")


def _print_user_error(msg: str) -> None:
    """Uniform, one-line friendly error."""
    prefix = f"{Fore.RED}Error:{Style.RESET_ALL}"
    if not msg.startswith("Error:"):
        msg = f"{prefix} {msg}"
    print(msg, file=sys.stderr)


def _debug(msg: str) -> None:
    if _rt_current().debug:
        print(f"[debug] {msg}", file=sys.stderr)


def parse_query(text: str) -> int:
    """User text -> validated n within BEHAVIOUR.MAX_N."""
    n = parse_int_or_expr(text)
    if n is None:
        raise UserInputError(f"'{text}' is not an integer or integer expression.")
    n = as_query(n)
    max_n = int(CFG("BEHAVIOUR.MAX_N", 100_000))
    if n > max_n:
        raise UserInputError(f"n = {n} exceeds BEHAVIOUR.MAX_N ({max_n}). Raise it in the profile to go further.")
    return n


def _check_max_n(n: int, what: str) -> None:
    max_n = int(CFG("BEHAVIOUR.MAX_N", 100_000))
    if n > max_n:
        raise UserInputError(f"{what} {n} exceeds BEHAVIOUR.MAX_N ({max_n}).")


class Session:
    """Everything one CLI run or REPL session shares: the evaluator and the output target."""

    def __init__(self, *, output: str | None = None, quiet: bool = False):
        self.evaluator = PartitionEvaluator()
        self.output = output
        self.quiet = quiet

    def output_manager(self, n: int | None = None, *, name: str | None = None) -> OutputManager:
        """Query output goes to P{n}.txt in directory mode, reports to {name}.txt."""
        if self.output is not None:
            target = self.output
        else:
            # read OUTPUT_FILE from runtime each time so profile switches take effect
            try:
                target = validate_output_setting(str(CFG("OUTPUT.OUTPUT_FILE", "")))
            except ValueError as e:
                raise UserInputError(f"OUTPUT.OUTPUT_FILE: {e}") from None
        return OutputManager(output_file=target, quiet=self.quiet, number=n, name=name)

    def reset(self) -> None:
        self.evaluator = PartitionEvaluator()

    def query(self, n: int) -> int:
        before = self.evaluator.stats
        t0 = perf_counter()
        value = self.evaluator.evaluate(n)
        elapsed = perf_counter() - t0
        after = self.evaluator.stats
        with self.output_manager(n) as om:
            print_value(n, value, om=om, elapsed=elapsed)
        _debug(
            f"P({n}): {after.calls - before.calls} calls, "
            f"{after.computed - before.computed} new values, cache size {len(self.evaluator)}, "
            f"in {format_duration(elapsed)}"
        )
        return value

    def table(self, lo: int, hi: int) -> None:
        _check_max_n(hi, "table end")
        with self.output_manager(name=f"table_{lo}-{hi}") as om:
            print_table(self.evaluator, lo, hi, om=om)

    def check(self) -> bool:
        mismatches = check_conformance(self.evaluator)
        with self.output_manager(name="check") as om:
            print_check_report("OEIS A000041, n = 0..49", mismatches, len(REFERENCE_VALUES), om=om)
        return not mismatches

    def cross_check(self, upto: int) -> bool:
        if upto < 0:
            raise UserInputError("--cross-check needs a non-negative bound.")
        _check_max_n(upto, "cross-check bound")
        mismatches = cross_check(self.evaluator, upto)
        with self.output_manager(name=f"cross-check_{upto}") as om:
            print_check_report(f"sympy partition(), n = 0..{upto}", mismatches, upto + 1, om=om)
        return not mismatches

    def compare(self, n: int) -> None:
        naive_limit = int(CFG("COMPARE.NAIVE_LIMIT", 25))
        rows = compare_variants(n, naive_limit=naive_limit)
        with self.output_manager(name=f"compare_P{n}") as om:
            print_comparison(n, rows, om=om, naive_limit=naive_limit)

    def stats(self) -> None:
        with self.output_manager(name="stats") as om:
            print_stats(self.evaluator, om=om)


# ---- profiles ----

def _select_profile_name(explicit: str | None) -> str:
    """
    Precedence:
      1) explicit --profile
      2) last used (from workspace)
      3) 'default'
    """
    if explicit:
        return explicit
    last = CONFIG.read_current_profile()
    if last and CONFIG.has_profile(last):
        return last
    return "default"


def _apply_profile(name: str, *, force_debug: bool = False) -> None:
    selected = CONFIG.load_settings(name)
    APPLY(selected)
    if force_debug:
        _rt_current().debug = True  # a profile must not switch --debug off
    if not _rt_current().debug:
        return
    print(f"[debug] active profile: {selected.name}", file=sys.stderr)
    if selected.source:
        print(f"[debug] profile file: {selected.source}", file=sys.stderr)
    print("[debug] settings (flattened):", file=sys.stderr)
    flat = flatten_dotted(selected.as_dict())
    for k in sorted(flat, key=str.lower):
        v = flat[k]
        print(f"        {k:.<40} {v!r} ({typename(v)})", file=sys.stderr)
    print(file=sys.stderr)


# ---- argparse ----

def _build_parser() -> argparse.ArgumentParser:

    epilog = textwrap.dedent("""\
    commands:
      init        Create the workspace and copy the default profile if missing.
      where       Show the workspace path.
      active      Show the active profile.
      profiles    List profiles with their descriptions.

    examples:
      partnum 100                 P(100)
      partnum 10**3 2e3           P(1000), then P(2000) reusing P(0)..P(1000)
      partnum --table 0:20
      partnum --check --cross-check 500
      partnum --compare 20
    """)

    p = argparse.ArgumentParser(
        prog="partnum",
        description="Partition numbers: P(n) via Euler's pentagonal number recurrence",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog,
    )
    p.add_argument("items", nargs="*", metavar="N", help="integers or integer expressions, or a command")
    p.add_argument("--table", metavar="A:B", help="print P(A)..P(B)")
    p.add_argument("--check", action="store_true", help="compare P(0)..P(49) with OEIS A000041")
    p.add_argument("--cross-check", type=int, metavar="UPTO", help="compare P(0)..P(UPTO) with sympy")
    p.add_argument("--compare", metavar="N", help="naive vs cold cache vs warm cache for P(N)")
    p.add_argument("--profile", default=None, help="profile name from the workspace")
    p.add_argument("--output", default=None, help="append results to a file (also prints unless --quiet)")
    p.add_argument("--quiet", action="store_true", help="suppress screen output")
    p.add_argument("--debug", action="store_true", help="show [debug] diagnostics and full tracebacks")
    p.add_argument("--version", action="version", version=f"%(prog)s {_ver}")
    return p


def main(argv=None) -> int:
    """Thin wrapper: catch friendly errors, hide tracebacks unless debug."""
    argv = list(sys.argv[1:] if argv is None else argv)
    try:
        return _main_impl(argv)
    except UserInputError as e:
        _print_user_error(str(e))
        return 2
    except KeyboardInterrupt:
        print("Aborted by user.", file=sys.stderr)
        return 130
    except Exception as e:
        if "--debug" in argv or _rt_current().debug:
            raise
        print(f"Unexpected error: {e.__class__.__name__}: {e}", file=sys.stderr)
        print("Run with --debug for a full traceback.", file=sys.stderr)
        return 1


def _main_impl(argv: list[str]) -> int:
    just_fix_windows_console()
    args = _build_parser().parse_args(argv)

    if args.debug:
        _rt_current().debug = True

    # --- commands that need no profile ---
    command = args.items[0] if args.items and args.items[0] in COMMANDS else None
    if command == "init":
        ws, copied = seed_workspace(overwrite=False)
        print(f"Workspace ready at: {ws}")
        print(f"Copied -> profiles: {copied.get('profiles', 0)}")
        return 0
    if command == "where":
        print(f"Workspace: {workspace_dir()}")
        return 0
    if command == "profiles":
        print_profiles_with_descriptions()
        return 0

    profile_name = _select_profile_name(args.profile)
    _apply_profile(profile_name, force_debug=args.debug)
    if args.profile:
        CONFIG.write_current_profile(profile_name)

    if command == "active":
        print(f"Active profile: {profile_name}")
        return 0

    try:
        output = validate_output_setting(args.output)
    except ValueError as e:
        raise UserInputError(f"--output: {e}") from None

    session = Session(output=output, quiet=args.quiet)
    queries = [parse_query(s) for s in args.items]

    ok = True
    did_something = bool(queries)
    for n in queries:
        session.query(n)
    if args.table:
        lo, hi = parse_range(args.table)
        session.table(lo, hi)
        did_something = True
    if args.check:
        ok = session.check() and ok
        did_something = True
    if args.cross_check is not None:
        ok = session.cross_check(args.cross_check) and ok
        did_something = True
    if args.compare:
        session.compare(parse_query(args.compare))
        did_something = True

    if did_something:
        return 0 if ok else 1

    return _repl(session, profile_name)


# ---- REPL ----

def _repl(session: Session, profile_name: str) -> int:
    if not _rt_current().debug:
        clear_screen()
    print(f"{Fore.YELLOW}{Style.BRIGHT}Partition numbers v{_ver} — P(n) via Euler's pentagonal numbers{Style.RESET_ALL}")

    current_profile = profile_name
    while True:
        try:
            user_input = input(f"\nProfile: {current_profile} — Enter n or a command (h=Help, q=Quit): ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break

        low = user_input.lower()
        parts = low.split()
        try:
            if low in {"", "q", "quit"}:
                break
            if low in {"h", "help"}:
                with OutputManager(quiet=False) as om:
                    show_intro_help(om=om)
            elif low in {"p", "profiles"}:
                print_profiles_with_descriptions()
            elif low == "check":
                session.check()
            elif low == "stats":
                session.stats()
            elif low == "reset":
                session.reset()
                print("Cache cleared.")
            elif parts[0] in {"t", "table"} and len(parts) == 2:
                session.table(*parse_range(parts[1]))
            elif parts[0] == "compare" and len(parts) == 2:
                session.compare(parse_query(parts[1]))
            elif parts[0] == "debug":
                rt = _rt_current()
                if len(parts) == 2 and parts[1] in {"on", "off"}:
                    rt.debug = parts[1] == "on"
                print(f"Debug is currently {'ON' if rt.debug else 'OFF'}.")
            elif CONFIG.has_profile(user_input):
                _apply_profile(user_input)
                CONFIG.write_current_profile(user_input)
                current_profile = user_input
                print(f"Applied profile: {current_profile}")
            else:
                session.query(parse_query(user_input))
        except UserInputError as e:
            _print_user_error(str(e))
        except KeyboardInterrupt:
            print("\nInterrupted.")
        except Exception as e:
            if _rt_current().debug:
                traceback.print_exc()
            else:
                _print_user_error(f"{e.__class__.__name__}: {e}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
